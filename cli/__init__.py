"""
HuffIndex CLI
=============
Report rendering for the command-line entry point (main.py).
"""
