"""
cwalk Command-Line Interface
============================

This package provides the command-line tools for cwalk:

- **cwrun**: run a JSON AST document and print the returned value

Each tool is implemented as a Click-based CLI application with
comprehensive help and error reporting.
"""

__all__ = ["cwrun"]
