"""
reposcope - find files and content across many local git repositories.

Searches every configured repository concurrently with fd and ripgrep when
they are installed, falls back to a built-in directory walk for file search,
and lets the user pick a result with fzf or a numbered prompt.
"""

__version__ = "0.1.0"
