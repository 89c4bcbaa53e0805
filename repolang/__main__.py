"""
__main__.py - Entry point for `python -m repolang`.

Delegates to the Typer CLI defined in cli.py.
"""

from repolang.cli import main

if __name__ == "__main__":
    main()
