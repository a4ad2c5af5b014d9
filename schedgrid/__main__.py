"""
Package entry point.

Allows running the application via:

    python -m schedgrid

This simply forwards execution to schedgrid.cli.main().
"""

from schedgrid.cli import main

if __name__ == "__main__":
    main()
