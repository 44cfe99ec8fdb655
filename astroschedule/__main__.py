"""
Package entry point.

Allows running the application via:

    python -m astroschedule

This simply forwards execution to astroschedule.cli.main().
"""

from astroschedule.cli import main

if __name__ == "__main__":
    main()
