"""
Entry point for running the launcher as a module.

Usage: python -m opendex_launcher [args passed to the launcher binary]
"""

from opendex_launcher.cli.main import main

if __name__ == "__main__":
    main()
