"""
Entry point for running the launcher CLI as a module.

Usage: python -m opendex_launcher.cli [args passed to the launcher binary]
"""

from .main import main

if __name__ == "__main__":
    main()
