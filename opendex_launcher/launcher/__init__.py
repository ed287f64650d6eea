"""
Launching the opendex-docker launcher binary.
"""

from .process import ExitCode, Launcher

__all__ = ["ExitCode", "Launcher"]
