"""
opendex-launcher - self-updating launcher for opendex-docker.

Resolves the launcher binary built for a branch or release tag of
opendex-docker, caches it per commit, and runs it.
"""

__version__ = "0.1.0"
