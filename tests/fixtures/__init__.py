"""Test fixtures for opendex-launcher tests.

Fixtures are organized by type:

- archives: launcher.zip builders (entries with modes, directories)
- directories: opendex-docker home directories and version caches

Import fixtures in your tests using:
    from tests.fixtures.archives import build_zip
    from tests.fixtures.directories import home_dir
"""

__all__ = [
    "archives",
    "directories",
]
