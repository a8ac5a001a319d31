"""Main entry point when executing gamereviews as a package.

This allows running the package using python -m gamereviews.
"""

from gamereviews.main import cli_entry_point

if __name__ == "__main__":
    cli_entry_point()
