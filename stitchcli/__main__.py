"""Main entry point when executing stitchcli as a package.

This allows running the package using python -m stitchcli.
"""

from stitchcli.main import cli_entry_point

if __name__ == "__main__":
    cli_entry_point()
