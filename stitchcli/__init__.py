"""stitchcli: rate-limited, cached and paginated access to the Stitch Labs API."""

__version__ = "0.3.0"
