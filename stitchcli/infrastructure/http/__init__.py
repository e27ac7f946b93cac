"""HTTP transport for the Stitch Labs API (httpx based)."""
