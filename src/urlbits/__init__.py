"""urlbits: extract hosts, paths, query parameters and credentials from streams of URLs."""

__version__ = "0.1.0"
