"""safe-curl: analyze shell scripts before running them."""

__version__ = "2.0.0"
