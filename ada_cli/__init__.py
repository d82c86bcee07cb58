"""Ada, a terminal assistant that routes each request to a narrowly scoped tool."""

__version__ = "0.1.0"
