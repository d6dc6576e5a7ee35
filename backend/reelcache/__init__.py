"""ReelCache: response caching for the film streaming API."""

__version__ = "0.1.0"
