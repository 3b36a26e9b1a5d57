"""Reddit dashboard backend: fetch, normalize, rate-limit and persist Reddit data."""

__version__ = "1.0.0"
