"""hirefee — recruitment commission engine."""

__version__ = "0.1.0"
