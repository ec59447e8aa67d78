"""Build and decode Lustre server monitoring metric strings, with config and logging helpers."""

__version__ = "0.1.0"