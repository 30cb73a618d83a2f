"""Models, repositories, request types and helpers for an image synchronisation service."""

__version__ = "0.1.0"