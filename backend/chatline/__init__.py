"""Chatline: multi-party chat backend with real-time fan-out."""

__version__ = "0.1.0"
