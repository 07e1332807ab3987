"""Task tracker with a single global work timer and per-task session accounting."""

__version__ = "0.1.0"
