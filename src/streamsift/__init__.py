"""StreamSift - media stream metadata parsing and track selection."""

__version__ = "0.1.0"
