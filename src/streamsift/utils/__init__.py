"""Shared helpers: logging, language codes and unit suffixes."""
