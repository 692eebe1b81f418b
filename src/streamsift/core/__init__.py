"""Parsing, filtering, sorting and default-track resolution."""
