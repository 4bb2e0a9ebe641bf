"""Assemble Docker build contexts for functions from language templates."""

__version__ = "0.1.0"
