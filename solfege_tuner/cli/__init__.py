"""Command-line interface for Solfege Tuner."""

from .main import main

__all__ = ["main"]
