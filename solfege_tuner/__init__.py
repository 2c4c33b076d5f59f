"""Solfege Tuner - real-time pitch detection mapped to movable-doh solfege."""

__version__ = "0.1.0"
