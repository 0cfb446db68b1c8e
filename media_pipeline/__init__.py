"""Lecture media pipeline: job queue, media processing and transcript search."""

__version__ = "0.1.0"
