"""Public-art mass import: duplicate detection and batch import pipeline."""

__version__ = "0.1.0"
