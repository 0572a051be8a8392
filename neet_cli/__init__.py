"""NEET CLI: terminal assistant for NEET exam preparation."""

__version__ = "0.1.0"
