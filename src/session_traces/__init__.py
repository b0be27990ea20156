"""Browse AI-assistant session logs as turn-structured conversations."""

__version__ = "0.1.0"
