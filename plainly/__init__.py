"""Plainly: voice-note transcription and structured summaries."""

__version__ = "0.1.0"
