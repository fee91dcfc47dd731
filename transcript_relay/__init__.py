"""Transcript relay: streams LLM responses to speech transcripts over WebSocket."""

__version__ = "1.0.0"
