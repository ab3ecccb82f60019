"""StudioFlow: explore GitHub repositories with an LLM at your side."""

__version__ = "0.1.0"
