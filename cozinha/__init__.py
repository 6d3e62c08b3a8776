"""Cozinha: a Brazilian-cuisine chat assistant backed by an LLM."""

__version__ = "0.1.0"
