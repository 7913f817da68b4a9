"""Command-line interface for daiy."""

from .app import app, main

__all__ = ["app", "main"]
