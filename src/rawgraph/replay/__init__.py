"""Offline replay of captured search responses."""

from .cli import load_responses, main, replay

__all__ = ["load_responses", "main", "replay"]
