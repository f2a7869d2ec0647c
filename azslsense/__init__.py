"""Heuristic symbol resolution and validation for AZSL shader sources."""

__version__ = "0.1.0"
