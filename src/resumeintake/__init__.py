"""Résumé ingestion and extraction verification."""

__version__ = "0.1.0"
