"""Observability helpers shared by every app."""
