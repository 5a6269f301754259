"""Embedded labeled property graph with snapshot persistence."""
