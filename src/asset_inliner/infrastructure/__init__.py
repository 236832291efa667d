"""Caches and other runtime infrastructure."""
