"""Lunchbox.ai chat backend."""
