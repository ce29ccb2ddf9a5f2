"""Tutor utilities."""
