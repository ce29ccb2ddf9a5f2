"""Tutor services."""
