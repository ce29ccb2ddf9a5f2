"""Prompt templates for the tutoring session."""
