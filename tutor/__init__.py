"""Tutoring-session engine: modes, prompts, progress and grading."""
