"""Shared LLM transport, wire schemas and HTTP routes."""
