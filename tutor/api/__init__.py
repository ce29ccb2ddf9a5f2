"""Tutor API routers."""
