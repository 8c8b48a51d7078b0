"""Render context construction."""
