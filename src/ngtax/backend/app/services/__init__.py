"""Calculation services backing the HTTP routes."""
