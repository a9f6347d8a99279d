"""Regime configuration loading and validation."""
