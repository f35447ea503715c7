"""Shared helpers for logging and CSV tables."""
