"""Shared helpers used across widget modules."""
