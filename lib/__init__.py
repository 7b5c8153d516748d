"""Shared helpers that are not specific to matching."""
