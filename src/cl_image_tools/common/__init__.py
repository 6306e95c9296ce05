"""Shared schemas, settings and error kinds."""
