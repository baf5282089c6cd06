"""Shared infrastructure: configuration, errors, logging, CLI."""
