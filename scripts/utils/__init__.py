"""Shared helpers: configuration, logging, template rendering."""
