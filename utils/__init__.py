"""Helpers shared by the store and the CLI: field validation and output rendering."""
