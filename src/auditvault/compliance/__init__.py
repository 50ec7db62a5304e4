"""Compliance features: audit record retention and archival."""
