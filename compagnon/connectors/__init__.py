"""Outbound data-source connectors."""
