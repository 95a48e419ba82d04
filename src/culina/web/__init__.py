"""Culina - HTTP API."""
