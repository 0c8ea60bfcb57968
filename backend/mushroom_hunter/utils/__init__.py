"""Helpers shared across services: pagination and authorization checks."""
