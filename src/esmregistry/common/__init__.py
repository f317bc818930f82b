"""Shared helpers used across the registry modules."""
