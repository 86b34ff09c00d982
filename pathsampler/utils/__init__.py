"""Shared helpers: error types and SE3 conversions."""
