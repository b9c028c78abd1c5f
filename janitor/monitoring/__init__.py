"""Prometheus metrics for the janitor."""
