"""Prometheus metrics for inkmatch."""
