"""Prometheus metrics for the journals."""
