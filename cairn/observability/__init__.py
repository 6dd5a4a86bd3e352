"""Observability: structured logging and metrics.

structlog for logging, Prometheus counters for orchestration activity.
"""
