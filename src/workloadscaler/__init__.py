"""Kubernetes workload scaler: pod-count metric source for external autoscalers."""

__version__ = "0.1.0"
