"""Metric sources for the workload scaler."""

from .base import Scaler
from .kubernetes_workload import KubernetesWorkloadScaler, PodCounter
from .publisher import ExternalMetricValue, MetricSpec

__all__ = [
    "Scaler",
    "KubernetesWorkloadScaler",
    "PodCounter",
    "ExternalMetricValue",
    "MetricSpec",
]
