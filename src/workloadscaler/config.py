"""Configuration management for the workload scaler."""

import os
import logging
from typing import Optional

from kubernetes import config as k8s_config
from pythonjsonlogger import jsonlogger

logger = logging.getLogger(__name__)


def setup_logging():
    """Configure structured logging for the scaler."""
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()

    root = logging.getLogger()
    root.setLevel(log_level)

    # Calling twice must not duplicate output
    for existing in root.handlers:
        if isinstance(existing.formatter, jsonlogger.JsonFormatter):
            return root

    handler = logging.StreamHandler()
    formatter = jsonlogger.JsonFormatter(
        "%(asctime)s %(name)s %(levelname)s %(message)s"
    )
    handler.setFormatter(formatter)
    root.addHandler(handler)

    return root


def _optional_float(name: str) -> Optional[float]:
    raw = os.getenv(name, "")
    if not raw:
        return None
    return float(raw)


class Config:
    """Scaler configuration."""

    # Namespace used by the probe CLI when none is given
    NAMESPACE = os.getenv("WATCH_NAMESPACE", "") or "default"

    # Request timeout handed to the pod listing call; None leaves it to the client
    LIST_TIMEOUT_SECONDS = _optional_float("LIST_TIMEOUT_SECONDS")

    # Trigger metadata keys
    POD_SELECTOR_KEY = "podSelector"
    VALUE_KEY = "value"

    # Metric shape
    METRIC_TYPE = "External"
    TARGET_TYPE = "AverageValue"
    TRIGGER_TYPE = "kubernetes-workload"


def load_kubernetes_config():
    """Load in-cluster configuration, falling back to the local kubeconfig."""
    try:
        k8s_config.load_incluster_config()
        logger.info("Loaded in-cluster Kubernetes configuration")
    except k8s_config.ConfigException:
        try:
            k8s_config.load_kube_config()
            logger.info("Loaded kubeconfig")
        except k8s_config.ConfigException:
            logger.error("Failed to load Kubernetes configuration")
            raise
