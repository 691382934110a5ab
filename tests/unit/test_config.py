"""Unit tests for logging and cluster configuration."""

import logging

import pytest
from unittest.mock import patch
from kubernetes.config import ConfigException
from pythonjsonlogger import jsonlogger
from workloadscaler.config import load_kubernetes_config, setup_logging


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_setup_logging_is_idempotent(self, monkeypatch):
        """Test that repeated calls add a single JSON handler."""
        monkeypatch.setenv("LOG_LEVEL", "debug")
        root = logging.getLogger()
        saved_handlers, saved_level = list(root.handlers), root.level
        try:
            setup_logging()
            setup_logging()
            json_handlers = [
                h for h in root.handlers
                if isinstance(h.formatter, jsonlogger.JsonFormatter)
            ]
            assert len(json_handlers) == 1
            assert root.level == logging.DEBUG
        finally:
            root.handlers = saved_handlers
            root.setLevel(saved_level)


class TestLoadKubernetesConfig:
    """Tests for load_kubernetes_config."""

    def test_prefers_in_cluster(self):
        """Test that in-cluster config is used when available."""
        with patch("kubernetes.config.load_incluster_config") as incluster, patch(
            "kubernetes.config.load_kube_config"
        ) as kubeconfig:
            load_kubernetes_config()
        incluster.assert_called_once()
        kubeconfig.assert_not_called()

    def test_falls_back_to_kubeconfig(self):
        """Test the kubeconfig fallback."""
        with patch(
            "kubernetes.config.load_incluster_config", side_effect=ConfigException("no")
        ), patch("kubernetes.config.load_kube_config") as kubeconfig:
            load_kubernetes_config()
        kubeconfig.assert_called_once()

    def test_raises_when_nothing_loads(self):
        """Test that the error is raised when neither source works."""
        with patch(
            "kubernetes.config.load_incluster_config", side_effect=ConfigException("no")
        ), patch("kubernetes.config.load_kube_config", side_effect=ConfigException("no")):
            with pytest.raises(ConfigException):
                load_kubernetes_config()
