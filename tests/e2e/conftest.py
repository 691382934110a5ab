"""Pytest configuration for E2E tests."""

import os
import shutil
import subprocess
import time

import pytest
from kubernetes import client, config


@pytest.fixture(scope="session")
def k8s_cluster():
    """
    Create a kind cluster for testing.

    This fixture creates a kind cluster before tests and tears it down after.
    Set RUN_E2E=1 to enable it.
    """
    if not os.getenv("RUN_E2E"):
        pytest.skip("E2E tests disabled; set RUN_E2E=1")
    if shutil.which("kind") is None:
        pytest.skip("kind is not installed")

    cluster_name = "workloadscaler-test"

    print(f"\nCreating kind cluster: {cluster_name}")
    subprocess.run(
        ["kind", "create", "cluster", "--name", cluster_name, "--wait", "60s"],
        check=True,
    )

    config.load_kube_config()

    yield cluster_name

    print(f"\nDeleting kind cluster: {cluster_name}")
    subprocess.run(
        ["kind", "delete", "cluster", "--name", cluster_name],
        check=False,  # Don't fail if cluster is already gone
    )


@pytest.fixture(scope="session")
def k8s_client(k8s_cluster):
    """Get Kubernetes client."""
    return client.CoreV1Api()


@pytest.fixture(scope="session")
def apps_client(k8s_cluster):
    """Get Kubernetes apps client."""
    return client.AppsV1Api()


@pytest.fixture
def namespace(k8s_client):
    """Create a test namespace."""
    namespace_name = "test-workloadscaler"

    namespace_manifest = client.V1Namespace(
        metadata=client.V1ObjectMeta(name=namespace_name)
    )

    try:
        k8s_client.create_namespace(namespace_manifest)
    except client.ApiException as e:
        if e.status != 409:  # Ignore if already exists
            raise

    yield namespace_name

    try:
        k8s_client.delete_namespace(namespace_name)
    except client.ApiException:
        pass


def deployment_manifest(namespace, name, replicas):
    """Build a small nginx deployment labelled app=<name>."""
    return {
        "apiVersion": "apps/v1",
        "kind": "Deployment",
        "metadata": {"name": name, "namespace": namespace},
        "spec": {
            "replicas": replicas,
            "selector": {"matchLabels": {"app": name}},
            "template": {
                "metadata": {"labels": {"app": name, "tier": "web"}},
                "spec": {
                    "containers": [
                        {
                            "name": "app",
                            "image": "nginx:alpine",
                            "resources": {
                                "requests": {"cpu": "10m", "memory": "32Mi"},
                                "limits": {"cpu": "50m", "memory": "64Mi"},
                            },
                        }
                    ]
                },
            },
        },
    }


def wait_for_deployment_ready(apps_client, namespace, name, timeout=120):
    """Wait for a deployment to be ready."""
    start_time = time.time()

    while time.time() - start_time < timeout:
        try:
            deployment = apps_client.read_namespaced_deployment(name, namespace)

            if (
                deployment.status.ready_replicas is not None
                and deployment.status.ready_replicas == deployment.spec.replicas
            ):
                return True

        except client.ApiException:
            pass

        time.sleep(2)

    return False


def wait_for_pod_count(k8s_client, namespace, label_selector, expected, timeout=120):
    """Wait until exactly `expected` pods match the selector."""
    start_time = time.time()

    while time.time() - start_time < timeout:
        pods = k8s_client.list_namespaced_pod(namespace, label_selector=label_selector)
        if len(pods.items) == expected:
            return True
        time.sleep(2)

    return False
