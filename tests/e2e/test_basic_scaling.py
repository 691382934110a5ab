"""Basic E2E tests for the kubernetes workload scaler."""

import pytest
from workloadscaler.cluster import KubernetesPodLister
from workloadscaler.metadata import ScalerConfig
from workloadscaler.metrics import KubernetesWorkloadScaler
from .conftest import deployment_manifest, wait_for_deployment_ready, wait_for_pod_count


@pytest.mark.e2e
class TestWorkloadCounting:
    """Count real pods in a kind cluster."""

    @pytest.mark.asyncio
    async def test_counts_running_pods(self, k8s_client, apps_client, namespace):
        """Test that the scaler sees the pods of a ready deployment."""
        apps_client.create_namespaced_deployment(
            namespace=namespace, body=deployment_manifest(namespace, "test-app", 2)
        )
        assert wait_for_deployment_ready(apps_client, namespace, "test-app", timeout=90)

        scaler = KubernetesWorkloadScaler(
            KubernetesPodLister(core_api=k8s_client),
            ScalerConfig(
                namespace=namespace,
                trigger_metadata={"podSelector": "app=test-app,tier in (web)", "value": "1"},
                scaler_index=0,
            ),
        )

        assert await scaler.is_active() is True
        specs = await scaler.get_metric_spec_for_scaling()
        metrics = await scaler.get_metrics(specs[0].external.metric_name)
        assert metrics[0].value == 2

    @pytest.mark.asyncio
    async def test_inactive_after_scale_to_zero(self, k8s_client, apps_client, namespace):
        """Test that a workload scaled to zero is reported inactive."""
        apps_client.create_namespaced_deployment(
            namespace=namespace, body=deployment_manifest(namespace, "idle-app", 1)
        )
        assert wait_for_deployment_ready(apps_client, namespace, "idle-app", timeout=90)

        apps_client.patch_namespaced_deployment_scale(
            "idle-app", namespace, {"spec": {"replicas": 0}}
        )
        assert wait_for_pod_count(k8s_client, namespace, "app=idle-app", 0, timeout=90)

        scaler = KubernetesWorkloadScaler(
            KubernetesPodLister(core_api=k8s_client),
            ScalerConfig(
                namespace=namespace,
                trigger_metadata={"podSelector": "app=idle-app", "value": "1"},
            ),
        )

        assert await scaler.is_active() is False
