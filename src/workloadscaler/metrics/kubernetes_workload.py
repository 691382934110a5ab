"""Kubernetes workload scaler: scales on the number of live pods."""

import logging
from typing import Iterable, List, Optional

from ..cluster import PodLister, PodPhase
from ..exceptions import ClusterQueryFailure
from ..metadata import ScalerConfig, WorkloadMetadata, parse_workload_metadata
from ..selectors import LabelSelector
from .base import Scaler
from .publisher import (
    ExternalMetricValue,
    MetricSpec,
    build_metric_spec,
    build_metric_value,
)

logger = logging.getLogger(__name__)

# Pods in these phases are finished or unreachable and do not count
COUNT_IGNORES_PHASES = frozenset(
    {PodPhase.SUCCEEDED.value, PodPhase.FAILED.value, PodPhase.UNKNOWN.value}
)


def get_count_value(phase: Optional[str]) -> int:
    """Return 1 if a pod in this phase counts towards the workload, else 0."""
    return 0 if phase in COUNT_IGNORES_PHASES else 1


def count_phases(phases: Iterable[Optional[str]]) -> int:
    return sum(get_count_value(phase) for phase in phases)


class PodCounter:
    """Counts non-terminal pods matching a workload's selector."""

    def __init__(self, pod_lister: PodLister):
        self.pod_lister = pod_lister
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    async def count_active(self, metadata: WorkloadMetadata) -> int:
        """
        Count pods in metadata.namespace matching metadata.pod_selector.

        Returns:
            Number of pods not in Succeeded, Failed or Unknown

        Raises:
            ClusterQueryFailure: If listing pods fails
        """
        try:
            phases = await self.pod_lister.list_pods(
                metadata.namespace, metadata.pod_selector
            )
        except Exception as e:
            self.logger.error(
                f"Error listing pods in {metadata.namespace} "
                f"matching {metadata.pod_selector}: {e}"
            )
            raise ClusterQueryFailure(
                f"error inspecting kubernetes workload: {e}", cause=e
            ) from e

        count = count_phases(phases)
        self.logger.debug(
            f"Workload {metadata.namespace}/{metadata.pod_selector}: "
            f"{count} active of {len(phases)} pods"
        )
        return count


class KubernetesWorkloadScaler(Scaler):
    """
    Scaler for the number of running/pending pods behind a label selector.

    Trigger metadata:
        podSelector: label selector expression, required
        value: target pods per replica, integer > 0, required
    """

    def __init__(self, pod_lister: PodLister, config: ScalerConfig):
        super().__init__(config)
        # Raises ConfigError; no scaler is built on bad metadata
        self.metadata = parse_workload_metadata(config)
        self.counter = PodCounter(pod_lister)

    async def is_active(self) -> bool:
        pods = await self.counter.count_active(self.metadata)
        return pods > 0

    async def get_metric_spec_for_scaling(self) -> List[MetricSpec]:
        return build_metric_spec(self.metadata)

    async def get_metrics(
        self, metric_name: str, metric_selector: Optional[LabelSelector] = None
    ) -> List[ExternalMetricValue]:
        # metric_selector is not applied: the count always uses podSelector
        pods = await self.counter.count_active(self.metadata)
        metric = build_metric_value(metric_name, pods)
        self.logger.info(f"Kubernetes workload metric {metric_name}: {pods}")
        return [metric]

    async def close(self):
        """Nothing to release; the pod lister is owned by the caller."""
        pass
