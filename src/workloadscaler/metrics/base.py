"""Base scaler interface."""

from abc import ABC, abstractmethod
from typing import List, Optional
import logging

from ..metadata import ScalerConfig
from ..selectors import LabelSelector
from .publisher import ExternalMetricValue, MetricSpec

logger = logging.getLogger(__name__)


class Scaler(ABC):
    """Contract every metric source exposes to the autoscaling controller."""

    def __init__(self, config: ScalerConfig):
        """
        Initialize the scaler.

        Args:
            config: Namespace, trigger metadata and scaler index from the host
        """
        self.config = config
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @abstractmethod
    async def is_active(self) -> bool:
        """
        Report whether the target should be scaled up from zero.

        Raises:
            ClusterQueryFailure: If the underlying query fails
        """
        pass

    @abstractmethod
    async def get_metric_spec_for_scaling(self) -> List[MetricSpec]:
        """
        Describe the metrics this scaler serves and their targets.

        Must not perform I/O.
        """
        pass

    @abstractmethod
    async def get_metrics(
        self, metric_name: str, metric_selector: Optional[LabelSelector] = None
    ) -> List[ExternalMetricValue]:
        """
        Fetch current values for a metric.

        Args:
            metric_name: Name the controller asked for
            metric_selector: Selector sent alongside the name

        Raises:
            ClusterQueryFailure: If the underlying query fails
        """
        pass

    async def close(self):
        """
        Clean up resources (override if needed).
        """
        pass
