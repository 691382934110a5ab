"""Pod listing against the Kubernetes API."""

import asyncio
import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Optional

from kubernetes import client

from .config import Config
from .selectors import LabelSelector

logger = logging.getLogger(__name__)


class PodPhase(str, Enum):
    """Pod lifecycle phases reported in ``status.phase``."""

    PENDING = "Pending"
    RUNNING = "Running"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    UNKNOWN = "Unknown"


class PodLister(ABC):
    """Cluster query used by the workload scaler."""

    @abstractmethod
    async def list_pods(
        self, namespace: str, label_selector: LabelSelector
    ) -> List[Optional[str]]:
        """
        List pods in a namespace matching a selector.

        Args:
            namespace: Namespace to scope the query to
            label_selector: Selector the pods must match

        Returns:
            The ``status.phase`` of every matching pod (None when unset)

        Raises:
            Exception: Whatever the underlying transport raises
        """
        pass


class KubernetesPodLister(PodLister):
    """PodLister backed by the official kubernetes client."""

    def __init__(
        self,
        core_api: Optional[client.CoreV1Api] = None,
        timeout_seconds: Optional[float] = None,
    ):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.core_api = core_api or client.CoreV1Api()
        self.timeout_seconds = (
            timeout_seconds if timeout_seconds is not None else Config.LIST_TIMEOUT_SECONDS
        )

    def _list(self, namespace: str, label_selector: str) -> List[Optional[str]]:
        kwargs = {"label_selector": label_selector}
        if self.timeout_seconds is not None:
            kwargs["_request_timeout"] = self.timeout_seconds

        pod_list = self.core_api.list_namespaced_pod(namespace, **kwargs)
        return [pod.status.phase if pod.status else None for pod in pod_list.items]

    async def list_pods(
        self, namespace: str, label_selector: LabelSelector
    ) -> List[Optional[str]]:
        selector = str(label_selector)
        self.logger.debug(f"Listing pods in {namespace} matching {selector}")
        # The client is synchronous; run it off the event loop so callers can cancel
        return await asyncio.to_thread(self._list, namespace, selector)
