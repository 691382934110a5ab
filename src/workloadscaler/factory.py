"""Build scalers from a trigger type and host-supplied config."""

import logging

from .cluster import PodLister
from .config import Config
from .exceptions import ConfigError
from .metadata import ScalerConfig
from .metrics import KubernetesWorkloadScaler, Scaler

logger = logging.getLogger(__name__)


def create_scaler(trigger_type: str, pod_lister: PodLister, config: ScalerConfig) -> Scaler:
    """
    Create a scaler based on the trigger type.

    Args:
        trigger_type: Trigger type as written in the scaled object
        pod_lister: Cluster query the scaler counts pods with
        config: Namespace, trigger metadata and scaler index

    Returns:
        Scaler instance

    Raises:
        ConfigError: If the trigger type is unknown or its metadata is invalid
    """
    normalized = trigger_type.strip().lower()

    if normalized == Config.TRIGGER_TYPE:
        try:
            return KubernetesWorkloadScaler(pod_lister, config)
        except ConfigError as e:
            logger.error(f"Error parsing kubernetes workload metadata: {e}")
            raise

    logger.error(f"Unknown trigger type: {trigger_type}")
    raise ConfigError(f"no scaler found for type: {trigger_type}")
