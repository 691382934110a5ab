"""Metric spec and value shapes returned to the autoscaling controller."""

import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from ..config import Config
from ..metadata import WorkloadMetadata

# Anything outside this set is illegal in an external metric name
_ILLEGAL_METRIC_CHARS = re.compile(r"[^A-Za-z0-9_-]")


class MetricTarget(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str = Config.TARGET_TYPE
    average_value: str


class ExternalMetricSource(BaseModel):
    model_config = ConfigDict(frozen=True)

    metric_name: str
    target: MetricTarget


class MetricSpec(BaseModel):
    """An ``autoscaling/v2`` external metric spec."""

    model_config = ConfigDict(frozen=True)

    type: str = Config.METRIC_TYPE
    external: ExternalMetricSource

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "external": {
                "metric": {"name": self.external.metric_name},
                "target": {
                    "type": self.external.target.type,
                    "averageValue": self.external.target.average_value,
                },
            },
        }


class ExternalMetricValue(BaseModel):
    """A single sample served through ``external.metrics.k8s.io``."""

    model_config = ConfigDict(frozen=True)

    metric_name: str
    value: int
    timestamp: datetime

    def to_dict(self) -> Dict[str, Any]:
        ts = self.timestamp.astimezone(timezone.utc).replace(microsecond=0, tzinfo=None)
        return {
            "metricName": self.metric_name,
            "value": str(self.value),
            "timestamp": ts.isoformat() + "Z",
        }


def normalize_string(s: str) -> str:
    """Replace characters that are illegal in a metric name with '-'."""
    return _ILLEGAL_METRIC_CHARS.sub("-", s)


def generate_metric_name_with_index(scaler_index: int, metric_name: str) -> str:
    """Prefix a metric name with the scaler's ordinal."""
    return f"{scaler_index}-{metric_name}"


def build_metric_spec(metadata: WorkloadMetadata) -> List[MetricSpec]:
    """
    Build the metric spec the controller scales on.

    The target is an average value, so the controller drives replicas
    towards ``pod_count / metadata.value``.
    """
    name = generate_metric_name_with_index(
        metadata.scaler_index, normalize_string(f"workload-{metadata.namespace}")
    )
    return [
        MetricSpec(
            external=ExternalMetricSource(
                metric_name=name,
                target=MetricTarget(average_value=str(metadata.value)),
            )
        )
    ]


def build_metric_value(
    metric_name: str, count: int, now: Optional[datetime] = None
) -> ExternalMetricValue:
    """Wrap a pod count as a metric sample under the requested name."""
    return ExternalMetricValue(
        metric_name=metric_name,
        value=count,
        timestamp=now or datetime.now(timezone.utc),
    )
