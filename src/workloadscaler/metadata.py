"""Trigger metadata parsing for the Kubernetes workload scaler."""

import logging
import re
from typing import Any, Dict, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .config import Config
from .exceptions import (
    InvalidSelectorSyntaxError,
    InvalidValueError,
    MissingFieldError,
)
from .selectors import LabelSelector

logger = logging.getLogger(__name__)

INT64_MAX = 2**63 - 1
_DECIMAL_RE = re.compile(r"^[+-]?[0-9]+$")


class ScalerConfig(BaseModel):
    """What the host hands every scaler at construction."""

    model_config = ConfigDict(frozen=True)

    namespace: str = ""
    trigger_metadata: Dict[str, str] = Field(default_factory=dict)
    scaler_index: int = 0


class WorkloadMetadata(BaseModel):
    """
    Immutable description of which pods to count and the per-replica target.

    parse_workload_metadata reports bad trigger input as ConfigError before
    building this; the field constraints guard direct construction.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    namespace: str
    pod_selector: LabelSelector
    value: int = Field(gt=0, le=INT64_MAX)
    scaler_index: int = Field(ge=0)

    @field_validator("pod_selector")
    @classmethod
    def validate_pod_selector(cls, v: LabelSelector) -> LabelSelector:
        """Reject selectors that would match every pod."""
        if v.is_empty():
            raise ValueError("pod selector must not be empty")
        return v


def _required(trigger_metadata: Mapping[str, Any], key: str) -> str:
    raw = trigger_metadata.get(key)
    if raw is None or str(raw).strip() == "":
        logger.error(f"Trigger metadata is missing '{key}'")
        raise MissingFieldError(key)
    return str(raw)


def parse_workload_metadata(config: ScalerConfig) -> WorkloadMetadata:
    """
    Validate trigger metadata into a query descriptor.

    Args:
        config: Namespace, raw trigger metadata and scaler index from the host

    Returns:
        The parsed WorkloadMetadata

    Raises:
        MissingFieldError: If podSelector or value is absent or blank
        InvalidSelectorSyntaxError: If podSelector does not parse or is empty
        InvalidValueError: If value is not a positive 64-bit integer, or
            the scaler index is negative
    """
    metadata = config.trigger_metadata

    selector_expr = _required(metadata, Config.POD_SELECTOR_KEY)
    pod_selector = LabelSelector.parse(selector_expr)
    if pod_selector.is_empty():
        logger.error(f"Pod selector {selector_expr!r} selects every pod")
        raise InvalidSelectorSyntaxError("invalid pod selector: empty selector")

    raw_value = _required(metadata, Config.VALUE_KEY)
    if not _DECIMAL_RE.fullmatch(raw_value):
        logger.error(f"Trigger value {raw_value!r} is not an integer")
        raise InvalidValueError(
            f"value must be an integer greater than 0, got {raw_value!r}"
        )
    value = int(raw_value, 10)
    if value <= 0 or value > INT64_MAX:
        logger.error(f"Trigger value {value} is out of range")
        raise InvalidValueError(f"value must be an integer greater than 0, got {value}")

    if config.scaler_index < 0:
        raise InvalidValueError(
            f"scaler index must be non-negative, got {config.scaler_index}"
        )

    return WorkloadMetadata(
        namespace=config.namespace,
        pod_selector=pod_selector,
        value=value,
        scaler_index=config.scaler_index,
    )
