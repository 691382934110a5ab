"""Probe a kubernetes-workload trigger against a live cluster."""

import argparse
import asyncio
import json
import logging
import sys
from typing import Dict, List, Optional

import yaml
from kubernetes import config as k8s_config

from .cluster import KubernetesPodLister
from .config import Config, load_kubernetes_config, setup_logging
from .exceptions import ClusterQueryFailure, ConfigError
from .factory import create_scaler
from .metadata import ScalerConfig

logger = logging.getLogger(__name__)


def load_trigger_file(path: str) -> Dict[str, str]:
    """Read trigger metadata from a YAML mapping; scalar values become strings."""
    with open(path, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}

    if not isinstance(data, dict):
        raise ConfigError(f"{path}: trigger metadata must be a mapping")
    # Accept a full trigger entry as well as a bare metadata mapping
    if isinstance(data.get("metadata"), dict):
        data = data["metadata"]
    return {str(k): str(v) for k, v in data.items() if v is not None}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Show the metric spec and current value of a kubernetes-workload trigger"
    )
    parser.add_argument("--namespace", default=Config.NAMESPACE, help="Namespace to count pods in")
    parser.add_argument("--pod-selector", help="Label selector, e.g. 'app=web,tier in (api)'")
    parser.add_argument("--value", help="Target pods per replica")
    parser.add_argument("--scaler-index", type=int, default=0, help="Scaler ordinal")
    parser.add_argument("--trigger-file", help="YAML file with trigger metadata")
    return parser


async def probe(config: ScalerConfig, pod_lister=None) -> Dict[str, object]:
    """Build the scaler and collect its spec, active flag and current value."""
    scaler = create_scaler(Config.TRIGGER_TYPE, pod_lister or KubernetesPodLister(), config)
    try:
        specs = await scaler.get_metric_spec_for_scaling()
        metric_name = specs[0].external.metric_name
        active = await scaler.is_active()
        values = await scaler.get_metrics(metric_name)
    finally:
        await scaler.close()

    return {
        "metricSpecs": [spec.to_dict() for spec in specs],
        "isActive": active,
        "metricValues": [value.to_dict() for value in values],
    }


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the probe."""
    setup_logging()
    args = build_parser().parse_args(argv)

    try:
        metadata: Dict[str, str] = {}
        if args.trigger_file:
            metadata.update(load_trigger_file(args.trigger_file))
        if args.pod_selector is not None:
            metadata[Config.POD_SELECTOR_KEY] = args.pod_selector
        if args.value is not None:
            metadata[Config.VALUE_KEY] = args.value

        config = ScalerConfig(
            namespace=args.namespace,
            trigger_metadata=metadata,
            scaler_index=args.scaler_index,
        )
        load_kubernetes_config()
        result = asyncio.run(probe(config))
    except ConfigError as e:
        logger.error(f"Invalid trigger: {e}")
        return 1
    except ClusterQueryFailure as e:
        logger.error(f"Cluster query failed: {e}")
        return 1
    except k8s_config.ConfigException as e:
        logger.error(f"Could not load Kubernetes configuration: {e}")
        return 1

    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
