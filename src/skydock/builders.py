"""
Builds GKE v1 resource documents (camelCase JSON) from flat parameters.

Everything here is pure: no I/O and no time- or random-dependent fields,
so identical input always produces an identical document.
"""

from collections.abc import Mapping
from typing import Any

from .core import (
    DEFAULT_ACCESS_SCOPES,
    DEFAULT_MAX_PODS_PER_NODE,
    FORCED_METADATA,
    FULL_ACCESS_SCOPES,
)
from .errors import ValidationError
from .schemas.gke import ClusterParams, NodePoolConfig, NodePoolParams, parse_params


# User-supplied values: kept verbatim (empty label/metadata values are
# legal), dropped only when the whole container is empty.
VALUE_KEYS = frozenset({"labels", "metadata", "tags", "locations", "oauthScopes"})


def strip_empty(value: Any, value_keys: frozenset[str] = VALUE_KEYS) -> Any:
    """
    Recursively drops keys whose value is None, "" or an empty container.
    Containers emptied by stripping are dropped too. False and 0 are kept.
    Keys in `value_keys` are not recursed into.
    """
    if isinstance(value, Mapping):
        cleaned = {
            k: v if k in value_keys else strip_empty(v, value_keys)
            for k, v in value.items()
        }
        return {k: v for k, v in cleaned.items() if not _is_empty(v)}
    if isinstance(value, (list, tuple)):
        cleaned_items = [strip_empty(v, value_keys) for v in value]
        return [v for v in cleaned_items if not _is_empty(v)]
    return value


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (str, Mapping, list, tuple, set)):
        return len(value) == 0
    return False


def custom_machine_type(
    machine_type: str, cpu_count: int | None = None, memory_mb: int | None = None
) -> str:
    """
    e2-standard + (4, 16384) -> e2-standard-4-16384
    Ranges are validated by the provider, not here.
    """
    if cpu_count is None and memory_mb is None:
        return machine_type
    if cpu_count is None or memory_mb is None:
        raise ValidationError(
            "Custom machine shapes need both a CPU count and a memory size"
        )
    return f"{machine_type}-{cpu_count}-{memory_mb}"


def oauth_scopes(access: str | None) -> list[str]:
    if access == "full":
        return list(FULL_ACCESS_SCOPES)
    return list(DEFAULT_ACCESS_SCOPES)


def instance_metadata(user_metadata: Mapping[str, str] | None) -> dict[str, str]:
    return {**(user_metadata or {}), **FORCED_METADATA}


def _missing(params: Any, fields: list[str]) -> list[str]:
    return [f for f in fields if getattr(params, f) in (None, "")]


def build_node_pool_spec(params: NodePoolConfig | Mapping[str, Any]) -> dict[str, Any]:
    """Returns a NodePool document, or raises ValidationError."""
    if not isinstance(params, NodePoolConfig):
        params = parse_params(NodePoolParams, params, "node pool")

    missing = _missing(
        params,
        ["node_pool_name", "number_of_nodes", "machine_type", "disk_type", "disk_size"],
    )
    if missing:
        raise ValidationError(
            f"Missing required node pool parameters: {', '.join(missing)}"
        )

    machine_type = custom_machine_type(
        params.machine_type,  # type: ignore[arg-type]
        params.custom_machine_cpu_count,
        params.custom_machine_mem,
    )

    autoscaling: dict[str, Any] = {}
    if params.enable_autoscaling:
        autoscaling = {
            "enabled": True,
            "maxNodeCount": params.max_node,
            "minNodeCount": params.min_node,
        }

    return strip_empty(  # type: ignore[no-any-return]
        {
            "name": params.node_pool_name,
            "initialNodeCount": params.number_of_nodes,
            "autoscaling": autoscaling,
            "maxPodsConstraint": {
                "maxPodsPerNode": str(
                    params.max_pods_per_node or DEFAULT_MAX_PODS_PER_NODE
                )
            },
            "upgradeSettings": {
                "maxSurge": params.max_surge,
                "maxUnavailable": params.max_unavailable,
            },
            "config": {
                "diskSizeGb": params.disk_size,
                "metadata": instance_metadata(params.gce_instance_metadata),
                "imageType": params.node_image,
                "tags": list(params.network_tags),
                "bootDiskKmsKey": params.disk_encryption_key,
                "shieldedInstanceConfig": {
                    "enableSecureBoot": params.enable_secure_boot,
                    "enableIntegrityMonitoring": params.enable_integrity_monitoring,
                },
                "oauthScopes": oauth_scopes(params.sa_access_scopes),
                "serviceAccount": params.service_account,
                "machineType": machine_type,
                "labels": dict(params.labels),
                "diskType": params.disk_type,
                "preemptible": params.preemptible,
            },
            "management": {"autoUpgrade": True, "autoRepair": True},
            "version": params.version,
        }
    )


def build_cluster_spec(params: ClusterParams | Mapping[str, Any]) -> dict[str, Any]:
    """
    Returns a Cluster document with a single default node pool.
    Zonal clusters are pinned to `locations=[zone]`; regional ones omit it.
    """
    params = parse_params(ClusterParams, params, "cluster")

    missing = _missing(params, ["name", "location_type", "version"])
    if params.is_zonal and not params.zone:
        missing.append("zone")
    if not params.is_zonal and not params.region:
        missing.append("region")
    if missing:
        raise ValidationError(
            f"Missing required cluster parameters: {', '.join(missing)}"
        )

    channel = params.control_plane_release_channel
    release_channel = None if channel in (None, "none") else {"channel": channel}

    return strip_empty(  # type: ignore[no-any-return]
        {
            "name": params.name,
            "location": params.zone if params.is_zonal else params.region,
            "locations": [params.zone] if params.is_zonal else None,
            "releaseChannel": release_channel,
            "initialClusterVersion": params.version,
            "nodePools": [build_node_pool_spec(params)],
        }
    )
