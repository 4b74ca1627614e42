from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from ..core import DEFAULT_NODE_POOL_NAME, ZONAL
from ..errors import ValidationError

ParamsT = TypeVar("ParamsT", bound="GKEParams")


class GKEParams(BaseModel):
    """
    Flat parameter object. Unknown keys are rejected.
    Fields are snake_case; the camelCase spelling is accepted too
    (e.g. `numberOfNodes` for `number_of_nodes`).
    """

    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class NodePoolConfig(GKEParams):
    node_pool_name: str | None = None
    number_of_nodes: int | None = Field(default=None, ge=0)
    machine_type: str | None = Field(default=None, description="e.g. e2-standard")
    custom_machine_cpu_count: int | None = None
    custom_machine_mem: int | None = Field(default=None, description="MB")
    node_image: str | None = Field(default=None, description="e.g. COS_CONTAINERD")
    disk_type: str | None = Field(default=None, description="e.g. pd-balanced")
    disk_size: int | None = Field(default=None, description="GB")
    disk_encryption_key: str | None = None
    preemptible: bool | None = None

    enable_autoscaling: bool = False
    min_node: int | None = None
    max_node: int | None = None
    max_surge: int | None = None
    max_unavailable: int | None = None
    max_pods_per_node: int | None = None

    network_tags: list[str] = Field(default_factory=list)
    service_account: str | None = None
    sa_access_scopes: str | None = Field(
        default=None, description='"full" for cloud-platform, else the default set'
    )
    enable_secure_boot: bool | None = None
    enable_integrity_monitoring: bool | None = None
    labels: dict[str, str] = Field(default_factory=dict)
    gce_instance_metadata: dict[str, str] = Field(default_factory=dict)
    version: str | None = None


class ClusterParams(NodePoolConfig):
    """Basic cluster with a single default node pool."""

    name: str | None = None
    location_type: str | None = Field(default=None, description='"Zonal" or "Regional"')
    region: str | None = None
    zone: str | None = None
    control_plane_release_channel: str | None = Field(
        default=None, description='e.g. REGULAR; "none" leaves it unset'
    )
    wait_for_operation: bool = False

    node_pool_name: str | None = DEFAULT_NODE_POOL_NAME

    @property
    def is_zonal(self) -> bool:
        return self.location_type == ZONAL


class NodePoolParams(NodePoolConfig):
    cluster: str | None = None
    region: str | None = None
    zone: str | None = None
    wait_for_operation: bool = False


def parse_params(
    model: type[ParamsT],
    params: Any,
    kind: str,
    overrides: dict[str, Any] | None = None,
) -> ParamsT:
    """
    Coerces a mapping (or an existing model) into `model`.
    `overrides` (snake_case, e.g. keyword arguments of a call) are merged
    on top by field name, so they win over either spelling in `params`.
    """
    try:
        if isinstance(params, model):
            base = params
        else:
            if isinstance(params, BaseModel):
                params = params.model_dump(exclude_unset=True)
            base = model.model_validate(params or {})
        if not overrides:
            return base
        return model.model_validate(
            {**base.model_dump(exclude_unset=True), **overrides}
        )
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid {kind} parameters: {e}") from e
