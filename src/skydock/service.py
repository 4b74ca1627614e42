import json
import time
from collections.abc import Callable, Mapping
from typing import Any

from google.cloud import container_v1
from google.protobuf import json_format
from pydantic import ValidationError as PydanticValidationError

from .builders import build_cluster_spec, build_node_pool_spec
from .clients import get_credentials, get_gke_client, get_operations_client
from .config import ServiceSettings
from .core import DEFAULT_MACHINE_TYPE_ZONE, POLL_INTERVAL_SECONDS, ZONAL
from .directory import ResourceDirectory
from .errors import ClientConnectionError, ValidationError
from .logger import logger
from .operations import OperationPoller
from .paths import cluster_parent, location_parent, node_pool_path
from .schemas.gke import ClusterParams, NodePoolParams, parse_params


def _request(request_type: Any, **fields: Any) -> Any:
    # Unset (None) fields are left out of the request message
    return request_type(**{k: v for k, v in fields.items() if v is not None})


def _to_message(message_type: Any, document: Any, kind: str) -> Any:
    if isinstance(document, message_type):
        return document
    try:
        return message_type.from_json(json.dumps(document))
    except (json_format.ParseError, TypeError, ValueError) as e:
        raise ValidationError(f"Invalid {kind} document: {e}") from e


def _require_location(region: str | None, zone: str | None) -> None:
    if not region and not zone:
        raise ValidationError("Must provide a region or a zone")


class GKEService:
    """
    Cluster and node pool lifecycle over one set of credentials.

    Mutating calls return the submitted `container_v1.Operation` message
    untouched. With `wait_for_operation=True` they return the terminal
    operation as the REST JSON document (a dict) fetched from
    `operations.get`; `operations.as_document` converts a message to the
    same form.
    """

    def __init__(
        self,
        credentials: Any,
        project_id: str | None = None,
        directory: ResourceDirectory | None = None,
        poll_interval: float = POLL_INTERVAL_SECONDS,
        poll_timeout: float | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        try:
            self.settings = ServiceSettings(
                credentials=credentials,
                project_id=project_id,
                poll_interval=poll_interval,
                poll_timeout=poll_timeout,
            )
        except PydanticValidationError as e:
            # Credential problems raise ClientConnectionError from the validators;
            # what reaches here is bad input such as a negative poll interval
            raise ValidationError(f"Invalid service settings: {e}") from e

        self.project_id: str = self.settings.project_id  # type: ignore[assignment]
        self.directory = directory
        self._sleep = sleep

        try:
            self._credentials = get_credentials(self.settings.credentials)
            self.gke = get_gke_client(self._credentials)
            self.operations = get_operations_client(self._credentials)
        except Exception as e:
            raise ClientConnectionError(
                f"Couldn't connect to Google Cloud: {e}"
            ) from e

    @classmethod
    def from_settings(
        cls, params: Mapping[str, Any], settings: Mapping[str, Any], **kwargs: Any
    ) -> "GKEService":
        """Per-call `creds`/`project` win over the stored settings."""
        return cls(
            credentials=params.get("creds") or settings.get("creds"),
            project_id=params.get("project") or settings.get("project"),
            **kwargs,
        )

    # Operations

    def wait_for_operation(
        self,
        operation: Any,
        region: str | None = None,
        zone: str | None = None,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        """
        Polls `operation` until it is terminal.
        `zone` must match the zone used when the operation was submitted.
        """
        poller = OperationPoller(
            self.operations,
            self.project_id,
            operation,
            region=region,
            zone=zone,
            interval=self.settings.poll_interval,
            timeout=timeout if timeout is not None else self.settings.poll_timeout,
            sleep=self._sleep,
        )
        return poller.wait()

    def _settle(
        self, operation: Any, region: str | None, zone: str | None, wait: bool
    ) -> Any:
        if not wait:
            return operation
        return self.wait_for_operation(operation, region=region, zone=zone)

    # Clusters

    def create_cluster(
        self, params: ClusterParams | Mapping[str, Any] | None = None, **kwargs: Any
    ) -> Any:
        """Creates a basic cluster with one default node pool."""
        cluster = parse_params(ClusterParams, params, "cluster", kwargs)
        return self.create_cluster_from_document(
            build_cluster_spec(cluster),
            location_type=cluster.location_type,
            region=cluster.region,
            zone=cluster.zone,
            wait_for_operation=cluster.wait_for_operation,
        )

    def create_cluster_from_document(
        self,
        document: Mapping[str, Any],
        location_type: str | None = None,
        region: str | None = None,
        zone: str | None = None,
        wait_for_operation: bool = False,
    ) -> Any:
        if not document:
            raise ValidationError("Didn't provide cluster parameters JSON")
        # Only zonal clusters are addressed by zone
        zone = zone if location_type == ZONAL else None
        _require_location(region, zone)

        parent = location_parent(self.project_id, region, zone)
        request = _request(
            container_v1.CreateClusterRequest,
            parent=parent,
            cluster=_to_message(container_v1.Cluster, document, "cluster"),
            zone=zone,
        )
        logger.info(f"Creating cluster {document.get('name')} in {parent}")
        operation = self.gke.create_cluster(request=request)
        return self._settle(operation, region, zone, wait_for_operation)

    def delete_cluster(
        self,
        cluster: str | None = None,
        region: str | None = None,
        zone: str | None = None,
        wait_for_operation: bool = False,
    ) -> Any:
        if not cluster:
            raise ValidationError("Must provide a cluster to delete")
        _require_location(region, zone)

        name = cluster_parent(self.project_id, cluster, region, zone)
        request = _request(
            container_v1.DeleteClusterRequest,
            name=name,
            project_id=self.project_id,
            zone=zone,
            cluster_id=cluster,
        )
        logger.info(f"Deleting cluster {name}")
        operation = self.gke.delete_cluster(request=request)
        return self._settle(operation, region, zone, wait_for_operation)

    def describe_cluster(
        self,
        cluster: str | None = None,
        region: str | None = None,
        zone: str | None = None,
    ) -> Any:
        if not cluster:
            raise ValidationError("Must provide a cluster to describe")
        _require_location(region, zone)

        request = _request(
            container_v1.GetClusterRequest,
            name=cluster_parent(self.project_id, cluster, region, zone),
            project_id=self.project_id,
            zone=zone,
            cluster_id=cluster,
        )
        return self.gke.get_cluster(request=request)

    def list_clusters(self, region: str | None = None, zone: str | None = None) -> Any:
        """Single page, in control-plane order. region="-" lists every location."""
        _require_location(region, zone)
        request = _request(
            container_v1.ListClustersRequest,
            parent=location_parent(self.project_id, region, zone),
            zone=zone,
        )
        return self.gke.list_clusters(request=request).clusters

    # Node pools

    def create_node_pool(
        self, params: NodePoolParams | Mapping[str, Any] | None = None, **kwargs: Any
    ) -> Any:
        node_pool = parse_params(NodePoolParams, params, "node pool", kwargs)
        if not node_pool.cluster:
            raise ValidationError("Must provide a cluster to create the node pool for")
        return self.create_node_pool_from_document(
            build_node_pool_spec(node_pool),
            cluster=node_pool.cluster,
            region=node_pool.region,
            zone=node_pool.zone,
            wait_for_operation=node_pool.wait_for_operation,
        )

    def create_node_pool_from_document(
        self,
        document: Mapping[str, Any],
        cluster: str | None = None,
        region: str | None = None,
        zone: str | None = None,
        wait_for_operation: bool = False,
    ) -> Any:
        if not cluster:
            raise ValidationError("Must provide a cluster to create the node pool for")
        if not document:
            raise ValidationError("Didn't provide node pool parameters JSON")
        _require_location(region, zone)

        parent = cluster_parent(self.project_id, cluster, region, zone)
        request = _request(
            container_v1.CreateNodePoolRequest,
            parent=parent,
            node_pool=_to_message(container_v1.NodePool, document, "node pool"),
            zone=zone,
            cluster_id=cluster,
        )
        logger.info(f"Creating node pool {document.get('name')} in {parent}")
        operation = self.gke.create_node_pool(request=request)
        return self._settle(operation, region, zone, wait_for_operation)

    def delete_node_pool(
        self,
        cluster: str | None = None,
        node_pool: str | None = None,
        region: str | None = None,
        zone: str | None = None,
        wait_for_operation: bool = False,
    ) -> Any:
        if not cluster or not node_pool:
            raise ValidationError("Must provide both a cluster and a node pool to delete")
        _require_location(region, zone)

        name = node_pool_path(self.project_id, cluster, node_pool, region, zone)
        request = _request(
            container_v1.DeleteNodePoolRequest,
            name=name,
            project_id=self.project_id,
            zone=zone,
            cluster_id=cluster,
            node_pool_id=node_pool,
        )
        logger.info(f"Deleting node pool {name}")
        operation = self.gke.delete_node_pool(request=request)
        return self._settle(operation, region, zone, wait_for_operation)

    def list_node_pools(
        self,
        cluster: str | None = None,
        region: str | None = None,
        zone: str | None = None,
    ) -> Any:
        if not cluster:
            raise ValidationError("Must provide a cluster to list its node pools")
        _require_location(region, zone)

        request = _request(
            container_v1.ListNodePoolsRequest,
            parent=cluster_parent(self.project_id, cluster, region, zone),
            zone=zone,
            cluster_id=cluster,
        )
        return self.gke.list_node_pools(request=request).node_pools

    # Resource directory pass-throughs

    def _require_directory(self) -> ResourceDirectory:
        if self.directory is None:
            raise ValidationError("No resource directory configured for listing")
        return self.directory

    def list_projects(self, query: str | None = None) -> Any:
        return self._require_directory().list_projects(query)

    def list_regions(self, fields: Any = None) -> Any:
        return self._require_directory().list_regions(fields)

    def list_zones(self, region: str | None = None, fields: Any = None) -> Any:
        return self._require_directory().list_zones(region, fields)

    def list_machine_types(
        self,
        zone: str | None = None,
        fields: Any = None,
        page_token: str | None = None,
    ) -> Any:
        return self._require_directory().list_machine_types(
            zone or DEFAULT_MACHINE_TYPE_ZONE, fields, page_token
        )

    def list_service_accounts(self) -> Any:
        return self._require_directory().list_service_accounts()
