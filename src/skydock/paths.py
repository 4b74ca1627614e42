def location_parent(
    project_id: str, region: str | None = None, zone: str | None = None
) -> str:
    """
    Returns the parent path for a location.
    A zone takes precedence over a region:
      projects/p1/zones/z1 or projects/p1/locations/r1
    """
    if not project_id:
        raise ValueError("project_id is required to resolve a GKE resource path")
    if zone:
        return f"projects/{project_id}/zones/{zone}"
    return f"projects/{project_id}/locations/{region}"


def cluster_parent(
    project_id: str,
    cluster_id: str,
    region: str | None = None,
    zone: str | None = None,
) -> str:
    return f"{location_parent(project_id, region, zone)}/clusters/{cluster_id}"


def node_pool_path(
    project_id: str,
    cluster_id: str,
    node_pool_id: str,
    region: str | None = None,
    zone: str | None = None,
) -> str:
    parent = cluster_parent(project_id, cluster_id, region, zone)
    return f"{parent}/nodePools/{node_pool_id}"


def operation_path(
    project_id: str,
    operation_id: str,
    region: str | None = None,
    zone: str | None = None,
) -> str:
    return f"{location_parent(project_id, region, zone)}/operations/{operation_id}"
