import json

import pytest
from google.cloud import container_v1

from skydock.builders import (
    build_cluster_spec,
    build_node_pool_spec,
    custom_machine_type,
    oauth_scopes,
    strip_empty,
)
from skydock.core import CLOUD_PLATFORM_SCOPE, DEFAULT_ACCESS_SCOPES
from skydock.errors import ValidationError

POOL = {
    "node_pool_name": "pool-1",
    "number_of_nodes": 3,
    "machine_type": "e2-standard-4",
    "disk_type": "pd-balanced",
    "disk_size": 100,
}

CLUSTER = {
    "name": "research-1",
    "location_type": "Zonal",
    "zone": "us-central1-a",
    "region": "us-central1",
    "version": "1.29.1-gke.1589018",
    "number_of_nodes": 3,
    "machine_type": "e2-standard-4",
    "disk_type": "pd-balanced",
    "disk_size": 100,
}


def test_node_pool_minimal():
    doc = build_node_pool_spec(POOL)

    assert doc["name"] == "pool-1"
    assert doc["initialNodeCount"] == 3
    assert doc["maxPodsConstraint"] == {"maxPodsPerNode": "110"}
    assert doc["management"] == {"autoUpgrade": True, "autoRepair": True}
    assert doc["config"]["machineType"] == "e2-standard-4"
    assert doc["config"]["diskType"] == "pd-balanced"
    assert doc["config"]["diskSizeGb"] == 100
    assert doc["config"]["metadata"] == {"disable-legacy-endpoints": "true"}
    assert doc["config"]["oauthScopes"] == DEFAULT_ACCESS_SCOPES

    # Unset fields never reach the document
    assert "autoscaling" not in doc
    assert "upgradeSettings" not in doc
    assert "version" not in doc
    for key in ("tags", "labels", "bootDiskKmsKey", "shieldedInstanceConfig"):
        assert key not in doc["config"]


@pytest.mark.parametrize(
    "field",
    ["node_pool_name", "number_of_nodes", "machine_type", "disk_type", "disk_size"],
)
def test_node_pool_missing_required(field):
    params = {k: v for k, v in POOL.items() if k != field}

    with pytest.raises(ValidationError, match=field):
        build_node_pool_spec(params)


def test_node_pool_zero_nodes_is_not_missing():
    doc = build_node_pool_spec({**POOL, "number_of_nodes": 0})
    assert doc["initialNodeCount"] == 0


def test_node_pool_populated_fields_pass_through():
    doc = build_node_pool_spec(
        {
            **POOL,
            "node_image": "COS_CONTAINERD",
            "disk_encryption_key": "projects/p/locations/l/keyRings/r/cryptoKeys/k",
            "network_tags": ["web", "gke"],
            "labels": {"team": "research"},
            "service_account": "nodes@p.iam.gserviceaccount.com",
            "preemptible": False,
            "enable_secure_boot": True,
            "enable_integrity_monitoring": False,
            "max_surge": 1,
            "max_unavailable": 0,
            "version": "1.29.1-gke.1589018",
        }
    )
    config = doc["config"]

    assert config["imageType"] == "COS_CONTAINERD"
    assert config["bootDiskKmsKey"] == "projects/p/locations/l/keyRings/r/cryptoKeys/k"
    assert config["tags"] == ["web", "gke"]
    assert config["labels"] == {"team": "research"}
    assert config["serviceAccount"] == "nodes@p.iam.gserviceaccount.com"
    assert config["preemptible"] is False
    assert config["shieldedInstanceConfig"] == {
        "enableSecureBoot": True,
        "enableIntegrityMonitoring": False,
    }
    assert doc["upgradeSettings"] == {"maxSurge": 1, "maxUnavailable": 0}
    assert doc["version"] == "1.29.1-gke.1589018"


def test_custom_machine_type():
    assert custom_machine_type("e2-standard", 4, 16384) == "e2-standard-4-16384"
    assert custom_machine_type("e2-standard") == "e2-standard"


def test_custom_machine_type_in_node_pool():
    doc = build_node_pool_spec(
        {
            **POOL,
            "machine_type": "e2-standard",
            "custom_machine_cpu_count": 4,
            "custom_machine_mem": 16384,
        }
    )
    assert doc["config"]["machineType"] == "e2-standard-4-16384"


def test_custom_machine_type_needs_both_parts():
    with pytest.raises(ValidationError):
        build_node_pool_spec({**POOL, "custom_machine_cpu_count": 4})


def test_oauth_scopes():
    assert oauth_scopes("full") == [CLOUD_PLATFORM_SCOPE]

    for access in (None, "default", "FULL"):
        scopes = oauth_scopes(access)
        assert len(scopes) == 6
        assert scopes[0] == "https://www.googleapis.com/auth/devstorage.read_only"
        assert scopes[-1] == "https://www.googleapis.com/auth/trace.append"


def test_metadata_forced_key_wins():
    doc = build_node_pool_spec(
        {
            **POOL,
            "gce_instance_metadata": {
                "disable-legacy-endpoints": "false",
                "startup-script": "echo hi",
            },
        }
    )
    assert doc["config"]["metadata"] == {
        "disable-legacy-endpoints": "true",
        "startup-script": "echo hi",
    }


def test_autoscaling_and_max_pods():
    doc = build_node_pool_spec(
        {**POOL, "enable_autoscaling": True, "min_node": 1, "max_node": 5, "max_pods_per_node": 64}
    )
    assert doc["autoscaling"] == {"enabled": True, "maxNodeCount": 5, "minNodeCount": 1}
    assert doc["maxPodsConstraint"] == {"maxPodsPerNode": "64"}


def test_camel_case_params_are_accepted():
    doc = build_node_pool_spec(
        {
            "nodePoolName": "pool-1",
            "numberOfNodes": 2,
            "machineType": "n2-standard-8",
            "diskType": "pd-ssd",
            "diskSize": 50,
            "saAccessScopes": "full",
        }
    )
    assert doc["initialNodeCount"] == 2
    assert doc["config"]["oauthScopes"] == [CLOUD_PLATFORM_SCOPE]


def test_unknown_params_are_rejected():
    with pytest.raises(ValidationError, match="node pool"):
        build_node_pool_spec({**POOL, "gpu_count": 2})


def test_zonal_cluster():
    doc = build_cluster_spec(CLUSTER)

    assert doc["name"] == "research-1"
    assert doc["location"] == "us-central1-a"
    assert doc["locations"] == ["us-central1-a"]
    assert "region" not in doc
    assert doc["initialClusterVersion"] == "1.29.1-gke.1589018"
    assert "releaseChannel" not in doc

    assert len(doc["nodePools"]) == 1
    pool = doc["nodePools"][0]
    assert pool["name"] == "default-pool"
    assert pool["version"] == "1.29.1-gke.1589018"


def test_regional_cluster():
    doc = build_cluster_spec({**CLUSTER, "location_type": "Regional"})

    assert doc["location"] == "us-central1"
    assert "locations" not in doc


@pytest.mark.parametrize(
    ("location_type", "drop", "missing"),
    [("Zonal", "zone", "zone"), ("Regional", "region", "region")],
)
def test_cluster_location_required(location_type, drop, missing):
    params = {k: v for k, v in CLUSTER.items() if k != drop}
    params["location_type"] = location_type

    with pytest.raises(ValidationError, match=missing):
        build_cluster_spec(params)


def test_cluster_missing_pool_fields():
    params = {k: v for k, v in CLUSTER.items() if k != "disk_size"}

    with pytest.raises(ValidationError, match="disk_size"):
        build_cluster_spec(params)


def test_release_channel():
    assert "releaseChannel" not in build_cluster_spec(
        {**CLUSTER, "control_plane_release_channel": "none"}
    )
    doc = build_cluster_spec({**CLUSTER, "control_plane_release_channel": "REGULAR"})
    assert doc["releaseChannel"] == {"channel": "REGULAR"}


def test_build_is_deterministic():
    params = {
        **CLUSTER,
        "labels": {"b": "2", "a": "1"},
        "gce_instance_metadata": {"k": "v"},
        "network_tags": ["x", "y"],
    }
    first = json.dumps(build_cluster_spec(params))
    second = json.dumps(build_cluster_spec(params))

    assert first == second


def test_cluster_document_matches_api_schema():
    doc = build_cluster_spec(
        {
            **CLUSTER,
            "machine_type": "e2-standard",
            "custom_machine_cpu_count": 4,
            "custom_machine_mem": 16384,
            "control_plane_release_channel": "STABLE",
            "enable_autoscaling": True,
            "min_node": 1,
            "max_node": 3,
        }
    )

    cluster = container_v1.Cluster.from_json(json.dumps(doc))

    pool = cluster.node_pools[0]
    assert pool.config.machine_type == "e2-standard-4-16384"
    assert pool.management.auto_repair is True
    assert pool.max_pods_constraint.max_pods_per_node == 110
    assert pool.autoscaling.max_node_count == 3
    assert list(cluster.locations) == ["us-central1-a"]


def test_strip_empty():
    doc = {
        "a": None,
        "b": {"c": [], "d": {"e": None}},
        "f": False,
        "g": 0,
        "h": "",
        "i": [None, {}, "x"],
        "j": "kept",
    }
    assert strip_empty(doc) == {"f": False, "g": 0, "i": ["x"], "j": "kept"}


def test_empty_label_and_metadata_values_are_kept():
    doc = build_node_pool_spec(
        {
            **POOL,
            "labels": {"env": "", "team": "x"},
            "gce_instance_metadata": {"flag": ""},
        }
    )

    assert doc["config"]["labels"] == {"env": "", "team": "x"}
    assert doc["config"]["metadata"] == {
        "flag": "",
        "disable-legacy-endpoints": "true",
    }
