from typing import Any

from google.cloud import container_v1
from google.oauth2 import service_account

from .core import CLOUD_PLATFORM_SCOPE

# Client factories. One set per GKEService instance; nothing is cached
# process-wide so several credential sets can live side by side.


def get_credentials(info: dict[str, Any]) -> service_account.Credentials:
    return service_account.Credentials.from_service_account_info(
        info, scopes=[CLOUD_PLATFORM_SCOPE]
    )


def get_gke_client(credentials: service_account.Credentials) -> Any:
    return container_v1.ClusterManagerClient(credentials=credentials)


def get_operations_client(credentials: service_account.Credentials) -> Any:
    from googleapiclient import discovery

    return discovery.build(
        "container", "v1", credentials=credentials, cache_discovery=False
    )
