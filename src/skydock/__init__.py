import warnings

# Suppress Google SDK FutureWarning messages about Python version deprecation
# These clutter the output of anything embedding the service.
warnings.filterwarnings("ignore", category=FutureWarning, module="google.api_core")
warnings.filterwarnings("ignore", category=FutureWarning, module="google.cloud")

from .builders import build_cluster_spec, build_node_pool_spec  # noqa: E402
from .errors import (  # noqa: E402
    ClientConnectionError,
    OperationFailed,
    OperationFetchError,
    OperationWaitAbandoned,
    SkydockError,
    ValidationError,
)
from .operations import OperationPoller, OperationState  # noqa: E402
from .paths import cluster_parent, location_parent  # noqa: E402
from .schemas.gke import ClusterParams, NodePoolParams  # noqa: E402
from .service import GKEService  # noqa: E402

__all__ = [
    "ClientConnectionError",
    "ClusterParams",
    "GKEService",
    "NodePoolParams",
    "OperationFailed",
    "OperationFetchError",
    "OperationPoller",
    "OperationState",
    "OperationWaitAbandoned",
    "SkydockError",
    "ValidationError",
    "build_cluster_spec",
    "build_node_pool_spec",
    "cluster_parent",
    "location_parent",
]
