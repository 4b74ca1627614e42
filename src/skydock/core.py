# Scope used for every credential this package builds
CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"

# Node service-account scopes.
# "full" grants cloud-platform; anything else grants this fixed minimal set.
FULL_ACCESS_SCOPES = [CLOUD_PLATFORM_SCOPE]
DEFAULT_ACCESS_SCOPES = [
    "https://www.googleapis.com/auth/devstorage.read_only",
    "https://www.googleapis.com/auth/logging.write",
    "https://www.googleapis.com/auth/monitoring",
    "https://www.googleapis.com/auth/servicecontrol",
    "https://www.googleapis.com/auth/service.management.readonly",
    "https://www.googleapis.com/auth/trace.append",
]

# Node pool defaults
DEFAULT_NODE_POOL_NAME = "default-pool"
DEFAULT_MAX_PODS_PER_NODE = 110

# Always merged into instance metadata (wins on collision)
FORCED_METADATA = {"disable-legacy-endpoints": "true"}

# Only this location type is zonal; everything else is regional
ZONAL = "Zonal"

# Fallback zone for machine type listing
DEFAULT_MACHINE_TYPE_ZONE = "us-central1-c"

# Operation polling
# Fixed interval, no backoff, no jitter.
POLL_INTERVAL_SECONDS = 2.0

DONE = "DONE"
ABORTING = "ABORTING"
