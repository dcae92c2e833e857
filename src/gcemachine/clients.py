from __future__ import annotations

from functools import lru_cache
from typing import Any

from google.cloud import compute_v1

# Shared Client Registry (Lazy-loaded and cached)
# Clients built from explicit credentials are never cached: each machine may
# carry its own credentials secret.


@lru_cache(maxsize=1)
def get_instances_client() -> Any:
    return compute_v1.InstancesClient()


@lru_cache(maxsize=1)
def get_zones_client() -> Any:
    return compute_v1.ZonesClient()


@lru_cache(maxsize=1)
def get_zone_operations_client() -> Any:
    return compute_v1.ZoneOperationsClient()


def build_compute_clients(credentials: Any) -> tuple[Any, Any, Any]:
    """Returns (instances, zones, zone_operations) clients bound to credentials."""
    return (
        compute_v1.InstancesClient(credentials=credentials),
        compute_v1.ZonesClient(credentials=credentials),
        compute_v1.ZoneOperationsClient(credentials=credentials),
    )
