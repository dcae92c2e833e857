from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

from google.api_core import exceptions as api_exceptions
from google.cloud import compute_v1

from ..clients import (
    build_compute_clients,
    get_instances_client,
    get_zone_operations_client,
    get_zones_client,
)
from ..errors import ErrorKind, ProviderError
from ..schemas.operation import OperationSnapshot

T = TypeVar("T")


def _classify(err: Exception) -> ProviderError:
    """Maps a google.api_core failure to a ProviderError with an explicit kind."""
    code = getattr(err, "code", None)
    code = code if isinstance(code, int) else None

    if isinstance(err, api_exceptions.NotFound) or code == 404:
        kind = ErrorKind.NOT_FOUND
    elif isinstance(err, api_exceptions.Conflict) or code == 409:
        kind = ErrorKind.CONFLICT
    else:
        kind = ErrorKind.PROVIDER

    return ProviderError(str(err), kind=kind, code=code)


def _call(fn: Callable[..., T], **kwargs: Any) -> T:
    try:
        return fn(**kwargs)
    except (api_exceptions.GoogleAPICallError, api_exceptions.RetryError) as e:
        raise _classify(e) from e


class ComputeService:
    """
    Thin wrapper over the compute_v1 clients used by the reconciler.
    Every API failure leaves this class as a ProviderError; nothing
    above it inspects google.api_core exception types.
    """

    def __init__(
        self,
        instances_client: Any = None,
        zones_client: Any = None,
        zone_operations_client: Any = None,
    ) -> None:
        self._instances = instances_client or get_instances_client()
        self._zones = zones_client or get_zones_client()
        self._zone_operations = zone_operations_client or get_zone_operations_client()

    @classmethod
    def from_credentials(cls, credentials: Any) -> ComputeService:
        return cls(*build_compute_clients(credentials))

    def instances_insert(
        self, project: str, zone: str, instance: compute_v1.Instance
    ) -> OperationSnapshot:
        op = _call(
            self._instances.insert,
            project=project,
            zone=zone,
            instance_resource=instance,
        )
        return OperationSnapshot.from_compute(op)

    def instances_get(self, project: str, zone: str, name: str) -> compute_v1.Instance:
        return _call(self._instances.get, project=project, zone=zone, instance=name)

    def instances_delete(self, project: str, zone: str, name: str) -> OperationSnapshot:
        op = _call(self._instances.delete, project=project, zone=zone, instance=name)
        return OperationSnapshot.from_compute(op)

    def zones_get(self, project: str, zone: str) -> compute_v1.Zone:
        return _call(self._zones.get, project=project, zone=zone)

    def zone_operations_get(
        self, project: str, zone: str, operation: str
    ) -> OperationSnapshot:
        op = _call(
            self._zone_operations.get,
            project=project,
            zone=zone,
            operation=operation,
        )
        return OperationSnapshot.from_compute(op)
