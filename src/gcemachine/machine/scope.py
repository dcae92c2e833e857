"""
Per-invocation unit of work for one machine.

A MachineScope carries the desired spec, the mutable status and the target
identity (project, zone, provider ID) for exactly one reconcile call. Status
changes accumulate on the in-memory machine and are written back to the
resource store when the scope is closed; a scope that is never closed is
simply discarded.

    with MachineScope(machine, store, secrets) as scope:
        Reconciler(scope, recorder).update()
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from types import TracebackType
from typing import Any, Protocol

import google.auth
from google.auth.exceptions import DefaultCredentialsError
from google.oauth2 import service_account

from ..core import CREDENTIALS_SECRET_KEY, provider_id
from ..errors import ScopeError
from ..logger import logger
from ..schemas.machine import Machine
from ..services.compute import ComputeService

CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"


class MachineStore(Protocol):
    """Resource store holding machine objects."""

    def update_status(self, machine: Machine) -> Machine: ...


class SecretStore(Protocol):
    def get_secret(self, namespace: str, name: str) -> Mapping[str, bytes]: ...


class MachineScope:
    def __init__(
        self,
        machine: Machine,
        machine_store: MachineStore,
        secret_store: SecretStore,
        compute: ComputeService | None = None,
    ) -> None:
        self.machine = machine
        self.machine_store = machine_store
        self.secret_store = secret_store
        self._closed = False

        spec = machine.provider_spec
        credentials, credentials_project = self._load_credentials()

        project_id = spec.project_id or credentials_project
        if not project_id and credentials is None:
            project_id = self._default_project()
        if not project_id:
            raise ScopeError(
                f"unable to determine project for machine {machine.ref}: "
                "set providerSpec.projectId or use credentials with a project"
            )

        self.project_id = project_id
        self.zone = spec.zone
        self.provider_id = provider_id(project_id, spec.zone, machine.name)

        if compute is not None:
            self.compute = compute
        elif credentials is not None:
            self.compute = ComputeService.from_credentials(credentials)
        else:
            try:
                self.compute = ComputeService()
            except DefaultCredentialsError as e:
                raise ScopeError(f"unable to create compute service: {e}") from e

        self._original_status = machine.status.model_dump()

    @property
    def name(self) -> str:
        return self.machine.name

    def _load_credentials(self) -> tuple[Any, str]:
        ref = self.machine.provider_spec.credentials_secret
        if ref is None:
            return None, ""

        try:
            data = self.secret_store.get_secret(self.machine.namespace, ref.name)
        except Exception as e:
            raise ScopeError(
                f"error loading credentials secret {ref.name!r} "
                f"in namespace {self.machine.namespace!r}: {e}"
            ) from e

        if CREDENTIALS_SECRET_KEY not in data:
            raise ScopeError(
                f"credentials secret {self.machine.namespace}/{ref.name} "
                f"does not have {CREDENTIALS_SECRET_KEY!r} field set"
            )

        try:
            info = json.loads(data[CREDENTIALS_SECRET_KEY])
            credentials = service_account.Credentials.from_service_account_info(
                info, scopes=[CLOUD_PLATFORM_SCOPE]
            )
        except Exception as e:
            raise ScopeError(
                f"error loading credentials secret {ref.name!r} "
                f"in namespace {self.machine.namespace!r}: {e}"
            ) from e

        return credentials, info.get("project_id", "")

    @staticmethod
    def _default_project() -> str:
        try:
            _, project = google.auth.default(scopes=[CLOUD_PLATFORM_SCOPE])
        except DefaultCredentialsError as e:
            raise ScopeError(f"unable to load default credentials: {e}") from e
        return project or ""

    @property
    def status_changed(self) -> bool:
        return self.machine.status.model_dump() != self._original_status

    def close(self) -> None:
        """Persists the machine status if it was modified. Idempotent."""
        if self._closed:
            return
        self._closed = True

        if not self.status_changed:
            return

        try:
            latest = self.machine_store.update_status(self.machine)
        except Exception as e:
            raise ScopeError(
                f"failed to persist status for machine {self.machine.ref}: {e}"
            ) from e

        self.machine.resource_version = latest.resource_version
        self._original_status = self.machine.status.model_dump()

    def __enter__(self) -> MachineScope:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc is None:
            self.close()
            return

        # Keep the reconcile error as the one the caller sees
        try:
            self.close()
        except ScopeError as close_err:
            logger.error(f"{close_err} (while handling: {exc})")
