"""
Entry point for the orchestrator.

The lifetime of a scope and its reconciler is a single actuator call. A
scope is closed (and its status persisted) only by create() and update().
The orchestrator calls exists() and then create()/update() in the same
pass; if exists() also stored the machine, the later write would be made
against a stale resource version and rejected by the store. exists() and
delete() therefore leave their scope unclosed.
"""

from __future__ import annotations

from ..errors import ActuatorError, ScopeError
from ..events import EventRecorder, LoggingEventRecorder
from ..logger import logger
from ..schemas.machine import Machine
from ..services.compute import ComputeService
from .poller import OperationPoller
from .reconciler import Reconciler
from .scope import MachineScope, MachineStore, SecretStore


class Actuator:
    def __init__(
        self,
        machine_store: MachineStore,
        secret_store: SecretStore,
        event_recorder: EventRecorder | None = None,
        compute: ComputeService | None = None,
        poller: OperationPoller | None = None,
    ) -> None:
        self.machine_store = machine_store
        self.secret_store = secret_store
        self.event_recorder = event_recorder or LoggingEventRecorder()
        self.compute = compute
        self.poller = poller or OperationPoller.from_env()

    def _new_scope(self, machine: Machine) -> MachineScope:
        try:
            return MachineScope(
                machine, self.machine_store, self.secret_store, compute=self.compute
            )
        except ActuatorError as e:
            raise ScopeError(
                f"failed to create scope for machine {machine.name!r}: {e}"
            ) from e

    def _reconciler(self, scope: MachineScope) -> Reconciler:
        return Reconciler(scope, self.event_recorder, poller=self.poller)

    def create(self, machine: Machine) -> None:
        logger.info(f"Creating machine {machine.name!r}")
        with self._new_scope(machine) as scope:
            self._reconciler(scope).create()

    def exists(self, machine: Machine) -> bool:
        logger.info(f"Checking if machine {machine.name!r} exists")
        scope = self._new_scope(machine)
        return self._reconciler(scope).exists()

    def update(self, machine: Machine) -> None:
        logger.info(f"Updating machine {machine.name!r}")
        with self._new_scope(machine) as scope:
            self._reconciler(scope).update()

    def delete(self, machine: Machine) -> None:
        logger.info(f"Deleting machine {machine.name!r}")
        scope = self._new_scope(machine)
        self._reconciler(scope).delete()
