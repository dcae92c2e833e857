from __future__ import annotations

from ..core import CREATE_EVENT_ACTION, CREATED_EVENT_REASON
from ..errors import (
    ErrorKind,
    MachineError,
    OperationError,
    ProviderError,
    create_machine_error,
    is_not_found,
)
from ..events import EventRecorder, EventSeverity
from ..logger import logger
from .instance import build_instance, get_custom_user_data
from .poller import OperationPoller
from .projector import reconcile_with_cloud_state
from .scope import MachineScope
from .validation import validate_machine


class Reconciler:
    """
    Drives one machine towards its provider spec.
    The orchestrator calls exists() and then create() or update() per pass,
    and delete() when the machine is removed. Nothing here retries across
    calls; a failed call is simply invoked again on the next pass.
    """

    def __init__(
        self,
        scope: MachineScope,
        recorder: EventRecorder,
        poller: OperationPoller | None = None,
    ) -> None:
        self.scope = scope
        self.recorder = recorder
        self.poller = poller or OperationPoller()

    @property
    def _target(self) -> str:
        return f"{self.scope.name!r} ({self.scope.project_id}/{self.scope.zone})"

    def _emit(self, severity: EventSeverity, reason: str, message: str) -> None:
        # Events are best-effort
        try:
            self.recorder.emit(self.scope.machine.ref, severity, reason, message)
        except Exception as e:
            logger.warning(f"Failed to record {reason} event for {self._target}: {e}")

    def handle_machine_error(self, err: MachineError, event_action: str) -> MachineError:
        """Records a structured error on the status and as a warning event."""
        status = self.scope.machine.status
        status.error_reason = err.reason.value
        status.error_message = err.message

        if event_action:
            self._emit(EventSeverity.WARNING, f"Failed{event_action}", err.reason.value)

        logger.error(f"Machine error for {self._target}: {err.message}")
        return err

    def create(self) -> None:
        try:
            self._create()
        finally:
            # Best-effort: capture whatever state the provider reports, even
            # after a failed or timed out insert.
            try:
                self.reconcile_machine_with_cloud_state()
            except Exception as e:
                logger.warning(f"Failed to refresh status for {self._target}: {e}")

    def _create(self) -> None:
        try:
            validate_machine(self.scope.machine)
        except MachineError as e:
            raise self.handle_machine_error(e, CREATE_EVENT_ACTION) from None

        user_data = get_custom_user_data(self.scope.machine, self.scope.secret_store)
        instance = build_instance(self.scope.machine, self.scope.project_id, user_data)

        logger.info(f"Creating instance {self._target}")
        try:
            operation = self.scope.compute.instances_insert(
                self.scope.project_id, self.scope.zone, instance
            )
        except ProviderError as e:
            err = create_machine_error(
                f"failed to create instance via compute service: {e}"
            )
            raise self.handle_machine_error(err, CREATE_EVENT_ACTION) from e

        logger.info(f"Submitted insert operation {operation.name} for {self._target}")
        self._wait(operation.name, "create")

        # A successful insert supersedes any error left by an earlier pass
        status = self.scope.machine.status
        status.error_reason = None
        status.error_message = None

        # This event might get missed if the poll above times out
        self._emit(
            EventSeverity.NORMAL,
            CREATED_EVENT_REASON,
            f"Created Machine {self.scope.name}",
        )

    def update(self) -> None:
        """Refreshes status from the live instance; the instance itself is not patched."""
        self.reconcile_machine_with_cloud_state()

    def reconcile_machine_with_cloud_state(self) -> None:
        reconcile_with_cloud_state(self.scope)

    def exists(self) -> bool:
        try:
            validate_machine(self.scope.machine)
        except MachineError as e:
            raise type(e)(
                e.reason, f"failed validating machine provider spec: {e.message}"
            ) from e

        project, zone = self.scope.project_id, self.scope.zone

        # An unknown project/zone returns the same 404 as a missing
        # instance, so the zone has to be checked first.
        try:
            self.scope.compute.zones_get(project, zone)
        except ProviderError as e:
            raise ProviderError(
                f"unable to verify project/zone exists: {project}/{zone}; err: {e}",
                kind=ErrorKind.PROVIDER,
                code=e.code,
            ) from e

        try:
            self.scope.compute.instances_get(project, zone, self.scope.name)
        except ProviderError as e:
            if is_not_found(e):
                logger.info(f"Machine {self._target} does not exist")
                return False
            raise ProviderError(
                f"error getting running instances: {e}", kind=e.kind, code=e.code
            ) from e

        logger.info(f"Machine {self._target} already exists")
        return True

    def delete(self) -> None:
        if not self.exists():
            logger.info(f"Machine {self._target} not found during delete, skipping")
            return

        logger.info(f"Deleting instance {self._target}")
        try:
            operation = self.scope.compute.instances_delete(
                self.scope.project_id, self.scope.zone, self.scope.name
            )
        except ProviderError as e:
            raise ProviderError(
                f"failed to delete instance via compute service: {e}",
                kind=e.kind,
                code=e.code,
            ) from e
        logger.info(f"Submitted delete operation {operation.name} for {self._target}")
        self._wait(operation.name, "delete")

    def _wait(self, operation_name: str, action: str) -> None:
        try:
            self.poller.wait(
                self.scope.compute, self.scope.project_id, self.scope.zone, operation_name
            )
        except OperationError as e:
            logger.error(
                f"{action} operation {operation_name} failed for {self._target}: {e}"
            )
            raise type(e)(
                f"failed to wait for {action} operation via compute service. "
                f"Operation status: {e.operation}. Error: {e}",
                e.operation,
            ) from e
