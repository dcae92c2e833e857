from __future__ import annotations

import os
import time
from collections.abc import Callable
from typing import TYPE_CHECKING

from tenacity import (
    RetryCallState,
    RetryError,
    Retrying,
    retry_if_result,
    stop_after_attempt,
    stop_after_delay,
    wait_fixed,
)

from ..core import (
    OPERATION_RETRY_WAIT_ENV,
    OPERATION_RETRY_WAIT_SECONDS,
    OPERATION_TIMEOUT_ENV,
    OPERATION_TIMEOUT_SECONDS,
)
from ..errors import OperationFailed, OperationTimeout
from ..logger import logger
from ..schemas.operation import OperationSnapshot

if TYPE_CHECKING:
    from ..services.compute import ComputeService


def _log_poll(retry_state: RetryCallState) -> None:
    if retry_state.outcome is None or retry_state.outcome.failed:
        return
    op: OperationSnapshot = retry_state.outcome.result()
    logger.debug(
        f"Waiting for {op.operation_type or 'unknown'} operation {op.name} "
        f"to be completed... (status: {op.status or 'unknown'})"
    )


class OperationPoller:
    """
    Blocks until a zone operation reaches DONE or the deadline elapses.

    Each fetch is one tenacity attempt: a fetch error is never retried, a
    non-terminal status is, and a terminal status with errors raises
    OperationFailed. ``sleep`` is injectable so tests can run on a
    synthetic clock.
    """

    def __init__(
        self,
        interval: float = OPERATION_RETRY_WAIT_SECONDS,
        timeout: float = OPERATION_TIMEOUT_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"poll interval must be positive, got {interval}")
        if timeout < interval:
            raise ValueError(
                f"poll timeout ({timeout}s) must be at least the interval ({interval}s)"
            )
        self.interval = interval
        self.timeout = timeout
        self.sleep = sleep

    @classmethod
    def from_env(cls) -> OperationPoller:
        interval = float(
            os.environ.get(OPERATION_RETRY_WAIT_ENV, OPERATION_RETRY_WAIT_SECONDS)
        )
        timeout = float(os.environ.get(OPERATION_TIMEOUT_ENV, OPERATION_TIMEOUT_SECONDS))
        return cls(interval=interval, timeout=timeout)

    @property
    def max_attempts(self) -> int:
        return max(1, int(self.timeout // self.interval))

    def wait(
        self, compute: ComputeService, project: str, zone: str, operation_name: str
    ) -> OperationSnapshot:
        def fetch() -> OperationSnapshot:
            op = compute.zone_operations_get(project, zone, operation_name)
            if op.done and op.errors:
                raise OperationFailed.from_operation(op)
            return op

        retryer = Retrying(
            stop=stop_after_attempt(self.max_attempts) | stop_after_delay(self.timeout),
            wait=wait_fixed(self.interval),
            retry=retry_if_result(lambda op: not op.done),
            before_sleep=_log_poll,
            sleep=self.sleep,
        )

        try:
            return retryer(fetch)
        except RetryError as e:
            last: OperationSnapshot = e.last_attempt.result()
            raise OperationTimeout(
                f"timed out after {self.timeout}s waiting for operation "
                f"{operation_name} in {project}/{zone} (last status: {last.status})",
                last,
            ) from None
