"""
Long-running operation tracking.

A submitted operation is re-fetched from the control plane on a fixed
interval until it reaches DONE or ABORTING. The loop is a tenacity
`Retrying` that retries on *result* only: a status fetch that raises is
never retried and ends the wait immediately.
"""

import json
import time
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any

from tenacity import (
    RetryCallState,
    RetryError,
    Retrying,
    retry_if_result,
    stop_after_delay,
    stop_never,
    wait_fixed,
)

from .core import ABORTING, DONE, POLL_INTERVAL_SECONDS
from .errors import OperationFailed, OperationFetchError, OperationWaitAbandoned
from .logger import logger
from .paths import operation_path


class OperationState(str, Enum):
    IN_FLIGHT = "IN_FLIGHT"
    DONE = "DONE"
    FAILED = "FAILED"


def as_document(operation: Any) -> dict[str, Any]:
    """
    Normalizes an operation to its JSON document form.
    Accepts REST dicts and `container_v1.Operation` messages.
    """
    if isinstance(operation, Mapping):
        return dict(operation)
    return type(operation).to_dict(  # type: ignore[no-any-return]
        operation, use_integers_for_enums=False, preserving_proto_field_name=False
    )


def operation_state(operation: Mapping[str, Any]) -> OperationState:
    status = operation.get("status")
    if status == ABORTING:
        return OperationState.FAILED
    if status == DONE:
        return OperationState.FAILED if operation.get("error") else OperationState.DONE
    # PENDING, RUNNING and any other provider status
    return OperationState.IN_FLIGHT


class OperationPoller:
    """
    Tracks exactly one operation.

    `zone` must be the zone the operation was submitted with (None for
    location-scoped submissions); it selects the zones vs locations
    operations endpoint.
    """

    def __init__(
        self,
        operations_client: Any,
        project_id: str,
        operation: Any,
        region: str | None = None,
        zone: str | None = None,
        interval: float = POLL_INTERVAL_SECONDS,
        timeout: float | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._client = operations_client
        self.project_id = project_id
        self.region = region
        self.zone = zone
        self.interval = interval
        self.timeout = timeout
        self._sleep = sleep

        self.operation = as_document(operation)
        self.operation_id: str = self.operation.get("name", "")
        self.name = operation_path(project_id, self.operation_id, region, zone)
        self.fetches = 0

    @property
    def state(self) -> OperationState:
        return operation_state(self.operation)

    def fetch(self) -> dict[str, Any]:
        """Fetches the current operation document once."""
        try:
            if self.zone:
                request = (
                    self._client.projects()
                    .zones()
                    .operations()
                    .get(
                        projectId=self.project_id,
                        zone=self.zone,
                        operationId=self.operation_id,
                    )
                )
            else:
                request = (
                    self._client.projects().locations().operations().get(name=self.name)
                )
            operation = request.execute()
        except Exception as e:
            snapshot = json.dumps(self.operation, default=str)
            raise OperationFetchError(
                f"Couldn't get operation: {e}\n{snapshot}", operation=self.operation
            ) from e
        finally:
            self.fetches += 1

        self.operation = dict(operation)
        return self.operation

    def _log_tick(self, retry_state: RetryCallState) -> None:
        logger.debug(
            f"Operation {self.operation_id} is {self.operation.get('status')}, "
            f"polling again in {self.interval}s"
        )

    def _deadline_reached(self, retry_state: RetryCallState) -> bool:
        # idle_for is the total passed to sleep so far; never sleep past timeout
        return retry_state.idle_for + self.interval > self.timeout  # type: ignore[operator]

    def _stop_condition(self) -> Any:
        """
        No timeout waits forever. Otherwise stop once the next delay would
        cross the deadline, counted on the injected sleep, or once the
        wall-clock deadline passes (slow fetches).
        """
        if self.timeout is None:
            return stop_never
        return stop_after_delay(self.timeout) | self._deadline_reached

    def wait(self) -> dict[str, Any]:
        """
        Blocks until the operation is terminal.

        Returns the final operation document on success. Raises
        OperationFailed (ABORTING, or DONE with an error),
        OperationFetchError (a status fetch failed) or
        OperationWaitAbandoned (timeout expired while still in flight).
        """
        if self.state is OperationState.IN_FLIGHT:
            logger.info(f"Waiting for operation {self.name}")
            retryer = Retrying(
                retry=retry_if_result(
                    lambda op: operation_state(op) is OperationState.IN_FLIGHT
                ),
                wait=wait_fixed(self.interval),
                stop=self._stop_condition(),
                sleep=self._sleep,
                before_sleep=self._log_tick,
            )
            try:
                retryer(self.fetch)
            except RetryError as e:
                raise OperationWaitAbandoned(
                    f"Gave up waiting for operation {self.operation_id} after "
                    f"{self.timeout}s; last status {self.operation.get('status')}",
                    operation=self.operation,
                ) from e

        if self.state is OperationState.DONE:
            logger.info(f"Operation {self.operation_id} done")
            return self.operation

        raise OperationFailed(
            f"Operation {self.operation_id} failed with status "
            f"{self.operation.get('status')}: {self.operation.get('error')}",
            operation=self.operation,
        )
