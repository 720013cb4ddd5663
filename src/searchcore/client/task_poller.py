"""
Task Poller

Turns the immediate "enqueued" answer of a mutating call into a blocking,
cancellable wait for the task's terminal state.

Each iteration fetches ``GET /tasks/{uid}`` once:

1. terminal status (``succeeded``/``failed``/``canceled``) -> return the Task;
   a failed task is a successful wait, the caller inspects ``task.status``
2. cancel event set or deadline elapsed -> ``TaskTimeoutError``
3. otherwise sleep one fixed interval and fetch again

A failing status fetch propagates immediately and is never retried here.
The deadline and the cancel event interrupt the sleep (and any in-flight
fetch after the first one) instead of waiting the interval out.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Optional, Union

from searchcore import metrics
from searchcore.errors import TaskTimeoutError
from searchcore.models import Task, TaskInfo, TaskStatus

from .base_client import BaseServiceClient

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 0.05
DEFAULT_TIMEOUT = 5.0

TaskRef = Union[int, TaskInfo, Task]


class _Interrupted(Exception):
    """The deadline passed or the cancel event fired while waiting."""


def task_uid_of(ref: TaskRef) -> int:
    if isinstance(ref, TaskInfo):
        return ref.task_uid
    if isinstance(ref, Task):
        return ref.uid
    return int(ref)


class TaskPoller:
    """
    Waits for server-side tasks through a ``BaseServiceClient`` transport.

    The poller holds no per-wait state, so one instance can serve any number
    of concurrent ``wait_for_task`` calls, including several on the same uid.
    """

    def __init__(self,
                 transport: BaseServiceClient,
                 interval: float = DEFAULT_INTERVAL,
                 timeout: Optional[float] = DEFAULT_TIMEOUT):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.transport = transport
        self.interval = interval
        self.timeout = timeout

    async def fetch_task(self, uid: int) -> Task:
        # Status polls bypass the GET retry loop: a broken status channel
        # must surface instead of being absorbed by the deadline.
        body = await self.transport.get(f"/tasks/{uid}", retry=False)
        metrics.TASK_POLLS.inc()
        return Task.model_validate(body)

    async def wait_for_task(self,
                            task: TaskRef,
                            *,
                            interval: Optional[float] = None,
                            timeout: Optional[float] = None,
                            cancel_event: Optional[asyncio.Event] = None) -> Task:
        """
        Poll a task until it reaches a terminal status.

        Args:
            task: task uid, or the ``TaskInfo``/``Task`` returned by a call
            interval: pause between polls in seconds (default 50ms)
            timeout: deadline in seconds. When omitted, the poller default
                applies unless ``cancel_event`` is given, in which case the
                wait runs until the event is set.
            cancel_event: external cancellation signal; the wait stops with
                ``TaskTimeoutError(cancelled=True)`` once it is set

        Returns:
            The terminal Task, whatever its final status.

        Raises:
            TaskTimeoutError: deadline elapsed or cancellation requested
            SearchClientError: the status fetch failed
        """
        uid = task_uid_of(task)
        interval = self.interval if interval is None else interval
        if interval <= 0:
            raise ValueError("interval must be positive")
        if timeout is None and cancel_event is None:
            timeout = self.timeout

        loop = asyncio.get_running_loop()
        started = loop.time()
        deadline = None if timeout is None else started + timeout
        last_status: Optional[TaskStatus] = None
        polls = 0

        def _fail() -> TaskTimeoutError:
            cancelled = cancel_event is not None and cancel_event.is_set()
            waited = loop.time() - started
            metrics.TASK_WAITS.labels(outcome="cancelled" if cancelled else "timeout").observe(waited)
            logger.info(
                "Stopped waiting for task %s after %d polls (%.3fs, last status %s, %s)",
                uid, polls, waited, last_status.value if last_status else None,
                "cancelled" if cancelled else "deadline",
            )
            return TaskTimeoutError(
                uid,
                last_status.value if last_status else None,
                cancelled=cancelled,
                waited=waited,
            )

        while True:
            try:
                # The first fetch always runs to completion against the
                # deadline; only an external cancel can cut it short.
                current = await self._race(
                    self.fetch_task(uid),
                    deadline if polls else None,
                    cancel_event,
                )
            except _Interrupted:
                raise _fail() from None
            polls += 1

            if last_status != current.status:
                logger.debug("Task %s is %s", uid, current.status.value)
            last_status = current.status

            if current.is_terminal:
                metrics.TASK_WAITS.labels(outcome=current.status.value).observe(loop.time() - started)
                return current

            if self._expired(loop, deadline, cancel_event):
                raise _fail()

            try:
                await self._race(asyncio.sleep(interval), deadline, cancel_event)
            except _Interrupted:
                raise _fail() from None

    @staticmethod
    def _expired(loop: asyncio.AbstractEventLoop,
                 deadline: Optional[float],
                 cancel_event: Optional[asyncio.Event]) -> bool:
        if cancel_event is not None and cancel_event.is_set():
            return True
        return deadline is not None and loop.time() >= deadline

    @staticmethod
    async def _race(aw: Awaitable[Any],
                    deadline: Optional[float],
                    cancel_event: Optional[asyncio.Event]) -> Any:
        """
        Await ``aw`` unless the deadline passes or ``cancel_event`` fires first.

        Raises ``_Interrupted`` in the latter case; the abandoned awaitable is
        cancelled.
        """
        work = asyncio.ensure_future(aw)
        waiters = {work}
        cancel_wait = None
        if cancel_event is not None:
            cancel_wait = asyncio.ensure_future(cancel_event.wait())
            waiters.add(cancel_wait)
        timeout = None
        if deadline is not None:
            timeout = max(0.0, deadline - asyncio.get_running_loop().time())

        try:
            done, _ = await asyncio.wait(waiters, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)
        finally:
            if cancel_wait is not None:
                cancel_wait.cancel()
            if not work.done():
                work.cancel()

        if work in done:
            return work.result()
        raise _Interrupted()
