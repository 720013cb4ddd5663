#!/usr/bin/env python3
"""
Unit tests for the Task Poller.

Covers terminal detection, deadline and cancellation handling, and the rule
that a failing status fetch is surfaced immediately instead of retried.
"""

import asyncio
import time

import httpx
import pytest

from searchcore.client import SearchClient, TaskPoller
from searchcore.config import ClientConfig
from searchcore.errors import ApiError, CommunicationError, TaskTimeoutError
from searchcore.models import TaskInfo, TaskStatus

from fake_search_service import task_body, task_info_body


class TestWaitForTask:
    """Terminal outcomes are returned, never raised."""

    @pytest.mark.asyncio
    async def test_enqueued_processing_succeeded(self, client, service):
        """The wait returns the succeeded task after non-terminal polls."""
        service.task_sequence(7, ["enqueued", "processing", "processing", "succeeded"])

        task = await client.wait_for_task(7, interval=0.001)

        assert task.uid == 7
        assert task.status is TaskStatus.SUCCEEDED
        assert task.details.indexed_documents == 3
        assert task.finished_at is not None
        assert len(service.calls("GET", "/tasks/7")) == 4

    @pytest.mark.asyncio
    async def test_terminal_on_first_fetch(self, client, service):
        """No sleep happens when the first fetch is already terminal."""
        service.task_sequence(1, ["succeeded"])

        started = time.monotonic()
        task = await client.wait_for_task(1, interval=5.0)

        assert task.status is TaskStatus.SUCCEEDED
        assert time.monotonic() - started < 1.0
        assert len(service.calls("GET", "/tasks/1")) == 1

    @pytest.mark.asyncio
    async def test_failed_task_is_returned(self, client, service):
        """A failed task is a successful wait; the error rides on the task."""
        error = {
            "message": "Document doesn't have a `id` attribute",
            "code": "missing_document_id",
            "type": "invalid_request",
            "link": "https://docs.example.com/errors#missing_document_id",
        }
        service.add("GET", "/tasks/3", (200, task_body(3, "failed", error=error)))

        task = await client.wait_for_task(3)

        assert task.status is TaskStatus.FAILED
        assert task.is_terminal
        assert task.error.code == "missing_document_id"

    @pytest.mark.asyncio
    async def test_canceled_task_is_returned(self, client, service):
        service.task_sequence(4, ["processing", "canceled"])

        task = await client.wait_for_task(4, interval=0.001)

        assert task.status is TaskStatus.CANCELED

    @pytest.mark.asyncio
    async def test_accepts_task_info(self, client, service):
        """The TaskInfo returned by a mutating call can be passed directly."""
        service.task_sequence(12, ["succeeded"])
        info = TaskInfo.model_validate(task_info_body(12))

        task = await client.wait_for_task(info)

        assert task.uid == 12

    @pytest.mark.asyncio
    async def test_concurrent_waits_on_same_task(self, client, service):
        """Two call sites polling one uid each observe the terminal state."""
        service.task_sequence(9, ["enqueued", "processing", "succeeded"])

        first, second = await asyncio.gather(
            client.wait_for_task(9, interval=0.001),
            client.wait_for_task(9, interval=0.001),
        )

        assert first.status is TaskStatus.SUCCEEDED
        assert second.status is TaskStatus.SUCCEEDED

    @pytest.mark.asyncio
    async def test_timeline_with_fixed_interval(self, client, service):
        """enqueued until 20ms, processing until 120ms, then succeeded."""
        started = time.monotonic()

        def _respond(request):
            elapsed = time.monotonic() - started
            if elapsed < 0.02:
                status = "enqueued"
            elif elapsed < 0.12:
                status = "processing"
            else:
                status = "succeeded"
            return httpx.Response(200, json=task_body(7, status))

        service.add("GET", "/tasks/7", _respond)

        task = await client.wait_for_task(7, interval=0.05, timeout=5.0)
        elapsed = time.monotonic() - started

        assert task.status is TaskStatus.SUCCEEDED
        assert 0.12 <= elapsed < 5.0
        # ~0ms enqueued, ~50ms processing, ~100ms processing, ~150ms succeeded
        assert len(service.calls("GET", "/tasks/7")) >= 3


class TestDeadline:
    """Deadline handling."""

    @pytest.mark.asyncio
    async def test_deadline_shorter_than_interval_fails(self, client, service):
        """A non-terminal first fetch fails at the deadline, not after a full interval."""
        service.task_sequence(5, ["enqueued"])

        started = time.monotonic()
        with pytest.raises(TaskTimeoutError) as exc_info:
            await client.wait_for_task(5, interval=2.0, timeout=0.01)

        assert time.monotonic() - started < 1.0
        assert exc_info.value.task_uid == 5
        assert exc_info.value.last_status == "enqueued"
        assert exc_info.value.cancelled is False
        assert len(service.calls("GET", "/tasks/5")) == 1

    @pytest.mark.asyncio
    async def test_deadline_shorter_than_interval_terminal_first(self, client, service):
        """The first fetch is evaluated before the deadline is."""
        service.task_sequence(5, ["succeeded"])

        task = await client.wait_for_task(5, interval=0.05, timeout=0.000001)

        assert task.status is TaskStatus.SUCCEEDED

    @pytest.mark.asyncio
    async def test_default_deadline_applies(self, config, service):
        """Without timeout or cancel event the configured task_timeout bounds the wait."""
        service.task_sequence(6, ["processing"])
        client = SearchClient(
            ClientConfig(host=config.host, api_key=config.api_key, task_interval=0.01, task_timeout=0.05),
            transport=httpx.MockTransport(service),
        )

        with pytest.raises(TaskTimeoutError) as exc_info:
            await client.wait_for_task(6)

        assert exc_info.value.last_status == "processing"
        assert exc_info.value.waited >= 0.04

    @pytest.mark.asyncio
    async def test_timeout_error_message(self, client, service):
        service.task_sequence(8, ["processing"])

        with pytest.raises(TaskTimeoutError, match="task 8 timed out"):
            await client.wait_for_task(8, interval=0.01, timeout=0.03)


class TestCancellation:
    """External cancel events."""

    @pytest.mark.asyncio
    async def test_cancel_interrupts_sleep(self, client, service):
        """Setting the event stops the wait promptly, mid-interval."""
        service.task_sequence(10, ["processing"])
        cancel = asyncio.Event()

        async def _cancel_soon():
            await asyncio.sleep(0.05)
            cancel.set()

        canceller = asyncio.create_task(_cancel_soon())
        started = time.monotonic()
        with pytest.raises(TaskTimeoutError) as exc_info:
            await client.wait_for_task(10, interval=10.0, cancel_event=cancel)
        await canceller

        assert time.monotonic() - started < 2.0
        assert exc_info.value.cancelled is True
        assert exc_info.value.last_status == "processing"

    @pytest.mark.asyncio
    async def test_cancel_interrupts_inflight_fetch(self, config):
        """A hanging status fetch does not delay the cancellation."""
        async def _hang(request):
            await asyncio.sleep(10)
            return httpx.Response(200, json=task_body(11, "succeeded"))

        client = SearchClient(config, transport=httpx.MockTransport(_hang))
        cancel = asyncio.Event()
        asyncio.get_running_loop().call_later(0.05, cancel.set)

        started = time.monotonic()
        with pytest.raises(TaskTimeoutError) as exc_info:
            await client.wait_for_task(11, cancel_event=cancel)

        assert time.monotonic() - started < 2.0
        assert exc_info.value.cancelled is True
        assert exc_info.value.last_status is None

    @pytest.mark.asyncio
    async def test_cancel_event_replaces_default_deadline(self, config, service):
        """With only a cancel event, the configured task_timeout does not apply."""
        service.task_sequence(13, ["enqueued"] * 8 + ["succeeded"])
        client = SearchClient(
            ClientConfig(host=config.host, api_key=config.api_key, task_interval=0.01, task_timeout=0.02),
            transport=httpx.MockTransport(service),
        )

        task = await client.wait_for_task(13, cancel_event=asyncio.Event())

        assert task.status is TaskStatus.SUCCEEDED


class TestFetchErrors:
    """A broken status channel is surfaced, never retried."""

    @pytest.mark.asyncio
    async def test_api_error_propagates_immediately(self, client, service):
        with pytest.raises(ApiError) as exc_info:
            await client.wait_for_task(404, timeout=5.0)

        assert exc_info.value.status_code == 404
        assert exc_info.value.code == "not_found"
        assert len(service.calls("GET", "/tasks/404")) == 1

    @pytest.mark.asyncio
    async def test_server_error_mid_wait(self, client, service):
        responses = [
            httpx.Response(200, json=task_body(2, "enqueued")),
            httpx.Response(500, json={"message": "boom", "code": "internal"}),
        ]
        service.add("GET", "/tasks/2", lambda request: responses.pop(0))

        with pytest.raises(ApiError) as exc_info:
            await client.wait_for_task(2, interval=0.001)

        assert exc_info.value.status_code == 500
        assert len(service.calls("GET", "/tasks/2")) == 2

    @pytest.mark.asyncio
    async def test_transport_error_is_not_retried(self, config):
        """GETs are normally retried; status polls are not."""
        attempts = []

        def _refuse(request):
            attempts.append(request)
            raise httpx.ConnectError("connection refused", request=request)

        client = SearchClient(config, transport=httpx.MockTransport(_refuse))

        with pytest.raises(CommunicationError):
            await client.wait_for_task(1, timeout=5.0)

        assert len(attempts) == 1


class TestTaskPollerConstruction:
    def test_rejects_non_positive_interval(self, client):
        with pytest.raises(ValueError):
            TaskPoller(client.transport, interval=0)

    @pytest.mark.asyncio
    async def test_rejects_non_positive_interval_per_call(self, client):
        with pytest.raises(ValueError):
            await client.wait_for_task(1, interval=-1)
