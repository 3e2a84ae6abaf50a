import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, List

import httpx
from opentelemetry import trace

from . import config

log = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

Dispatch = Callable[[httpx.AsyncClient, int], Awaitable[None]]
ClientFactory = Callable[[int], httpx.AsyncClient]


@dataclass(frozen=True)
class Batch:
    index: int
    start_id: int
    count: int

    @property
    def job_ids(self) -> range:
        return range(self.start_id, self.start_id + self.count)


def num_batches(total_requests: int, batch_size: int) -> int:
    return (total_requests + batch_size - 1) // batch_size


def plan_batches(total_requests: int, batch_size: int) -> List[Batch]:
    """Split ``total_requests`` job ids into consecutive batches of ``batch_size``.

    Only the last batch may be shorter. Both arguments must be positive.
    """
    batches = []
    for index in range(num_batches(total_requests, batch_size)):
        start_id = index * batch_size
        count = min(batch_size, total_requests - start_id)
        batches.append(Batch(index, start_id, count))
    return batches


def batch_limits(batch_size: int) -> httpx.Limits:
    # one pooled connection per in-flight job
    return httpx.Limits(max_connections=batch_size, max_keepalive_connections=batch_size)


def default_client_factory(batch_size: int, timeout: float = config.REQUEST_TIMEOUT_S) -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=httpx.Timeout(timeout), limits=batch_limits(batch_size))


class JobGroup:
    """Runs jobs concurrently and waits for all of them.

    An exception escaping a job is logged and kept out of the caller's
    way so one bad job cannot end the batch early.
    """

    def __init__(self):
        self._job_ids: List[int] = []
        self._tasks: List[asyncio.Future] = []

    def spawn(self, job_id: int, coro: Awaitable[None]) -> None:
        self._job_ids.append(job_id)
        self._tasks.append(asyncio.ensure_future(coro))

    def __len__(self):
        return len(self._tasks)

    async def wait(self) -> None:
        results = await asyncio.gather(*self._tasks, return_exceptions=True)
        for job_id, result in zip(self._job_ids, results):
            if isinstance(result, BaseException):
                log.error("Job %d raised %s: %s", job_id, type(result).__name__, result)
        self._job_ids = []
        self._tasks = []


class BatchController:
    def __init__(self, dispatch: Dispatch, client_factory: ClientFactory = default_client_factory):
        self.dispatch = dispatch
        self.client_factory = client_factory

    async def run(self, total_requests: int, batch_size: int) -> None:
        for batch in plan_batches(total_requests, batch_size):
            await self.run_batch(batch)

    async def run_batch(self, batch: Batch) -> None:
        log.info("Starting batch %d with %d requests...", batch.index + 1, batch.count)
        with tracer.start_as_current_span("batch") as span:
            span.set_attribute("batch.index", batch.index)
            span.set_attribute("batch.start_id", batch.start_id)
            span.set_attribute("batch.count", batch.count)

            async with self.client_factory(batch.count) as client:
                group = JobGroup()
                for job_id in batch.job_ids:
                    group.spawn(job_id, self.dispatch(client, job_id))
                await group.wait()
        log.info("Batch %d completed.", batch.index + 1)
