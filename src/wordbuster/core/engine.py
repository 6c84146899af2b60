"""Bounded-concurrency enumeration engine shared by every mode."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Awaitable, Callable, Iterable, Iterator, Optional, Sequence, TypeVar

from wordbuster.core.config import RunConfig
from wordbuster.core.logging import get_logger
from wordbuster.core.models import BaselineSignature, Candidate, Failure, ProbeOutcome
from wordbuster.core.output import OutputSink
from wordbuster.core.progress import ProgressTracker
from wordbuster.core.wildcard import signature_from

if TYPE_CHECKING:
    from wordbuster.modes.base import EnumerationMode

logger = get_logger(__name__)

T = TypeVar("T")

_STOP = object()


class WorkerPool:
    """Fixed-size pool of workers draining a bounded task queue.

    Each worker holds one permit of a counting semaphore for the duration
    of a task (including the optional pre-task delay), so no more than
    ``size`` tasks are ever in flight. The queue is bounded so that huge
    candidate iterators are consumed lazily.
    """

    def __init__(self, size: int, delay: float = 0.0):
        if size < 1:
            raise ValueError("Worker pool size must be at least 1")
        self.size = size
        self.delay = delay
        self._permits = asyncio.Semaphore(size)

    async def run(
        self,
        items: Iterable[T],
        handler: Callable[[T], Awaitable[None]],
    ) -> None:
        """Run ``handler`` on every item; returns when all items are done."""
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.size * 2)

        async def worker() -> None:
            while True:
                item = await queue.get()
                try:
                    if item is _STOP:
                        return
                    async with self._permits:
                        if self.delay:
                            await asyncio.sleep(self.delay)
                        await handler(item)
                finally:
                    queue.task_done()

        async def produce() -> None:
            for item in items:
                await queue.put(item)
            for _ in range(self.size):
                await queue.put(_STOP)

        # The producer is a task too, so a dead worker cannot leave it blocked on a full queue
        tasks = [asyncio.create_task(produce())]
        tasks.extend(asyncio.create_task(worker()) for _ in range(self.size))
        try:
            await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise


@dataclass
class RunContext:
    """Everything the workers of one run share, passed by reference."""

    config: RunConfig
    progress: ProgressTracker
    sink: OutputSink
    baseline: Optional[BaselineSignature] = None
    matched: list[Candidate] = field(default_factory=list)
    wildcard_detected: bool = False
    stopped_on_wildcard: bool = False


class EnumerationEngine:
    """Drives one mode over a word list.

    The engine is written once and is generic over the mode capability
    set: candidate generation, probing and filtering.
    """

    def __init__(self, mode: "EnumerationMode", context: RunContext):
        self.mode = mode
        self.context = context

    @property
    def concurrency(self) -> int:
        threads = self.context.config.threads
        if self.mode.max_concurrency is not None:
            return max(1, min(threads, self.mode.max_concurrency))
        return threads

    def candidates(self, words: Iterable[str]) -> Iterator[Candidate]:
        for word in words:
            yield from self.mode.generate(word)

    async def run(self, words: Sequence[str]) -> RunContext:
        """Probe every candidate derived from ``words``.

        Returns the run context; ``stopped_on_wildcard`` is set when a
        wildcard was detected and continuation was not forced.
        """
        ctx = self.context
        ctx.progress.total = self.mode.candidate_count(len(words))

        async with self.mode:
            ctx.baseline = await self.mode.prepare()

            if ctx.config.wildcard_check and self.mode.supports_wildcard:
                signature = await self.detect_wildcard()
                if signature is not None:
                    ctx.wildcard_detected = True
                    logger.warning(
                        "wildcard_detected",
                        mode=self.mode.name,
                        responses=sorted(signature.responses),
                        addresses=sorted(signature.addresses),
                    )
                    ctx.sink.warning(self.mode.describe_wildcard(signature))
                    if not ctx.config.force_wildcard:
                        ctx.sink.warning("Use --wildcard to force continued operation")
                        ctx.stopped_on_wildcard = True
                        return ctx
                    ctx.baseline = signature.merge(ctx.baseline)

            pool = WorkerPool(self.concurrency, ctx.config.delay)
            ctx.progress.start()
            try:
                await pool.run(self.candidates(words), self.process)

                follow_ups = list(self.mode.follow_up(list(ctx.matched)))
                if follow_ups:
                    ctx.progress.add_total(len(follow_ups))
                    await pool.run(follow_ups, self.process)
            finally:
                ctx.progress.finish()

        return ctx

    async def detect_wildcard(self) -> Optional[BaselineSignature]:
        """Probe synthetic candidates; return a signature if any is a match."""
        interesting: list[ProbeOutcome] = []

        for candidate in self.mode.wildcard_candidates():
            try:
                outcome = await self.mode.probe(candidate)
            except Exception as e:
                logger.debug("wildcard_probe_failed", candidate=candidate.value, error=str(e))
                continue
            if self.mode.is_match(outcome, self.context.baseline):
                interesting.append(outcome)

        if not interesting:
            return None
        return signature_from(interesting)

    async def process(self, candidate: Candidate) -> None:
        """Probe one candidate and account for its outcome exactly once."""
        ctx = self.context

        try:
            outcome = await self.mode.probe(candidate)
        except Exception as e:
            logger.debug("probe_raised", candidate=candidate.value, error=repr(e))
            outcome = Failure(reason=str(e) or type(e).__name__)

        ctx.progress.inc_done()

        if isinstance(outcome, Failure):
            if not outcome.absent:
                ctx.progress.inc_error()
                logger.debug("probe_failed", candidate=candidate.value, reason=outcome.reason)
                ctx.sink.error(f"{self.mode.display_name(candidate)}: {outcome.reason}")
            return

        if not self.mode.is_match(outcome, ctx.baseline):
            return

        ctx.progress.inc_found()
        ctx.matched.append(candidate)
        record = self.mode.to_record(candidate, outcome)
        await ctx.sink.emit(record, self.mode.render(record))
