"""Tests for the worker pool and the enumeration engine."""

import asyncio
import json
import time

import pytest

from wordbuster.core.engine import EnumerationEngine, WorkerPool
from wordbuster.core.models import Success


class TestWorkerPool:
    """Tests for the concurrency governor."""

    async def test_runs_every_item_once(self):
        """Each item is handled exactly once."""
        seen = []

        async def handler(item):
            await asyncio.sleep(0)
            seen.append(item)

        await WorkerPool(4).run(range(50), handler)

        assert sorted(seen) == list(range(50))

    async def test_never_exceeds_size(self):
        """No more than N handlers are in flight."""
        state = {"now": 0, "peak": 0}

        async def handler(item):
            state["now"] += 1
            state["peak"] = max(state["peak"], state["now"])
            await asyncio.sleep(0.002)
            state["now"] -= 1

        await WorkerPool(3).run(range(40), handler)

        assert state["peak"] <= 3
        assert state["peak"] == 3

    async def test_delay_slows_each_worker(self):
        """With one worker, N items take at least N delays."""

        async def handler(item):
            pass

        start = time.monotonic()
        await WorkerPool(1, delay=0.02).run(range(5), handler)

        assert time.monotonic() - start >= 0.09

    async def test_empty_input(self):
        """No items, no work, clean return."""
        calls = []

        async def handler(item):
            calls.append(item)

        await WorkerPool(5).run([], handler)

        assert calls == []

    async def test_handler_exception_propagates_and_stops_workers(self):
        """A bug in the handler surfaces instead of hanging the pool."""

        async def handler(item):
            if item == 3:
                raise ValueError("bug")

        with pytest.raises(ValueError):
            await WorkerPool(2).run(range(10), handler)

    def test_size_must_be_positive(self):
        """A pool needs at least one worker."""
        with pytest.raises(ValueError):
            WorkerPool(0)


class TestEngineAccounting:
    """Every candidate yields exactly one done increment."""

    async def test_concurrency_bounded_by_threads(self, fake_mode_cls, make_context):
        """The probe high-water mark never exceeds the thread count."""
        mode = fake_mode_cls(latency=0.003)
        ctx = make_context(threads=4, wildcard_check=False)

        await EnumerationEngine(mode, ctx).run([f"w{i}" for i in range(60)])

        assert mode.high_water <= 4
        assert len(mode.probed) == 60

    async def test_mode_concurrency_cap(self, fake_mode_cls, make_context):
        """A mode cap wins over a larger thread count."""
        mode = fake_mode_cls(latency=0.003, max_concurrency=2)
        ctx = make_context(threads=20, wildcard_check=False)

        await EnumerationEngine(mode, ctx).run([f"w{i}" for i in range(20)])

        assert mode.high_water <= 2

    async def test_counters(self, fake_mode_cls, make_context):
        """done, found and errored are counted once per candidate."""
        mode = fake_mode_cls(found={"a", "b"}, errors={"c"}, raises={"d"}, absent={"e"})
        ctx = make_context(threads=3, wildcard_check=False)

        await EnumerationEngine(mode, ctx).run(["a", "b", "c", "d", "e", "f"])

        assert ctx.progress.total == 6
        assert ctx.progress.done == 6
        assert ctx.progress.found == 2
        assert ctx.progress.errored == 2
        assert sorted(c.value for c in ctx.matched) == ["a", "b"]

    async def test_probe_exception_does_not_abort_run(self, fake_mode_cls, make_context):
        """An exception inside one probe becomes a failure for that candidate only."""
        mode = fake_mode_cls(found={"z"}, raises={"a"})
        ctx = make_context(wildcard_check=False)

        await EnumerationEngine(mode, ctx).run(["a", "z"])

        assert ctx.progress.done == 2
        assert ctx.progress.found == 1

    async def test_mode_opened_and_closed(self, fake_mode_cls, make_context):
        """The mode's resources are released after the run."""
        mode = fake_mode_cls()
        await EnumerationEngine(mode, make_context(wildcard_check=False)).run(["a"])
        assert mode.opened and mode.closed

    async def test_empty_word_list(self, fake_mode_cls, make_context):
        """Zero words: zero probes and a clean finish."""
        mode = fake_mode_cls()
        ctx = make_context(wildcard_check=False)

        await EnumerationEngine(mode, ctx).run([])

        assert ctx.progress.done == 0
        assert mode.probed == []

    async def test_verbose_errors_printed(self, fake_mode_cls, make_context, console):
        """Probe errors are echoed only in verbose mode."""
        mode = fake_mode_cls(errors={"bad"})
        ctx = make_context(verbose=True, wildcard_check=False)

        await EnumerationEngine(mode, ctx).run(["bad"])

        assert "bad: Connection refused" in console.file.getvalue()


class TestWildcardHandling:
    """Tests for pre-run wildcard detection."""

    async def test_wildcard_stops_run(self, fake_mode_cls, make_context, console):
        """A catch-all response stops the run before any real probe."""
        mode = fake_mode_cls(wildcard_outcome=Success(status_code=200, byte_size=1234))
        ctx = make_context()

        await EnumerationEngine(mode, ctx).run(["a", "b"])

        assert ctx.wildcard_detected is True
        assert ctx.stopped_on_wildcard is True
        assert ctx.progress.done == 0
        assert all(value.startswith("wordbuster-wildcard-test-") for value in mode.probed)
        assert "--wildcard" in console.file.getvalue()

    async def test_forced_wildcard_suppresses_signature(self, fake_mode_cls, make_context):
        """With --wildcard, responses equal to the signature are hidden."""
        mode = fake_mode_cls(found={"x", "real"}, wildcard_outcome=Success(status_code=200, byte_size=1))
        ctx = make_context(force_wildcard=True)

        # "x" answers 200 with size 1, exactly the wildcard response
        await EnumerationEngine(mode, ctx).run(["x", "real"])

        assert ctx.stopped_on_wildcard is False
        assert [c.value for c in ctx.matched] == ["real"]
        assert ctx.progress.done == 2

    async def test_no_wildcard_runs_normally(self, fake_mode_cls, make_context):
        """A 404 on the synthetic path is not a wildcard."""
        mode = fake_mode_cls(found={"a"})
        ctx = make_context()

        await EnumerationEngine(mode, ctx).run(["a", "b"])

        assert ctx.wildcard_detected is False
        assert ctx.progress.found == 1

    async def test_check_disabled(self, fake_mode_cls, make_context):
        """Without the check no synthetic probe is sent."""
        mode = fake_mode_cls(wildcard_outcome=Success(status_code=200, byte_size=5))
        ctx = make_context(wildcard_check=False)

        await EnumerationEngine(mode, ctx).run(["a"])

        assert mode.probed == ["a"]


class TestFollowUps:
    """Tests for the follow-up pass."""

    async def test_follow_ups_probed_and_counted(self, fake_mode_cls, make_context):
        """Follow-up candidates join the progress total."""
        mode = fake_mode_cls(found={"a", "b"}, backups=True)
        ctx = make_context(wildcard_check=False)

        await EnumerationEngine(mode, ctx).run(["a", "b", "c"])

        assert ctx.progress.total == 5
        assert ctx.progress.done == 5
        assert {"a.bak", "b.bak"} <= set(mode.probed)
        assert ctx.progress.found == 4


class TestOutputIntegration:
    """Engine plus file sink."""

    async def test_json_output_parses(self, fake_mode_cls, make_context, temp_dir):
        """Matches land in a valid JSON array."""
        path = temp_dir / "out.json"
        mode = fake_mode_cls(found={"a", "b", "c"})
        ctx = make_context(output_file=path, threads=3, wildcard_check=False)

        await EnumerationEngine(mode, ctx).run(["a", "b", "c", "d"])
        await ctx.sink.finalize()

        data = json.loads(path.read_text())
        assert sorted(item["filename"] for item in data) == ["a", "b", "c"]
