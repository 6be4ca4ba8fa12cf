import asyncio
import json
import tempfile
import unittest
from pathlib import Path

from apscheduler.triggers.cron import CronTrigger
from fastapi.testclient import TestClient

from freestuff.errors import RunInProgressError
from freestuff.jobs.scheduler import JOB_ID, IngestScheduler
from freestuff.schemas import RunLogEntry, SourceResult
from freestuff.services.runlog import RunLog
from freestuff.web.server import create_app


class FakeOrchestrator:
    def __init__(self, outcomes):
        self.outcomes = list(outcomes)

    async def run_all(self):
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class BlockedOrchestrator:
    def __init__(self):
        self.started = asyncio.Event()

    async def run_all(self):
        self.started.set()
        await asyncio.Event().wait()


class FullDiskRunLog(RunLog):
    def append(self, entry):
        raise OSError(28, "No space left on device")


OK = [SourceResult(source="craigslist", count=2), SourceResult(source="museums", count=3)]


class TestRunLog(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)

    def test_creates_directory_and_tails_newest_last(self):
        log = RunLog(Path(self._tmp.name) / "nested" / "logs")
        self.assertTrue(log.directory.is_dir())
        self.assertEqual(log.tail(), [])
        for i in range(12):
            log.append(RunLogEntry(timestamp=f"t{i}", success=True, results=[]))
        runs = log.tail(10)
        self.assertEqual(len(runs), 10)
        self.assertEqual(runs[0]["timestamp"], "t2")
        self.assertEqual(runs[-1]["timestamp"], "t11")

    def test_failure_entry_omits_results(self):
        log = RunLog(self._tmp.name)
        log.append(RunLogEntry(timestamp="t", error="boom", success=False))
        line = json.loads(log.path.read_text().strip())
        self.assertEqual(line, {"timestamp": "t", "error": "boom", "success": False})


class TestIngestScheduler(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.run_log = RunLog(self._tmp.name)

    async def asyncTearDown(self):
        self._tmp.cleanup()

    async def test_each_run_appends_one_line(self):
        outcomes = [OK, RuntimeError("db unreachable"), OK, RuntimeError("again"), OK]
        scheduler = IngestScheduler(FakeOrchestrator(outcomes), self.run_log)
        for _ in outcomes:
            await scheduler.run_once()

        lines = self.run_log.path.read_text().splitlines()
        self.assertEqual(len(lines), 5)
        parsed = [json.loads(l) for l in lines]
        self.assertEqual([p["success"] for p in parsed], [True, False, True, False, True])
        self.assertEqual(parsed[1]["error"], "db unreachable")
        self.assertNotIn("results", parsed[1])
        self.assertEqual(parsed[0]["results"], [{"source": "craigslist", "count": 2}, {"source": "museums", "count": 3}])

    async def test_skipped_run_is_not_logged(self):
        scheduler = IngestScheduler(FakeOrchestrator([RunInProgressError()]), self.run_log)
        self.assertIsNone(await scheduler.run_once())
        self.assertEqual(self.run_log.tail(), [])

    async def test_shutdown_cancels_run_in_flight(self):
        orchestrator = BlockedOrchestrator()
        scheduler = IngestScheduler(orchestrator, self.run_log)
        run = asyncio.create_task(scheduler.run_once())
        await orchestrator.started.wait()

        scheduler.shutdown()

        with self.assertRaises(asyncio.CancelledError):
            await run
        self.assertEqual(self.run_log.tail(), [])

    async def test_run_log_write_error_is_not_raised(self):
        scheduler = IngestScheduler(FakeOrchestrator([OK]), FullDiskRunLog(self._tmp.name))
        entry = await scheduler.run_once()
        self.assertTrue(entry.success)
        self.assertEqual(len(entry.results), 2)

    async def test_start_registers_daily_job_and_shutdown_cancels(self):
        scheduler = IngestScheduler(FakeOrchestrator([OK]), self.run_log)
        sched = scheduler.start()
        try:
            job = sched.get_job(JOB_ID)
            self.assertIsNotNone(job)
            self.assertIsInstance(job.trigger, CronTrigger)
            self.assertIsNotNone(job.next_run_time)
        finally:
            scheduler.shutdown()
        self.assertFalse(sched.running)


class TestWebApp(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.run_log = RunLog(self._tmp.name)

    def _client(self, outcomes) -> TestClient:
        scheduler = IngestScheduler(FakeOrchestrator(outcomes), self.run_log)
        return TestClient(create_app(scheduler, self.run_log))

    def test_trigger_returns_results_and_logs(self):
        client = self._client([OK, RuntimeError("boom"), RunInProgressError()])

        r = client.post("/api/scrape")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json(), [{"source": "craigslist", "count": 2}, {"source": "museums", "count": 3}])

        r = client.post("/api/scrape")
        self.assertEqual(r.status_code, 500)
        self.assertEqual(r.json(), {"error": "boom"})

        r = client.post("/api/scrape")
        self.assertEqual(r.status_code, 409)

        stats = client.get("/api/scraper-stats").json()
        self.assertEqual([run["success"] for run in stats["runs"]], [True, False])

    def test_healthz(self):
        self.assertEqual(self._client([]).get("/healthz").json(), {"ok": True})


if __name__ == "__main__":
    unittest.main()
