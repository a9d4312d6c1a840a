import queue
import threading
import time
import unittest
from collections import Counter
from unittest.mock import patch

from urlhealth.checks.results import Failure, Responded, Success, TransportError
from urlhealth.checks.retry import check_target
from urlhealth.models import RunConfig
from urlhealth.runner import WorkerError, collect, dispatch, partition, run_checks


class PartitionTests(unittest.TestCase):
    def test_scenario_d_five_targets_two_workers(self) -> None:
        self.assertEqual(
            [list(r) for r in partition(5, 2)],
            [[0, 2, 4], [1, 3]],
        )

    def test_partition_is_disjoint_and_exhaustive(self) -> None:
        for n in range(0, 13):
            for w in range(1, 8):
                with self.subTest(n=n, w=w):
                    parts = partition(n, w)
                    self.assertEqual(len(parts), w)
                    flat = [i for p in parts for i in p]
                    self.assertEqual(sorted(flat), list(range(n)))
                    self.assertEqual(len(flat), len(set(flat)))

    def test_more_workers_than_targets_leaves_some_idle(self) -> None:
        parts = partition(2, 4)
        self.assertEqual([list(p) for p in parts], [[0], [1], [], []])

    def test_zero_workers_rejected(self) -> None:
        with self.assertRaises(ValueError):
            partition(3, 0)


class RunChecksTests(unittest.TestCase):
    def test_scenario_a_single_healthy_target(self) -> None:
        config = RunConfig(workers=1, timeout_s=5, retries=0)

        records = run_checks(["ok.test"], config, prober=lambda url, t: Responded(200))

        self.assertEqual(len(records), 1)
        self.assertEqual(records[0].url, "ok.test")
        self.assertEqual(records[0].outcome, Success(200))

    def test_every_target_yields_exactly_one_record(self) -> None:
        targets = [f"http://host{i}.test/" for i in range(23)]
        for workers in (1, 2, 3, 8, 40):
            with self.subTest(workers=workers):
                config = RunConfig(workers=workers, timeout_s=1, retries=1)
                records = run_checks(
                    targets, config, prober=lambda url, t: Responded(200)
                )
                self.assertEqual(len(records), len(targets))
                self.assertEqual({r.url for r in records}, set(targets))

    def test_duplicate_targets_each_get_a_record(self) -> None:
        targets = ["a.test", "b.test", "a.test"]
        config = RunConfig(workers=2, timeout_s=1, retries=0)

        records = run_checks(targets, config, prober=lambda url, t: Responded(204))

        self.assertEqual(Counter(r.url for r in records), Counter(targets))

    def test_failures_do_not_affect_other_targets(self) -> None:
        def prober(url, timeout_s):
            if url.startswith("down"):
                return TransportError(f"{url}: refused")
            return Responded(500)

        config = RunConfig(workers=3, timeout_s=1, retries=2)
        records = run_checks(["down1.test", "up.test", "down2.test"], config, prober=prober)

        by_url = {r.url: r.outcome for r in records}
        self.assertEqual(by_url["up.test"], Success(500))
        self.assertEqual(by_url["down1.test"], Failure("down1.test: refused"))
        self.assertEqual(by_url["down2.test"], Failure("down2.test: refused"))

    def test_workers_run_concurrently(self) -> None:
        barrier = threading.Barrier(3, timeout=5)

        def prober(url, timeout_s):
            # Deadlocks (BrokenBarrierError) unless three workers probe at once.
            barrier.wait()
            return Responded(200)

        config = RunConfig(workers=3, timeout_s=1, retries=0)
        records = run_checks(["a.test", "b.test", "c.test"], config, prober=prober)

        self.assertEqual(len(records), 3)

    def test_records_arrive_in_completion_order(self) -> None:
        def prober(url, timeout_s):
            if url == "slow.test":
                time.sleep(0.2)
            return Responded(200)

        config = RunConfig(workers=2, timeout_s=1, retries=0)
        records = run_checks(["slow.test", "fast.test"], config, prober=prober)

        self.assertEqual([r.url for r in records], ["fast.test", "slow.test"])

    def test_worker_crash_surfaces_as_worker_error(self) -> None:
        def prober(url, timeout_s):
            if url == "boom.test":
                raise KeyError("bug")
            return Responded(200)

        config = RunConfig(workers=2, timeout_s=1, retries=0)
        with self.assertRaises(WorkerError) as ctx:
            run_checks(["ok.test", "boom.test", "ok2.test"], config, prober=prober)

        self.assertIsInstance(ctx.exception.__cause__, KeyError)

    def test_clock_is_passed_to_each_check(self) -> None:
        readings = iter([0.0, 2.0, 10.0, 13.0])
        config = RunConfig(workers=1, timeout_s=1, retries=0)

        records = run_checks(
            ["a.test", "b.test"],
            config,
            prober=lambda url, t: Responded(200),
            clock=lambda: next(readings),
        )

        self.assertEqual([(r.url, r.elapsed_s) for r in records], [("a.test", 2.0), ("b.test", 3.0)])

    def test_uses_shared_session_when_no_prober_given(self) -> None:
        config = RunConfig(workers=2, timeout_s=4, retries=0, user_agent="ua/1")
        seen_sessions = []

        def fake_probe(session, url, timeout_s):
            seen_sessions.append(session)
            return Responded(200)

        with patch("urlhealth.runner.probe", side_effect=fake_probe):
            records = run_checks(["a.test", "b.test", "c.test"], config)

        self.assertEqual(len(records), 3)
        self.assertEqual(len({id(s) for s in seen_sessions}), 1)
        self.assertEqual(seen_sessions[0].headers["User-Agent"], "ua/1")


class CollectorTests(unittest.TestCase):
    def test_collect_waits_for_every_worker(self) -> None:
        results: queue.Queue = queue.Queue()
        release = threading.Event()

        def check(url):
            if url == "late.test":
                release.wait(timeout=5)
            return check_target(
                lambda u, t: Responded(200), url, timeout_s=1, max_retries=0
            )

        threads = dispatch(["early.test", "late.test"], 2, check, results)
        collected = []
        collector = threading.Thread(
            target=lambda: collected.extend(collect(results, 2, expected=2))
        )
        collector.start()

        collector.join(timeout=0.2)
        self.assertTrue(collector.is_alive())

        release.set()
        collector.join(timeout=5)
        for t in threads:
            t.join(timeout=5)

        self.assertFalse(collector.is_alive())
        self.assertEqual({r.url for r in collected}, {"early.test", "late.test"})


if __name__ == "__main__":
    unittest.main()
