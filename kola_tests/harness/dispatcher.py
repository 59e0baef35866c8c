"""Dispatching of registered tests against a live cluster.

A single dispatch runs all tests applicable to a `Filter`, one at a time and in registration
order, because the machines are shared mutable state. A failure of one test never prevents
dispatching of the following tests.

There are three dispatch modes over the same mechanism:

* local - no precondition
* cluster - wait for the etcd cluster formed by all machines to become healthy
* internet - no precondition, tests requiring internet access were already selected by `Filter`

Independent dispatches against distinct sets of machines can run in parallel, see
`dispatch_many`.
"""

import concurrent.futures
import dataclasses
import logging
import typing as tp

import allure

from kola_tests.cluster import errors
from kola_tests.cluster import machine as machine_mod
from kola_tests.cluster import results
from kola_tests.cluster import test_cluster
from kola_tests.harness import etcd
from kola_tests.register import register
from kola_tests.utils import configuration
from kola_tests.utils import framework_log
from kola_tests.utils import retry as retry_mod

LOGGER = logging.getLogger(__name__)

Precondition = tp.Callable[[test_cluster.TestCluster], None]


class Dispatcher:
    """Select tests applicable to a run and execute them against a cluster.

    Attributes:
        registry: A registry with all known tests.
        precondition: An optional hook executed before every test entry point. It can abort
            the test (e.g. by calling `fatal`) and then the entry point is not invoked.
    """

    def __init__(
        self, registry: register.TestRegistry, precondition: Precondition | None = None
    ) -> None:
        self.registry = registry
        self.precondition = precondition

    def _dispatch_test(
        self, test: register.Test, machines: tp.Sequence[machine_mod.Machine]
    ) -> results.TestResult:
        cluster = test_cluster.TestCluster(machines=machines, test=test)

        if len(machines) < test.cluster_size:
            err = errors.InsufficientResourcesError(
                f"Test '{test.name}' needs {test.cluster_size} machines, "
                f"cluster has {len(machines)}"
            )
            LOGGER.error(str(err))
            framework_log.framework_logger().error(str(err))
            cluster.result.start()
            cluster.result.add_failure(str(err))
            cluster.result.finish(duration=0.0)
            return cluster.result

        precondition = self.precondition

        def _body(c: test_cluster.TestCluster) -> None:
            if precondition is not None:
                precondition(c)
            test.run(c)

        LOGGER.info("=== RUN %s", test.name)
        result = cluster.execute(_body)
        LOGGER.info("--- %s: %s (%.2fs)", result.status, test.name, result.duration)
        if result.failed:
            framework_log.framework_logger().error(f"Test '{test.name}' failed")

        return result

    def dispatch(
        self, machines: tp.Sequence[machine_mod.Machine], test_filter: register.Filter
    ) -> results.RunReport:
        """Run all tests matching the filter, return report with their results."""
        report = results.RunReport()
        with allure.step(f"Dispatch on '{test_filter.distro}'"):
            for test in self.registry.list_matching(test_filter):
                report.results.append(self._dispatch_test(test=test, machines=machines))

        if not report.results:
            LOGGER.warning("No tests match %s", test_filter)
        return report


def wait_for_cluster_health(
    policy: retry_mod.RetryPolicy | None = None,
) -> Precondition:
    """Return precondition that waits for the etcd cluster of all machines to become healthy."""
    policy = policy or retry_mod.RetryPolicy(
        max_attempts=configuration.HEALTH_CHECK_ATTEMPTS, delay=configuration.HEALTH_CHECK_DELAY
    )

    def _precondition(c: test_cluster.TestCluster) -> None:
        machines = c.machines()
        err = retry_mod.retry(
            policy, lambda: etcd.get_cluster_health(machines[0], len(machines))
        )
        if err is not None:
            c.fatalf("Cluster failed health check: %s", err)

    return _precondition


def local_mode(registry: register.TestRegistry) -> Dispatcher:
    return Dispatcher(registry=registry)


def cluster_mode(
    registry: register.TestRegistry, policy: retry_mod.RetryPolicy | None = None
) -> Dispatcher:
    return Dispatcher(registry=registry, precondition=wait_for_cluster_health(policy=policy))


def internet_mode(registry: register.TestRegistry) -> Dispatcher:
    return Dispatcher(registry=registry)


@dataclasses.dataclass(frozen=True)
class DispatchRun:
    """A single dispatch of a `Dispatcher` against its own set of machines."""

    dispatcher: Dispatcher
    machines: tp.Sequence[machine_mod.Machine]
    test_filter: register.Filter


def dispatch_many(
    runs: tp.Sequence[DispatchRun], *, num_threads: int = 0
) -> list[results.RunReport]:
    """Execute independent dispatches in parallel threads.

    The runs must not share machines. Reports are returned in the same order as the runs.
    """
    num_threads = num_threads or configuration.PARALLEL
    with concurrent.futures.ThreadPoolExecutor(max_workers=num_threads) as executor:
        futures = [
            executor.submit(r.dispatcher.dispatch, machines=r.machines, test_filter=r.test_filter)
            for r in runs
        ]
        return [f.result() for f in futures]
