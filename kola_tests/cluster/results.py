"""Results of dispatched tests and their subtests."""

import dataclasses
import enum
import typing as tp


class Status(enum.StrEnum):
    NOT_STARTED = "NOT_STARTED"
    RUNNING = "RUNNING"
    PASSED = "PASS"
    FAILED = "FAIL"


@dataclasses.dataclass
class TestResult:
    """Outcome of a single test or subtest.

    A result is `FAILED` iff a failure was recorded directly in its scope or any of its subtests
    failed. Once failed, it never goes back to passed.
    """

    __test__ = False

    name: str
    status: Status = Status.NOT_STARTED
    failures: list[str] = dataclasses.field(default_factory=list)
    subtests: list["TestResult"] = dataclasses.field(default_factory=list)
    duration: float = 0.0

    @property
    def failed(self) -> bool:
        return bool(self.failures) or any(s.failed for s in self.subtests)

    @property
    def passed(self) -> bool:
        return self.status == Status.PASSED

    def start(self) -> None:
        if self.status != Status.NOT_STARTED:
            msg = f"Result '{self.name}' was already started."
            raise RuntimeError(msg)
        self.status = Status.RUNNING

    def add_failure(self, message: str) -> None:
        self.failures.append(message)
        if self.status == Status.PASSED:
            self.status = Status.FAILED

    def finish(self, duration: float) -> None:
        self.duration = duration
        self.status = Status.FAILED if self.failed else Status.PASSED

    def walk(self) -> tp.Iterator[tuple[int, "TestResult"]]:
        """Yield the result and all nested subtest results with their depth."""
        stack = [(0, self)]
        while stack:
            depth, result = stack.pop()
            yield depth, result
            stack.extend((depth + 1, s) for s in reversed(result.subtests))


@dataclasses.dataclass
class RunReport:
    """Aggregated results of a single dispatch."""

    results: list[TestResult] = dataclasses.field(default_factory=list)

    @property
    def passed(self) -> bool:
        return all(r.passed for r in self.results)

    @property
    def failed_names(self) -> list[str]:
        return [r.name for r in self.results if r.status == Status.FAILED]

    def get(self, name: str) -> TestResult:
        for result in self.results:
            if result.name == name:
                return result
        msg = f"No result for test '{name}'."
        raise KeyError(msg)

    def render(self) -> str:
        """Return human readable report with subtests nested under their parents."""
        lines = []
        for top in self.results:
            for depth, result in top.walk():
                indent = "    " * depth
                lines.append(f"{indent}--- {result.status}: {result.name} ({result.duration:.2f}s)")
                lines.extend(f"{indent}        {f}" for f in result.failures)
        passed = sum(1 for r in self.results if r.passed)
        lines.append(f"{'PASS' if self.passed else 'FAIL'}, {passed}/{len(self.results)} passed")
        return "\n".join(lines)
