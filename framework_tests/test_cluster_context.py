import pytest
from fakes import FakeMachine
from fakes import noop

from kola_tests.cluster import errors
from kola_tests.cluster import results
from kola_tests.cluster import test_cluster
from kola_tests.register import register


def _get_cluster(machines: list[FakeMachine], **test_kwargs) -> test_cluster.TestCluster:
    test = register.Test(name="suite", run=noop, **test_kwargs)
    return test_cluster.TestCluster(machines=machines, test=test)


class TestRemoteCommands:
    def test_ssh_ok(self, machines: list[FakeMachine]):
        machines[0].responses["hostname"] = b"m0\n"
        cluster = _get_cluster(machines)

        output, err = cluster.ssh(machines[0], "hostname")

        assert output == b"m0\n"
        assert err is None
        assert not cluster.failed

    def test_ssh_error_is_recoverable(self, machines: list[FakeMachine]):
        machines[0].fail_on("false", output=b"nope")
        cluster = _get_cluster(machines)

        def _body(c: test_cluster.TestCluster) -> None:
            output, err = c.ssh(machines[0], "false")
            assert output == b"nope"
            assert isinstance(err, errors.CommandError)
            c.ssh(machines[0], "echo after")

        result = cluster.execute(_body)

        assert result.status == results.Status.PASSED
        assert machines[0].commands == ["false", "echo after"]

    def test_must_ssh_aborts(self, machines: list[FakeMachine]):
        machines[0].fail_on("false")
        cluster = _get_cluster(machines)
        reached = []

        def _body(c: test_cluster.TestCluster) -> None:
            c.must_ssh(machines[0], "false")
            reached.append(True)

        result = cluster.execute(_body)

        assert not reached
        assert result.status == results.Status.FAILED
        assert len(result.failures) == 1
        assert "`false` failed" in result.failures[0]

    def test_must_ssh_raises_fatal_abort(self, machines: list[FakeMachine]):
        machines[0].fail_on("false")
        cluster = _get_cluster(machines)
        with pytest.raises(errors.FatalAbort):
            cluster.must_ssh(machines[0], "false")

    def test_fatalf(self, machines: list[FakeMachine]):
        cluster = _get_cluster(machines)
        result = cluster.execute(lambda c: c.fatalf("expected %r; was %s", "success", "nothing"))
        assert result.failures == ["expected 'success'; was nothing"]

    def test_errorf_continues(self, machines: list[FakeMachine]):
        cluster = _get_cluster(machines)
        reached = []

        def _body(c: test_cluster.TestCluster) -> None:
            c.errorf("first %s", "problem")
            reached.append(True)

        result = cluster.execute(_body)

        assert reached
        assert result.status == results.Status.FAILED
        assert result.failures == ["first problem"]

    def test_unexpected_exception(self, machines: list[FakeMachine]):
        cluster = _get_cluster(machines)

        def _body(c: test_cluster.TestCluster) -> None:
            raise ZeroDivisionError

        result = cluster.execute(_body)

        assert result.status == results.Status.FAILED
        assert "ZeroDivisionError" in result.failures[0]


class TestDefer:
    def test_runs_after_abort_in_reverse_order(self, machines: list[FakeMachine]):
        machines[0].fail_on("false")
        cluster = _get_cluster(machines)

        def _body(c: test_cluster.TestCluster) -> None:
            c.defer(c.ssh, machines[0], "cleanup1")
            c.defer(c.ssh, machines[0], "cleanup2")
            c.must_ssh(machines[0], "false")

        result = cluster.execute(_body)

        assert result.status == results.Status.FAILED
        assert machines[0].commands == ["false", "cleanup2", "cleanup1"]

    def test_failing_cleanup(self, machines: list[FakeMachine]):
        machines[0].fail_on("cleanup")
        cluster = _get_cluster(machines)

        def _body(c: test_cluster.TestCluster) -> None:
            c.defer(c.must_ssh, machines[0], "cleanup")
            c.defer(lambda: 1 / 0)

        result = cluster.execute(_body)

        assert result.status == results.Status.FAILED
        assert len(result.failures) == 2


class TestSubtests:
    def test_isolation(self, machines: list[FakeMachine]):
        machines[0].fail_on("false")
        cluster = _get_cluster(machines)
        executed = []

        def _body(c: test_cluster.TestCluster) -> None:
            def _failing(c: test_cluster.TestCluster) -> None:
                executed.append("failing")
                c.must_ssh(machines[0], "false")
                executed.append("after must_ssh")

            def _passing(c: test_cluster.TestCluster) -> None:
                executed.append("passing")

            assert not c.run("failing", _failing)
            assert c.run("passing", _passing)
            executed.append("parent end")

        result = cluster.execute(_body)

        assert executed == ["failing", "passing", "parent end"]
        assert result.status == results.Status.FAILED
        assert not result.failures
        assert [(s.name, s.status) for s in result.subtests] == [
            ("suite/failing", results.Status.FAILED),
            ("suite/passing", results.Status.PASSED),
        ]

    def test_nested(self, machines: list[FakeMachine]):
        cluster = _get_cluster(machines)

        def _body(c: test_cluster.TestCluster) -> None:
            c.run("outer", lambda c: c.run("inner", lambda c: c.fatal("inner failure")))

        result = cluster.execute(_body)

        outer = result.subtests[0]
        inner = outer.subtests[0]
        assert inner.name == "suite/outer/inner"
        assert inner.failures == ["inner failure"]
        assert outer.status == results.Status.FAILED
        assert result.status == results.Status.FAILED

    def test_shared_machines(self, machines: list[FakeMachine]):
        cluster = _get_cluster(machines)
        seen = []
        cluster.execute(lambda c: c.run("sub", lambda c: seen.append(c.machines())))
        assert seen == [tuple(machines)]

    def test_subtest_defer(self, machines: list[FakeMachine]):
        cluster = _get_cluster(machines)

        def _body(c: test_cluster.TestCluster) -> None:
            c.defer(c.ssh, machines[0], "parent cleanup")
            c.run("sub", lambda c: c.defer(c.ssh, machines[0], "sub cleanup"))
            c.ssh(machines[0], "parent step")

        cluster.execute(_body)

        assert machines[0].commands == ["sub cleanup", "parent step", "parent cleanup"]


class TestNativeFunctions:
    def test_list(self, machines: list[FakeMachine]):
        cluster = _get_cluster(machines, native_funcs={"Foo": noop, "Bar": noop})
        assert cluster.list_native_functions() == ["Foo", "Bar"]

    def test_run_native(self, machines: list[FakeMachine], monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr("kola_tests.utils.configuration.KOLET_PATH", "./kolet")
        machines[1].fail_on("Bar", output=b"bar is broken\n")
        cluster = _get_cluster(machines, native_funcs={"Foo": noop, "Bar": noop})

        def _body(c: test_cluster.TestCluster) -> None:
            for name in c.list_native_functions():
                c.run_native(name, machines[1])

        result = cluster.execute(_body)

        assert machines[1].commands == ["./kolet run suite Foo", "./kolet run suite Bar"]
        assert [s.status for s in result.subtests] == [
            results.Status.PASSED,
            results.Status.FAILED,
        ]
        assert result.subtests[1].failures == ["bar is broken"]

    def test_run_native_unknown(self, machines: list[FakeMachine]):
        cluster = _get_cluster(machines, native_funcs={"Foo": noop})
        result = cluster.execute(lambda c: c.run_native("Unknown", machines[0]))
        assert result.status == results.Status.FAILED
        assert not machines[0].commands
