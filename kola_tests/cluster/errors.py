"""Errors raised by the test harness.

* `CommandError` - recoverable, the caller inspects it and decides what to do
* `FatalAbort` - aborts the current test or subtest immediately
* `RegistrationConflictError`, `RegistrationError` - fatal at process startup
* `InsufficientResourcesError` - fatal for a single dispatched test
"""


class KolaError(Exception):
    pass


class CommandError(KolaError):
    """A command failed to run or exited with non-zero status."""

    def __init__(
        self, message: str, *, command: str = "", output: bytes = b"", returncode: int = -1
    ) -> None:
        super().__init__(message)
        self.command = command
        self.output = output
        self.returncode = returncode


class FatalAbort(KolaError):  # noqa: N818
    """The current test or subtest was aborted."""


class RegistrationError(KolaError):
    pass


class RegistrationConflictError(RegistrationError):
    pass


class InsufficientResourcesError(KolaError):
    pass


class ClusterHealthError(KolaError):
    pass
