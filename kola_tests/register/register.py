"""Registration of tests and selection of tests applicable to a run.

Every test module exposes a `register_tests(registry)` function that adds its tests to an
explicit `TestRegistry`. The registry is populated once at startup and it is read-only afterwards,
so it can be shared by dispatches running in parallel.
"""

import dataclasses
import enum
import fnmatch
import logging
import types
import typing as tp

from kola_tests.cluster import errors
from kola_tests.utils import configuration
from kola_tests.utils import types as ttypes

if tp.TYPE_CHECKING:
    from kola_tests.cluster import test_cluster

LOGGER = logging.getLogger(__name__)


class Flag(enum.StrEnum):
    """Capabilities a test requires from the environment it runs in."""

    REQUIRES_INTERNET_ACCESS = "RequiresInternetAccess"


@dataclasses.dataclass(frozen=True, eq=False)
class Test:
    """Static description of a single registrable test.

    Attributes:
        name: A unique name of the test, e.g. `rkt.base`.
        run: The test entry point, called with a `TestCluster`.
        cluster_size: A minimal number of machines the test needs.
        flags: Capabilities the test requires, see `Flag`.
        distros: Distros the test applies to. Empty means all distros.
        exclude_distros: Distros the test never applies to.
        user_data: Opaque payload used by the provisioning layer for initial machine config.
        native_funcs: Functions that can be executed on a machine by name, see `kolet`.

    Tests are compared and hashed by identity, the registry keeps names unique.
    """

    __test__ = False

    name: str
    run: tp.Callable[["test_cluster.TestCluster"], None]
    cluster_size: int = 1
    flags: frozenset[Flag] = frozenset()
    distros: frozenset[str] = frozenset()
    exclude_distros: frozenset[str] = frozenset()
    user_data: tp.Any = None
    native_funcs: tp.Mapping[str, ttypes.NativeFunc] = dataclasses.field(default_factory=dict)

    def __post_init__(self) -> None:
        # Allow passing lists or tuples and dicts, store immutable containers
        object.__setattr__(self, "flags", frozenset(self.flags))
        object.__setattr__(self, "distros", frozenset(self.distros))
        object.__setattr__(self, "exclude_distros", frozenset(self.exclude_distros))
        object.__setattr__(self, "native_funcs", types.MappingProxyType(dict(self.native_funcs)))

    def matches(self, test_filter: "Filter") -> bool:
        """Check if the test applies to a run described by the filter."""
        if self.distros and test_filter.distro not in self.distros:
            return False
        if test_filter.distro in self.exclude_distros:
            return False
        if not self.flags.issubset(test_filter.enabled_flags):
            return False
        if test_filter.patterns:
            return any(fnmatch.fnmatchcase(self.name, p) for p in test_filter.patterns)
        return True


@dataclasses.dataclass(frozen=True)
class Filter:
    """Description of a run used for selecting applicable tests.

    Attributes:
        distro: Distro of the machines under test.
        enabled_flags: Capabilities available in the environment.
        patterns: Optional glob patterns the test name must match. Empty means all tests.
    """

    distro: str
    enabled_flags: frozenset[Flag] = frozenset()
    patterns: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "enabled_flags", frozenset(self.enabled_flags))
        object.__setattr__(self, "patterns", tuple(self.patterns))

    @classmethod
    def from_config(cls, patterns: tp.Iterable[str] = ()) -> "Filter":
        """Create filter from the environment configuration."""
        try:
            flags = frozenset(Flag(f) for f in configuration.ENABLED_FLAGS)
        except ValueError as exc:
            msg = f"Invalid KOLA_ENABLED_FLAGS: {exc}"
            raise ValueError(msg) from exc
        return cls(distro=configuration.DISTRO, enabled_flags=flags, patterns=tuple(patterns))


def _validate(test: Test) -> None:
    if not test.name:
        msg = "Test name cannot be empty."
        raise errors.RegistrationError(msg)
    if not callable(test.run):
        msg = f"Test '{test.name}': `run` is not callable."
        raise errors.RegistrationError(msg)
    if test.cluster_size < 1:
        msg = f"Test '{test.name}': invalid cluster size {test.cluster_size}, must be >= 1."
        raise errors.RegistrationError(msg)

    overlap = test.distros & test.exclude_distros
    if overlap:
        msg = f"Test '{test.name}': distros {sorted(overlap)} are both included and excluded."
        raise errors.RegistrationError(msg)

    for func_name, func in test.native_funcs.items():
        if not (isinstance(func_name, str) and func_name):
            msg = f"Test '{test.name}': invalid native function name {func_name!r}."
            raise errors.RegistrationError(msg)
        if not callable(func):
            msg = f"Test '{test.name}': native function '{func_name}' is not callable."
            raise errors.RegistrationError(msg)


class TestRegistry:
    """Mapping of test names to tests, in registration order."""

    __test__ = False

    def __init__(self) -> None:
        self._tests: dict[str, Test] = {}

    def register(self, test: Test) -> Test:
        """Register a test.

        Raises:
            RegistrationConflictError: when a test with the same name is already registered.
            RegistrationError: when the test is misconfigured.
        """
        if test.name in self._tests:
            msg = f"Test '{test.name}' is already registered."
            raise errors.RegistrationConflictError(msg)
        _validate(test)
        self._tests[test.name] = test
        LOGGER.debug("Registered test '%s'", test.name)
        return test

    def get(self, name: str) -> Test:
        try:
            return self._tests[name]
        except KeyError:
            msg = f"Test '{name}' is not registered."
            raise KeyError(msg) from None

    def list_matching(self, test_filter: Filter) -> tp.Iterator[Test]:
        """Lazily yield tests applicable to a run described by the filter."""
        return (t for t in self._tests.values() if t.matches(test_filter))

    def __contains__(self, name: object) -> bool:
        return name in self._tests

    def __iter__(self) -> tp.Iterator[Test]:
        return iter(self._tests.values())

    def __len__(self) -> int:
        return len(self._tests)
