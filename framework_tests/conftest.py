import os
import tempfile

import pytest

# Keep `framework.log` out of the shared temp dir
if not os.environ.get("KOLA_LOG_DIR"):
    os.environ["KOLA_LOG_DIR"] = tempfile.mkdtemp(prefix="kola-framework-tests-")

from fakes import FakeMachine  # noqa: E402

from kola_tests.register import register  # noqa: E402


@pytest.fixture
def machines() -> list[FakeMachine]:
    return [FakeMachine(machine_id=f"m{i}") for i in range(3)]


@pytest.fixture
def registry() -> register.TestRegistry:
    return register.TestRegistry()
