import functools
import pathlib as pl
import tempfile

from kola_tests.utils import configuration


@functools.cache
def get_basetemp() -> pl.Path:
    """Return base directory for harness logs and artifacts."""
    basetemp = (
        pl.Path(configuration.LOG_DIR)
        if configuration.LOG_DIR
        else pl.Path(tempfile.gettempdir()) / "kola-tests"
    )
    basetemp.mkdir(mode=0o700, parents=True, exist_ok=True)
    return basetemp
