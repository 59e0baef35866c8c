import logging
import subprocess

from kola_tests.cluster import errors

LOGGER = logging.getLogger(__name__)


def run_command(command: str | list[str]) -> bytes:
    """Run command, return its combined stdout and stderr."""
    if isinstance(command, str):
        cmd = command.split()
        cmd_str = command
    else:
        cmd = command
        cmd_str = " ".join(command)

    LOGGER.debug("Running `%s`", cmd_str)

    try:
        with subprocess.Popen(cmd, stdout=subprocess.PIPE, stderr=subprocess.STDOUT) as p:
            stdout, __ = p.communicate()
            retcode = p.returncode
    except OSError as exc:
        msg = f"Failed to run `{cmd_str}`: {exc}"
        raise errors.CommandError(msg, command=cmd_str) from exc

    if retcode != 0:
        msg = f"An error occurred while running `{cmd_str}` (status {retcode}): {stdout.decode()}"
        raise errors.CommandError(msg, command=cmd_str, output=stdout, returncode=retcode)

    return stdout
