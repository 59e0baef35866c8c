"""Handles of cluster machines that remote commands can be executed on.

Machines are created and destroyed by the provisioning layer. The harness only references them
as targets of remote commands.
"""

import logging
import typing as tp

from kola_tests.utils import configuration
from kola_tests.utils import helpers

LOGGER = logging.getLogger(__name__)


class Machine:
    """Base class for a single cluster member."""

    def __init__(self, machine_id: str) -> None:
        self.machine_id = machine_id

    @property
    def ip(self) -> str:
        msg = f"Not implemented for machine type '{self.__class__.__name__}'."
        raise NotImplementedError(msg)

    def ssh(self, cmd: str) -> bytes:
        """Run `cmd` on the machine and return its combined output.

        Raises:
            CommandError: when the command exits with non-zero status or the transport fails.
        """
        msg = f"Not implemented for machine type '{self.__class__.__name__}'."
        raise NotImplementedError(msg)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}: {self.machine_id}>"


class SSHMachine(Machine):
    """Machine reachable with the `ssh` client."""

    def __init__(
        self,
        machine_id: str,
        address: str,
        *,
        user: str = "",
        port: int = 22,
        ssh_options: tp.Sequence[str] | None = None,
    ) -> None:
        super().__init__(machine_id=machine_id)
        self.address = address
        self.user = user or configuration.SSH_USER
        self.port = port
        self.ssh_options = (
            tuple(ssh_options) if ssh_options is not None else configuration.SSH_OPTIONS
        )

    @property
    def ip(self) -> str:
        return self.address

    def ssh(self, cmd: str) -> bytes:
        LOGGER.debug("%s: running `%s`", self.machine_id, cmd)
        ssh_cmd = [
            "ssh",
            *self.ssh_options,
            "-p",
            str(self.port),
            f"{self.user}@{self.address}",
            cmd,
        ]
        return helpers.run_command(ssh_cmd)
