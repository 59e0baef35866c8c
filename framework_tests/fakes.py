import typing as tp

from kola_tests.cluster import errors
from kola_tests.cluster import machine as machine_mod

Response = bytes | errors.CommandError | tp.Callable[[str], bytes]


class FakeMachine(machine_mod.Machine):
    """In-memory machine that replies to commands with canned responses.

    Responses are looked up by a substring of the command. Commands without a matching
    response succeed with empty output.
    """

    def __init__(self, machine_id: str, responses: dict[str, Response] | None = None) -> None:
        super().__init__(machine_id=machine_id)
        self.responses: dict[str, Response] = responses or {}
        self.commands: list[str] = []

    @property
    def ip(self) -> str:
        return "127.0.0.1"

    def fail_on(self, cmd_part: str, output: bytes = b"boom", returncode: int = 1) -> None:
        self.responses[cmd_part] = errors.CommandError(
            f"`{cmd_part}` failed", command=cmd_part, output=output, returncode=returncode
        )

    def ssh(self, cmd: str) -> bytes:
        self.commands.append(cmd)
        for cmd_part, response in self.responses.items():
            if cmd_part not in cmd:
                continue
            if isinstance(response, errors.CommandError):
                raise response
            if callable(response):
                return response(cmd)
            return response
        return b""


def noop(c: tp.Any) -> None:  # noqa: ARG001
    pass


def etcd_healthy_output(members: int) -> bytes:
    lines = [
        f"member {i:016x} is healthy: got healthy result from http://10.0.0.{i}:2379"
        for i in range(members)
    ]
    lines.append("cluster is healthy")
    return "\n".join(lines).encode()
