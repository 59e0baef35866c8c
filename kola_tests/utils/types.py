import typing as tp

# Output of a remote command; `None` error means success
CommandOutput = tuple[bytes, Exception | None]
NativeFunc = tp.Callable[[], None]
