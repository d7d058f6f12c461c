from __future__ import annotations


class HttpCheckConfigError(ValueError):
    """Bad command line or unresolvable configuration.

    ``to_stderr`` selects the stream the message is written to and
    ``show_usage`` asks for the usage text to follow it.
    """

    def __init__(self, message: str, *, to_stderr: bool = True, show_usage: bool = False) -> None:
        super().__init__(message)
        self.to_stderr = to_stderr
        self.show_usage = show_usage


class HttpCheckError(RuntimeError):
    pass


class BodyReadError(HttpCheckError):
    pass
