from __future__ import annotations


class FullNodeError(RuntimeError):
    """Base error for installer, upgrade and monitor failures."""


class ConfigError(FullNodeError):
    pass


class UnsupportedArchitectureError(FullNodeError):
    pass


class CommandError(FullNodeError):
    def __init__(self, message: str, *, returncode: int, stderr: str = "") -> None:
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class HttpError(FullNodeError):
    pass


class RpcError(FullNodeError):
    pass


class ReleaseError(FullNodeError):
    pass


class SnapshotError(FullNodeError):
    pass
