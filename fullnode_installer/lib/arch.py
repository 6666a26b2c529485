from __future__ import annotations

import platform

from ..errors import UnsupportedArchitectureError

SUPPORTED_ARCHES = ("amd64", "arm64")


def normalize_arch(machine: str) -> str:
    """Map `uname -m` output to the release naming used by Go and the node binary."""

    m = machine.strip().lower()
    arch = {
        "x86_64": "amd64",
        "amd64": "amd64",
        "aarch64": "arm64",
        "arm64": "arm64",
    }.get(m)
    if arch is None:
        raise UnsupportedArchitectureError(
            f"Unsupported architecture: {machine}. Only amd64 and arm64 are supported."
        )
    return arch


def host_arch() -> str:
    return normalize_arch(platform.machine())
