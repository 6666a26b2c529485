from __future__ import annotations

import logging
import os
import shlex
import subprocess
from dataclasses import dataclass
from typing import Mapping, Sequence

from ..errors import CommandError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CmdResult:
    argv: list[str]
    returncode: int
    stdout: str
    stderr: str


def fmt_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


def _prepare(argv: Sequence[str], *, sudo: bool) -> list[str]:
    argv_list = [str(a) for a in argv]
    if sudo and os.geteuid() != 0:
        argv_list = ["sudo", *argv_list]
    return argv_list


def run_cmd(
    argv: Sequence[str],
    *,
    check: bool = True,
    env: Mapping[str, str] | None = None,
    cwd: str | None = None,
    input_text: str | None = None,
    dry_run: bool = False,
    sudo: bool = False,
) -> CmdResult:
    """Run a host command with consistent logging.

    - Always logs the command.
    - Captures stdout/stderr; both are logged at DEBUG.
    - sudo prefixes the command unless we already run as root.
    - dry_run logs but does not execute.
    """

    argv_list = _prepare(argv, sudo=sudo)
    logger.info("CMD %s", fmt_argv(argv_list))

    if dry_run:
        return CmdResult(argv=argv_list, returncode=0, stdout="", stderr="")

    try:
        p = subprocess.run(
            argv_list,
            input=input_text,
            text=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            cwd=cwd,
            env=dict(os.environ, **(env or {})),
        )
    except FileNotFoundError as e:
        raise CommandError(f"Command not found: {argv_list[0]}", returncode=127) from e

    if p.stdout:
        logger.debug("STDOUT %s", p.stdout.strip())
    if p.stderr:
        logger.debug("STDERR %s", p.stderr.strip())

    if check and p.returncode != 0:
        raise CommandError(
            f"Command failed ({p.returncode}): {fmt_argv(argv_list)}\n{p.stderr}",
            returncode=p.returncode,
            stderr=p.stderr,
        )

    return CmdResult(argv=argv_list, returncode=p.returncode, stdout=p.stdout, stderr=p.stderr)


def run_pipe(
    producer: Sequence[str],
    consumer: Sequence[str],
    *,
    cwd: str | None = None,
    dry_run: bool = False,
) -> None:
    """Run `producer | consumer`, failing if either side exits non-zero."""

    left = [str(a) for a in producer]
    right = [str(a) for a in consumer]
    logger.info("CMD %s | %s", fmt_argv(left), fmt_argv(right))

    if dry_run:
        return

    with subprocess.Popen(left, stdout=subprocess.PIPE, cwd=cwd) as src:
        dst = subprocess.run(right, stdin=src.stdout, stderr=subprocess.PIPE, text=True, cwd=cwd)
        # Let the producer see SIGPIPE if the consumer exits early.
        if src.stdout is not None:
            src.stdout.close()
        src_rc = src.wait()

    if src_rc != 0:
        raise CommandError(f"Command failed ({src_rc}): {fmt_argv(left)}", returncode=src_rc)
    if dst.returncode != 0:
        raise CommandError(
            f"Command failed ({dst.returncode}): {fmt_argv(right)}\n{dst.stderr}",
            returncode=dst.returncode,
            stderr=dst.stderr,
        )
