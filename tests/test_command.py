from __future__ import annotations

import sys

import pytest

from fullnode_installer.errors import CommandError
from fullnode_installer.lib import command
from fullnode_installer.lib.command import run_cmd, run_pipe


def test_run_cmd_captures_output():
    r = run_cmd([sys.executable, "-c", "print('hello')"])
    assert r.returncode == 0
    assert r.stdout.strip() == "hello"


def test_run_cmd_passes_env_and_input():
    r = run_cmd(
        [sys.executable, "-c", "import os, sys; print(os.environ['DAEMON_NAME'] + sys.stdin.read())"],
        env={"DAEMON_NAME": "noded"},
        input_text="-in",
    )
    assert r.stdout.strip() == "noded-in"


def test_run_cmd_failure_raises_command_error():
    with pytest.raises(CommandError) as exc:
        run_cmd([sys.executable, "-c", "import sys; sys.stderr.write('bad'); sys.exit(3)"])
    assert exc.value.returncode == 3
    assert "bad" in exc.value.stderr


def test_run_cmd_unchecked_failure_returns_result():
    r = run_cmd([sys.executable, "-c", "import sys; sys.exit(2)"], check=False)
    assert r.returncode == 2


def test_missing_binary_raises_command_error():
    with pytest.raises(CommandError, match="Command not found"):
        run_cmd(["definitely-not-a-real-binary-xyz"])


def test_dry_run_does_not_execute(tmp_path):
    marker = tmp_path / "marker"
    r = run_cmd(["touch", str(marker)], dry_run=True)
    assert r.returncode == 0
    assert not marker.exists()


def test_sudo_prefix_only_when_not_root(monkeypatch):
    monkeypatch.setattr(command.os, "geteuid", lambda: 1000)
    r = run_cmd(["systemctl", "daemon-reload"], sudo=True, dry_run=True)
    assert r.argv == ["sudo", "systemctl", "daemon-reload"]

    monkeypatch.setattr(command.os, "geteuid", lambda: 0)
    r = run_cmd(["systemctl", "daemon-reload"], sudo=True, dry_run=True)
    assert r.argv == ["systemctl", "daemon-reload"]


def test_run_pipe_connects_commands(tmp_path):
    out = tmp_path / "out.txt"
    run_pipe(
        [sys.executable, "-c", "print('snapshot-bytes')"],
        [sys.executable, "-c", f"import sys; open({str(out)!r}, 'w').write(sys.stdin.read())"],
    )
    assert out.read_text().strip() == "snapshot-bytes"


def test_run_pipe_producer_failure():
    with pytest.raises(CommandError):
        run_pipe(
            [sys.executable, "-c", "import sys; sys.exit(1)"],
            [sys.executable, "-c", "import sys; sys.stdin.read()"],
        )
