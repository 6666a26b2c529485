from __future__ import annotations

from pathlib import Path

import httpx
import pytest

from fullnode_installer import upgrade
from fullnode_installer.errors import CommandError, FullNodeError, ReleaseError, RpcError
from fullnode_installer.upgrade import (
    UpgradePlan,
    cleanup,
    compute_upgrade_height,
    parse_args,
    schedule_upgrade,
    upgrade_workdir,
)


def _status_client(height: str = "1234", status_code: int = 200) -> httpx.Client:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/status"
        if status_code != 200:
            return httpx.Response(status_code, text="boom")
        return httpx.Response(
            200,
            json={"result": {"sync_info": {"latest_block_height": height, "catching_up": False}}},
        )

    return httpx.Client(transport=httpx.MockTransport(handler))


def _fake_download(calls):
    def fake(*, daemon_name, version, arch, workdir, client=None, **_):
        calls.append({"daemon_name": daemon_name, "version": version, "arch": arch, "workdir": Path(workdir)})
        build = Path(workdir) / "build"
        build.mkdir(parents=True, exist_ok=True)
        binary = build / f"{daemon_name}-{version}-linux-{arch}"
        binary.write_bytes(b"\x7fELF")
        return binary

    return fake


@pytest.fixture
def plan(tmp_path) -> UpgradePlan:
    home = tmp_path / "home"
    home.mkdir()
    return UpgradePlan(
        target_version="v7.0.1",
        blocks_ahead=100,
        daemon_home=home,
        daemon_name="dydxprotocold",
        rpc_url="http://node:26657",
    )


def test_missing_target_version_exits_1(capsys):
    with pytest.raises(SystemExit) as exc:
        parse_args([], environ={})
    assert exc.value.code == 1
    assert "--target-version" in capsys.readouterr().err


@pytest.mark.parametrize("value", ["abc", "1.5", "-5", "10x", ""])
def test_invalid_blocks_ahead_exits_1(value):
    with pytest.raises(SystemExit) as exc:
        parse_args(["--target-version", "v7.0.1", f"--blocks-ahead={value}"], environ={})
    assert exc.value.code == 1


def test_unknown_option_exits_1():
    with pytest.raises(SystemExit) as exc:
        parse_args(["--target-version", "v7.0.1", "--bogus"], environ={})
    assert exc.value.code == 1


def test_defaults_and_environment_overrides():
    p = parse_args(["--target-version", "v7.0.1"], environ={})
    assert p.blocks_ahead == 100
    assert p.daemon_name == "dydxprotocold"
    assert p.daemon_home == Path("~/.dydxprotocol").expanduser()

    p = parse_args(["--target-version", "v7.0.1"], environ={"DAEMON_HOME": "/srv/node", "DAEMON_NAME": "noded"})
    assert p.daemon_home == Path("/srv/node")
    assert p.daemon_name == "noded"


def test_flags_beat_environment():
    p = parse_args(
        ["--target-version", "v8.0.0", "--blocks-ahead", "0", "--daemon-home", "/a", "--daemon-name", "b"],
        environ={"DAEMON_HOME": "/srv/node", "DAEMON_NAME": "noded"},
    )
    assert (p.blocks_ahead, p.daemon_home, p.daemon_name) == (0, Path("/a"), "b")


@pytest.mark.parametrize(
    "latest,ahead,expected",
    [(0, 0, 0), (0, 100, 100), (1234, 100, 1334), (10**12, 5, 10**12 + 5)],
)
def test_compute_upgrade_height(latest, ahead, expected):
    assert compute_upgrade_height(latest, ahead) == expected


def test_compute_upgrade_height_rejects_negative():
    with pytest.raises(ValueError):
        compute_upgrade_height(-1, 10)


def test_schedule_upgrade_success(monkeypatch, tmp_path, plan):
    downloads: list = []
    scheduled: list = []
    monkeypatch.setattr(upgrade, "download_release_binary", _fake_download(downloads))
    monkeypatch.setattr(upgrade, "add_upgrade", lambda **kw: scheduled.append(kw))

    tmp_root = tmp_path / "tmp"
    height = schedule_upgrade(plan, arch="arm64", tmp_root=str(tmp_root), client=_status_client("1234"))

    assert height == 1334
    assert downloads[0]["version"] == "v7.0.1"
    assert downloads[0]["arch"] == "arm64"
    assert downloads[0]["workdir"] == tmp_root / "protocold-upgrade-v7.0.1"

    staged = plan.daemon_home / "dydxprotocold-v7.0.1-linux-arm64"
    assert staged.is_file()
    assert scheduled == [
        {
            "name": "v7.0.1",
            "binary_path": staged,
            "upgrade_height": 1334,
            "daemon_home": plan.daemon_home,
            "daemon_name": "dydxprotocold",
        }
    ]
    assert not upgrade_workdir("v7.0.1", tmp_root=str(tmp_root)).exists()


def test_schedule_failure_still_cleans_up(monkeypatch, tmp_path, plan):
    monkeypatch.setattr(upgrade, "download_release_binary", _fake_download([]))

    def failing_add_upgrade(**_):
        raise CommandError("Command failed (1): cosmovisor add-upgrade", returncode=1)

    monkeypatch.setattr(upgrade, "add_upgrade", failing_add_upgrade)

    tmp_root = tmp_path / "tmp"
    with pytest.raises(FullNodeError, match="Failed to schedule upgrade"):
        schedule_upgrade(plan, arch="amd64", tmp_root=str(tmp_root), client=_status_client())
    assert not upgrade_workdir("v7.0.1", tmp_root=str(tmp_root)).exists()


def test_rpc_failure_cleans_up_and_skips_scheduling(monkeypatch, tmp_path, plan):
    scheduled: list = []
    monkeypatch.setattr(upgrade, "download_release_binary", _fake_download([]))
    monkeypatch.setattr(upgrade, "add_upgrade", lambda **kw: scheduled.append(kw))

    tmp_root = tmp_path / "tmp"
    with pytest.raises(RpcError, match="Failed to fetch latest block height"):
        schedule_upgrade(plan, arch="amd64", tmp_root=str(tmp_root), client=_status_client(status_code=500))
    assert scheduled == []
    assert not upgrade_workdir("v7.0.1", tmp_root=str(tmp_root)).exists()


def test_cleanup_is_idempotent(tmp_path):
    workdir = tmp_path / "protocold-upgrade-v1"
    (workdir / "build").mkdir(parents=True)
    cleanup(workdir)
    cleanup(workdir)
    assert not workdir.exists()


def test_main_reports_fatal_and_exits_1(monkeypatch, capsys):
    def boom(plan, **_):
        raise ReleaseError("Failed to download binary: HTTP 404")

    monkeypatch.setattr(upgrade, "schedule_upgrade", boom)
    assert upgrade.main(["--target-version", "v9.9.9"]) == 1
    assert "[FATAL] Failed to download binary" in capsys.readouterr().err
