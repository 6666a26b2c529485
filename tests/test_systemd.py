from __future__ import annotations

from fullnode_installer.lib import systemd
from fullnode_installer.lib.systemd import NodeUnit, install_unit, render_unit


def _unit() -> NodeUnit:
    return NodeUnit(
        daemon_name="dydxprotocold",
        daemon_home="/home/ops/.dydxprotocol",
        user="ops",
        cosmovisor_path="/home/ops/go/bin/cosmovisor",
    )


def test_render_unit():
    text = render_unit(_unit())
    lines = text.splitlines()

    assert lines[0] == "[Unit]"
    assert "Description=dydxprotocol node service" in lines
    assert "After=network-online.target" in lines
    assert "User=ops" in lines
    assert "ExecStart=/home/ops/go/bin/cosmovisor run start --non-validating-full-node=true" in lines
    assert "WorkingDirectory=/home/ops/.dydxprotocol" in lines
    assert "Restart=always" in lines
    assert "RestartSec=5" in lines
    assert "LimitNOFILE=4096" in lines
    assert 'Environment="DAEMON_HOME=/home/ops/.dydxprotocol"' in lines
    assert 'Environment="DAEMON_NAME=dydxprotocold"' in lines
    assert 'Environment="DAEMON_ALLOW_DOWNLOAD_BINARIES=false"' in lines
    assert 'Environment="DAEMON_RESTART_AFTER_UPGRADE=true"' in lines
    assert 'Environment="UNSAFE_SKIP_BACKUP=true"' in lines
    assert lines[-2:] == ["[Install]", "WantedBy=multi-user.target"]


def test_install_unit_writes_reloads_and_enables(monkeypatch):
    calls = []

    def fake_run_cmd(argv, **kw):
        calls.append((list(argv), kw))

    monkeypatch.setattr(systemd, "run_cmd", fake_run_cmd)
    install_unit(_unit())

    assert [c[0] for c in calls] == [
        ["tee", "/etc/systemd/system/dydxprotocold.service"],
        ["systemctl", "daemon-reload"],
        ["systemctl", "enable", "dydxprotocold"],
    ]
    assert calls[0][1]["input_text"] == render_unit(_unit())
    assert all(kw["sudo"] for _, kw in calls)
