import subprocess

import pytest

from hidpi_fixer import __version__, cli


@pytest.fixture
def home(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / ".config"))
    monkeypatch.setattr(
        subprocess, "run",
        lambda args, **kw: subprocess.CompletedProcess(args, 0, stdout="", stderr=""),
    )
    return tmp_path


def test_version(capsys):
    with pytest.raises(SystemExit) as exc:
        cli.main(["--version"])
    assert exc.value.code == 0
    out = capsys.readouterr().out
    assert f"hidpi-fixer {__version__}" in out
    assert "MIT License" in out


def test_uninstall_removes_scripts_and_launchers(home):
    scripts = home / ".hidpi-fixer" / "scripts"
    scripts.mkdir(parents=True)
    (scripts / "eDP-1").write_text("#!/bin/bash\n", encoding="utf-8")
    autostart = home / ".config" / "autostart"
    autostart.mkdir(parents=True)
    launcher = autostart / "HiDPI-Fixer_eDP-1.desktop"
    launcher.write_text("[Desktop Entry]\n", encoding="utf-8")

    assert cli.main(["--uninstall"]) == 0
    assert not (home / ".hidpi-fixer").exists()
    assert not launcher.exists()


def test_uninstall_with_nothing_installed(home):
    assert cli.main(["-u"]) == 0


def test_non_linux_platform_refuses_gui(home, monkeypatch):
    monkeypatch.setattr(cli.sys, "platform", "darwin")
    assert cli.main([]) == 1
