import pytest

from pkgmenu.cli import main

from .conftest import CANCEL, FakeRunner, ScriptedDialog, ok


@pytest.fixture
def base_args(tmp_path, monkeypatch):
    monkeypatch.delenv("PKG_MANAGER", raising=False)
    return ["--config", str(tmp_path / "config.json"), "--no-sudo"]


def test_unsupported_manager_stops_before_any_call(base_args):
    runner = FakeRunner()
    assert main(base_args + ["--manager", "zypper", "install", "vim"], runner=runner) == 1
    assert runner.calls == []


def test_missing_manager_stops(base_args):
    runner = FakeRunner()
    assert main(base_args + ["sync"], runner=runner) == 1
    assert runner.calls == []


def test_install_is_batched(base_args):
    runner = FakeRunner()
    assert main(base_args + ["--manager", "apt-get", "install", "vim", "git"], runner=runner) == 0
    assert runner.calls == [(["apt-get", "install", "vim", "git"], True)]


def test_env_selects_backend(base_args, monkeypatch):
    monkeypatch.setenv("PKG_MANAGER", "pacman")
    runner = FakeRunner()
    assert main(base_args + ["--yes", "upgrade"], runner=runner) == 0
    assert runner.calls == [(["pacman", "-Syu", "--noconfirm"], True)]


def test_failed_command_exit_code(base_args):
    runner = FakeRunner(rc=1)
    assert main(base_args + ["--manager", "pacman", "sync"], runner=runner) == 1


def test_autoremove_nothing_to_do(base_args, capsys):
    runner = FakeRunner(outputs={("pacman", "-Qtdq"): (1, "")})
    assert main(base_args + ["--manager", "pacman", "autoremove"], runner=runner) == 0
    assert runner.calls == []
    assert "Nothing to do." in capsys.readouterr().out


def test_menu_installs_selection(base_args, capsys):
    runner = FakeRunner()
    provider = ScriptedDialog([
        ok("core"), ok('"git" "vim"'),
        ok("optional"), CANCEL,
        ok("apps"), ok('"firefox"'),
        ok("pip"), CANCEL,
        ok("INSTALL"), ok(),
    ])
    assert main(base_args + ["--manager", "pacman"], provider=provider, runner=runner) == 0
    assert runner.calls == [
        (["pacman", "-S", "git", "vim"], True),
        (["pacman", "-S", "firefox"], True),
    ]
    out = capsys.readouterr().out.splitlines()
    assert out == [
        "core: installed git vim",
        "pip: skipped (nothing selected)",
        "optional: skipped (nothing selected)",
        "apps: installed firefox",
    ]


def test_menu_abort_installs_nothing(base_args):
    runner = FakeRunner()
    assert main(base_args + ["--manager", "pacman", "menu"], provider=ScriptedDialog([CANCEL]), runner=runner) == 0
    assert runner.calls == []


def test_menu_without_dialog(base_args):
    runner = FakeRunner()
    provider = ScriptedDialog(available=False)
    assert main(base_args + ["--manager", "pacman", "menu"], provider=provider, runner=runner) == 1
    assert provider.requests == []
    assert runner.calls == []
