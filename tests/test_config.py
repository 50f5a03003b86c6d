import json

import pytest

from pkgmenu.config import load_settings
from pkgmenu.models import Backend


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"manager": "apt-get", "assume_yes": True, "dialog": "whiptail", "extra": 1}))
    return str(path)


def test_defaults_without_file(tmp_path):
    s = load_settings(str(tmp_path / "missing.json"), environ={})
    assert s.manager.backend is Backend.UNSUPPORTED
    assert s.manager.raw == ""
    assert s.use_sudo is True
    assert s.assume_yes is False
    assert s.dialog == "textual"
    assert s.catalog_path == ""


def test_file_values(config_file):
    s = load_settings(config_file, environ={})
    assert s.manager.backend is Backend.APT_GET
    assert s.assume_yes is True
    assert s.dialog == "whiptail"


def test_env_overrides_file(config_file):
    s = load_settings(config_file, environ={"PKG_MANAGER": "pacman"})
    assert s.manager.backend is Backend.PACMAN


def test_overrides_win_and_none_is_ignored(config_file):
    s = load_settings(
        config_file,
        environ={"PKG_MANAGER": "pacman"},
        overrides={"manager": "zypper", "assume_yes": None, "use_sudo": False},
    )
    assert s.manager.backend is Backend.UNSUPPORTED
    assert s.manager.raw == "zypper"
    assert s.assume_yes is True
    assert s.use_sudo is False


def test_broken_json_uses_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")
    s = load_settings(str(path), environ={"PKG_MANAGER": "apt"})
    assert s.manager.backend is Backend.APT_GET
    assert s.dialog == "textual"


def test_unknown_dialog_falls_back(tmp_path):
    s = load_settings(str(tmp_path / "x.json"), environ={}, overrides={"dialog": "kdialog"})
    assert s.dialog == "textual"
