import asyncio
import os

from pkgmenu import ui_app
from pkgmenu.dialog import ChoiceChannel, WhiptailDialog, get_provider, run_dialog
from pkgmenu.models import DialogItem, DialogMode, DialogRequest, Outcome

REQ = DialogRequest("t", "pick", (DialogItem("vim"), DialogItem("git")), mode=DialogMode.CHECKLIST)


def fake_app(answer):
    class FakeApp:
        def __init__(self, request):
            self.request = request

        def run(self):
            return answer

    return FakeApp


def test_get_provider():
    assert isinstance(get_provider("textual"), ui_app.TextualDialog)
    assert isinstance(get_provider("whiptail"), WhiptailDialog)


def test_textual_answer_goes_through_channel(monkeypatch):
    monkeypatch.setattr(ui_app, "DialogApp", fake_app((Outcome.OK, ["vim", "git"])))
    channels = []

    def factory():
        channels.append(ChoiceChannel())
        return channels[-1]

    res = run_dialog(ui_app.TextualDialog(), REQ, factory)
    assert res.ok
    assert res.tags == ("vim", "git")
    assert not os.path.exists(channels[0].path)


def test_textual_app_quit_is_cancel(monkeypatch):
    monkeypatch.setattr(ui_app, "DialogApp", fake_app(None))
    res = run_dialog(ui_app.TextualDialog(), REQ)
    assert res.outcome is Outcome.CANCEL
    assert res.tags == ()


def test_textual_tag_with_blank_survives_channel(monkeypatch):
    monkeypatch.setattr(ui_app, "DialogApp", fake_app((Outcome.OK, ["foo bar", "vim"])))
    res = run_dialog(ui_app.TextualDialog(), REQ)
    assert res.tags == ("foo bar", "vim")


def drive(request, *keys):
    async def scenario():
        app = ui_app.DialogApp(request)
        async with app.run_test() as pilot:
            await pilot.press(*keys)
        return app.return_value

    return asyncio.run(scenario())


def test_checklist_ok_returns_marked_tags():
    req = DialogRequest(
        "core", "pick",
        (DialogItem("vim", checked=True), DialogItem("git")),
        mode=DialogMode.CHECKLIST,
    )
    assert drive(req, "tab", "enter") == (Outcome.OK, ["vim"])


def test_menu_enter_returns_highlighted_tag():
    req = DialogRequest("menu", "pick", (DialogItem("core"), DialogItem("INSTALL")))
    assert drive(req, "down", "enter") == (Outcome.OK, ["INSTALL"])


def test_escape_is_cancel():
    assert drive(REQ, "escape") == (Outcome.CANCEL, [])


def test_yesno_enter_is_yes():
    req = DialogRequest("confirm", "Install?", mode=DialogMode.YESNO)
    assert drive(req, "enter") == (Outcome.OK, [])
