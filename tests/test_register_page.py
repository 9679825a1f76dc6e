from __future__ import annotations

from types import SimpleNamespace

import pytest

from netcmd.pages import register as register_page
from netcmd.services.command_store import Command, CommandStore


@pytest.fixture
def page(monkeypatch: pytest.MonkeyPatch) -> register_page.RegisterPage:
    monkeypatch.setattr(register_page, "store", CommandStore())
    monkeypatch.setattr(register_page.ui, "notify", lambda msg, **kw: None)
    p = register_page.RegisterPage()
    p.name_input = SimpleNamespace(value="")  # type: ignore[assignment]
    p.payload_input = SimpleNamespace(value="")  # type: ignore[assignment]
    return p


@pytest.mark.unit
def test_added_payload_is_stored_normalized(page: register_page.RegisterPage):
    page.name_input.value = " ping "
    page.payload_input.value = "A0B1 c2"
    page.add_command()
    assert register_page.store.all() == [Command("ping", "a0 b1 c2")]
    assert page.payload_input.value == ""


@pytest.mark.unit
@pytest.mark.parametrize("payload", ["ABC", "zz", "   "])
def test_bad_payload_is_not_registered(page: register_page.RegisterPage, payload: str):
    page.name_input.value = "x"
    page.payload_input.value = payload
    page.add_command()
    assert len(register_page.store) == 0
