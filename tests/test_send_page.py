from __future__ import annotations

import pytest

from netcmd.pages import send as send_page
from netcmd.services.events import EventChannel
from netcmd.state import destination_form


class RecorderController:
    """Stands in for the transport controller; records listener requests only."""

    def __init__(self, running: bool) -> None:
        self.events = EventChannel()
        self.listener_running = running
        self.started: list[int] = []
        self.stops = 0

    async def start_listener(self, port: int) -> None:
        self.started.append(port)

    def stop_listener(self) -> None:
        self.stops += 1


@pytest.fixture
def notes(monkeypatch: pytest.MonkeyPatch) -> list[str]:
    seen: list[str] = []
    monkeypatch.setattr(send_page.ui, "notify", lambda msg, **kw: seen.append(msg))
    monkeypatch.setattr(destination_form, "local_port", destination_form.local_port)
    return seen


@pytest.mark.unit
@pytest.mark.parametrize("field", [None, 0, 70000])
async def test_running_listener_stops_even_with_bad_port_field(
    monkeypatch: pytest.MonkeyPatch, notes: list[str], field
):
    ctl = RecorderController(running=True)
    monkeypatch.setattr(send_page, "controller", ctl)
    destination_form.local_port = field

    await send_page.SendPage().toggle_listener()

    assert ctl.stops == 1
    assert ctl.started == []
    assert notes == []


@pytest.mark.unit
async def test_stopped_listener_needs_valid_port_to_start(
    monkeypatch: pytest.MonkeyPatch, notes: list[str]
):
    ctl = RecorderController(running=False)
    monkeypatch.setattr(send_page, "controller", ctl)

    destination_form.local_port = None
    await send_page.SendPage().toggle_listener()
    assert ctl.started == []
    assert notes == ["Local receive port is invalid"]

    destination_form.local_port = 9001
    await send_page.SendPage().toggle_listener()
    assert ctl.started == [9001]
    assert ctl.stops == 0
