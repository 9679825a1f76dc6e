from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from netcmd.common.errors import InvalidPayload, TransportFailure
from netcmd.services.command_store import Command
from netcmd.services.dispatcher import send_command
from netcmd.services.transport import TransportController
from netcmd.state import Endpoint, ListenerStatus, LogKind
from tests.utils.recorder import wait_until

if TYPE_CHECKING:
    from netcmd.services.events import EventChannel
    from tests.utils.recorder import RecordingObserver


@pytest.mark.integration
async def test_send_to_own_listener_logs_sent_and_recv(
    controller: TransportController, recorder: RecordingObserver, udp_port: int
):
    await controller.start_listener(udp_port)
    assert controller.listener_running and controller.listener_port == udp_port

    await controller.send(Endpoint("127.0.0.1", udp_port), "A0 B1 C2")

    assert await wait_until(lambda: len(recorder.of_kind(LogKind.RECV)) == 1)
    sent = recorder.of_kind(LogKind.SENT)
    recv = recorder.of_kind(LogKind.RECV)
    assert len(sent) == 1
    assert len(recv) == 1
    assert "a0 b1 c2" in recv[0].message
    assert recv[0].datagram is not None
    assert recv[0].datagram.source_port == controller.sender.local_port


@pytest.mark.integration
async def test_invalid_payload_never_reaches_listener(
    controller: TransportController, recorder: RecordingObserver, udp_port: int
):
    await controller.start_listener(udp_port)
    with pytest.raises(InvalidPayload):
        await controller.send(Endpoint("127.0.0.1", udp_port), "A0 B")
    assert not await wait_until(lambda: bool(recorder.of_kind(LogKind.RECV)), timeout=0.2)


@pytest.mark.integration
async def test_close_releases_listener_and_client(
    channel: EventChannel, recorder: RecordingObserver, udp_port: int
):
    ctl = TransportController(events=channel, listen_host="127.0.0.1", client_host="127.0.0.1")
    await ctl.open()
    await ctl.start_listener(udp_port)

    await ctl.close(2.0)

    assert not ctl.listener_running
    assert not ctl.is_open
    assert recorder.statuses == [
        ListenerStatus(running=True, port=udp_port),
        ListenerStatus(running=False, port=None),
    ]


@pytest.mark.integration
async def test_open_is_idempotent(controller: TransportController):
    port = controller.sender.local_port
    await controller.open()
    assert controller.sender.local_port == port


@pytest.mark.integration
async def test_send_command_reports_bad_host_name_as_failure(
    controller: TransportController, recorder: RecordingObserver
):
    ok = await send_command(controller, Command("x", "01"), Endpoint("a" * 70 + ".com", 9000))
    assert ok is False
    assert len(recorder.errors_of(TransportFailure)) == 1
