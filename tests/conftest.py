from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from netcmd.services.events import EventChannel
from netcmd.services.listener import Listener
from netcmd.services.sender import Sender
from netcmd.services.transport import TransportController
from netcmd.state import ListenerPhase
from tests.utils.recorder import RecordingObserver
from tests.utils.udp_peer import UdpPeer, free_udp_port

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator


@pytest.fixture
def recorder() -> RecordingObserver:
    return RecordingObserver()


@pytest.fixture
def channel(recorder: RecordingObserver) -> EventChannel:
    ch = EventChannel()
    ch.subscribe(recorder)
    return ch


@pytest.fixture
def udp_port() -> int:
    return free_udp_port()


@pytest.fixture
def peer() -> Iterator[UdpPeer]:
    p = UdpPeer()
    try:
        yield p
    finally:
        p.close()


@pytest.fixture
async def sender(channel: EventChannel) -> AsyncIterator[Sender]:
    s = Sender(channel, bind_host="127.0.0.1")
    s.open()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
async def listener(channel: EventChannel) -> AsyncIterator[Listener]:
    lst = Listener(channel, host="127.0.0.1")
    try:
        yield lst
    finally:
        if lst.phase is ListenerPhase.BOUND:
            lst.stop()
        if lst.phase is not ListenerPhase.STOPPED:
            await lst.wait_closed(2.0)


@pytest.fixture
async def controller(channel: EventChannel) -> AsyncIterator[TransportController]:
    ctl = TransportController(events=channel, listen_host="127.0.0.1", client_host="127.0.0.1")
    await ctl.open()
    try:
        yield ctl
    finally:
        await ctl.close(2.0)
