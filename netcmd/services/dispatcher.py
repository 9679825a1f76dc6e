from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from netcmd.common.errors import DispatchError, SendError
from netcmd.services.command_store import Command
from netcmd.state import Endpoint, LogKind

if TYPE_CHECKING:
    from netcmd.services.transport import TransportController


@dataclass(frozen=True)
class BatchResult:
    sent: int = 0
    failed: int = 0

    @property
    def total(self) -> int:
        return self.sent + self.failed


async def send_command(
    controller: TransportController, command: Command, destination: Endpoint
) -> bool:
    """Send one stored command. Failures are already reported by the sender."""
    controller.events.log(f'Sending command "{command.name}" to {destination}...', LogKind.INFO)
    try:
        await controller.send(destination, command.payload)
    except SendError:
        return False
    return True


async def send_batch(
    controller: TransportController, commands: Sequence[Command], destination: Endpoint
) -> BatchResult:
    """Send commands in order; a failing command does not stop the batch."""
    sent = failed = 0
    for cmd in commands:
        if await send_command(controller, cmd, destination):
            sent += 1
        else:
            failed += 1
    return BatchResult(sent=sent, failed=failed)


class RepeatingSender:
    """
    Re-sends a batch every ``interval`` seconds until stopped.

    ``commands`` is a callable so the selection can change between rounds.
    Failed rounds are reported and the loop keeps going.
    """

    def __init__(self, controller: TransportController) -> None:
        self.controller = controller
        self._task: asyncio.Task | None = None
        self.rounds: int = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(
        self,
        commands: Callable[[], Sequence[Command]],
        destination: Endpoint,
        interval: float,
    ) -> None:
        if self.running:
            raise DispatchError("repeating send already running")
        if not interval or interval <= 0:
            raise DispatchError(f"repeat interval must be > 0, got {interval!r}")
        self.rounds = 0
        self._task = asyncio.create_task(self._run(commands, destination, float(interval)))
        self.controller.events.log(f"Repeating send every {interval:g}s to {destination}")

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None or task.done():
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        self.controller.events.log(f"Repeating send stopped after {self.rounds} round(s)")

    async def _run(
        self, commands: Callable[[], Sequence[Command]], destination: Endpoint, interval: float
    ) -> None:
        loop = asyncio.get_running_loop()
        next_tick = loop.time()
        try:
            while True:
                batch = list(commands())
                if batch:
                    await send_batch(self.controller, batch, destination)
                else:
                    logging.debug("Repeating send: nothing selected this round")
                self.rounds += 1
                # sleep until next_tick (avoid drift)
                next_tick += interval
                await asyncio.sleep(max(0.0, next_tick - loop.time()))
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logging.error("Repeating send aborted: %s", e)
            raise
