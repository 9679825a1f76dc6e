from __future__ import annotations

import logging
from functools import partial

from nicegui import ui

from netcmd.common.errors import DispatchError, InvalidEndpoint
from netcmd.constants import LOG_MAX_LINES
from netcmd.services.command_store import Command, store
from netcmd.services.dispatcher import RepeatingSender, send_batch, send_command
from netcmd.services.transport import controller
from netcmd.state import (
    Endpoint,
    ListenerStatus,
    ListenerView,
    LogEvent,
    destination_form,
    listener_view,
    valid_port,
)


class ListenerViewObserver:
    """Observer that mirrors listener status notifications into the bindable view."""

    def __init__(self, view: ListenerView) -> None:
        self.view = view

    def on_log(self, event: LogEvent) -> None:
        pass

    def on_status(self, status: ListenerStatus) -> None:
        self.view.running = status.running
        self.view.port = status.port
        self.view.status_text = f"running (port {status.port})" if status.running else "stopped"


class SendPage:
    """Send tab: destination, listener toggle, command dispatch and the event log."""

    def __init__(self) -> None:
        self.commands_container: ui.column | None = None
        self.response_log: ui.log | None = None
        self.repeat_switch: ui.switch | None = None
        self.repeater = RepeatingSender(controller)

    # ---- Helpers ----

    def _destination(self) -> Endpoint | None:
        try:
            return Endpoint((destination_form.host or "").strip(), int(destination_form.port or 0))
        except (InvalidEndpoint, TypeError, ValueError) as e:
            err = e if isinstance(e, InvalidEndpoint) else InvalidEndpoint(str(e))
            controller.events.error(f"Invalid destination: {e}", err)
            ui.notify("Enter a valid destination IP and port", color="negative")
            return None

    def _selected_commands(self) -> list[Command]:
        return [c for c in store if c.name in destination_form.selected]

    def _on_select(self, name: str, e) -> None:
        selected = [n for n in destination_form.selected if n != name]
        if e.value:
            selected.append(name)
        destination_form.selected = selected

    # ---- Actions ----

    async def send_one(self, name: str) -> None:
        cmd = store.get(name)
        if cmd is None:
            ui.notify(f'Command "{name}" not found', color="negative")
            return
        dest = self._destination()
        if dest is None:
            return
        await send_command(controller, cmd, dest)

    async def send_selected(self) -> None:
        cmds = self._selected_commands()
        if not cmds:
            ui.notify("No commands selected", color="warning")
            return
        dest = self._destination()
        if dest is None:
            return
        result = await send_batch(controller, cmds, dest)
        ui.notify(
            f"Batch: {result.sent} sent, {result.failed} failed",
            color="positive" if not result.failed else "warning",
        )

    async def toggle_repeat(self, e) -> None:
        if not e.value:
            await self.repeater.stop()
            return
        if self.repeater.running:
            return
        dest = self._destination()
        if dest is None:
            if self.repeat_switch:
                self.repeat_switch.value = False
            return
        try:
            self.repeater.start(
                self._selected_commands, dest, float(destination_form.repeat_interval_s or 0)
            )
        except DispatchError as ex:
            logging.error("Repeat start failed: %s", ex)
            ui.notify(str(ex), color="negative")
            if self.repeat_switch:
                self.repeat_switch.value = False

    async def toggle_listener(self) -> None:
        if controller.listener_running:
            controller.events.log("Stopping UDP listener...")
            controller.stop_listener()
            return
        try:
            port = int(destination_form.local_port or 0)
        except (TypeError, ValueError):
            port = 0
        if not valid_port(port):
            ui.notify("Local receive port is invalid", color="negative")
            return
        controller.events.log(f"Starting UDP listener on port {port}...")
        await controller.start_listener(port)

    def clear_log(self) -> None:
        if self.response_log:
            self.response_log.clear()
        controller.events.log("Log cleared.")

    # ---- UI ----

    def render_commands(self) -> None:
        if not self.commands_container:
            return
        self.commands_container.clear()
        with self.commands_container:
            if not len(store):
                ui.label("Register commands on the Register tab").classes("text-sm")
            for cmd in store:
                with ui.row().classes("w-full items-center no-wrap gap-2"):
                    ui.checkbox(
                        value=cmd.name in destination_form.selected,
                        on_change=partial(self._on_select, cmd.name),
                    )
                    with ui.column().classes("flex-grow gap-0 min-w-0"):
                        ui.label(cmd.name).classes("text-sm font-bold")
                        ui.label(cmd.payload).classes("text-xs truncate font-mono")
                    ui.button("Send", on_click=partial(self.send_one, cmd.name)).props(
                        "unelevated dense color=primary"
                    )

    def build(self) -> None:
        with ui.row().classes("w-full items-start gap-4 no-wrap"):
            with ui.column().classes("w-1/3 gap-4"):
                with ui.card().classes("w-full"):
                    ui.label("Network").classes("text-md font-medium")
                    ui.input(label="Destination IP").bind_value(destination_form, "host").classes(
                        "w-full"
                    )
                    ui.number(label="Destination port", min=1, max=65535, format="%d").bind_value(
                        destination_form, "port"
                    ).classes("w-full")
                    ui.number(label="Local receive port", min=1, max=65535, format="%d").bind_value(
                        destination_form, "local_port"
                    ).classes("w-full")
                    with ui.row().classes("items-center gap-2"):
                        ui.label().bind_text_from(
                            listener_view, "status_text", backward=lambda v: f"Listener: {v}"
                        ).classes("text-sm")
                        ui.button(on_click=self.toggle_listener).bind_text_from(
                            listener_view,
                            "running",
                            backward=lambda v: "Stop listener" if v else "Start listener",
                        ).props("unelevated")
                with ui.card().classes("w-full"):
                    ui.label("Dispatch").classes("text-md font-medium")
                    ui.button("Send selected", on_click=self.send_selected).props(
                        "unelevated color=primary"
                    )
                    with ui.row().classes("items-center gap-2"):
                        ui.number(label="Interval (s)", min=0.05, step=0.5).bind_value(
                            destination_form, "repeat_interval_s"
                        ).classes("w-28")
                        self.repeat_switch = ui.switch("Repeat selected", on_change=self.toggle_repeat)
            with ui.column().classes("flex-grow gap-4"):
                with ui.card().classes("w-full"):
                    ui.label("Commands").classes("text-md font-medium")
                    self.commands_container = ui.column().classes("w-full gap-1")
                with ui.card().classes("w-full"):
                    with ui.row().classes("items-center justify-between w-full"):
                        ui.label("Log").classes("text-md font-medium")
                        ui.button("Clear", on_click=self.clear_log).props("flat dense")
                    self.response_log = (
                        ui.log(max_lines=LOG_MAX_LINES)
                        .classes("w-full whitespace-pre-wrap break-words font-mono")
                        .style("height: 320px")
                    )
        self.render_commands()
