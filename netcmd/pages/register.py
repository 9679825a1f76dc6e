from __future__ import annotations

import logging
from collections.abc import Callable
from functools import partial

from nicegui import ui

from netcmd.common import codec
from netcmd.common.errors import CommandStoreError, DecodeError
from netcmd.services.command_store import store
from netcmd.services.transport import controller


class RegisterPage:
    """Command register tab: add, edit, delete and import/export hex commands."""

    def __init__(self) -> None:
        self.name_input: ui.input | None = None
        self.payload_input: ui.textarea | None = None
        self.list_container: ui.column | None = None
        self.blob_textarea: ui.textarea | None = None
        # Called after every change to the store (wired to the Send tab by main)
        self.on_change: list[Callable[[], None]] = []

    # ---- Actions ----

    def _changed(self) -> None:
        self.render_list()
        for cb in self.on_change:
            cb()

    def add_command(self) -> None:
        name = (self.name_input.value if self.name_input else "") or ""
        payload = (self.payload_input.value if self.payload_input else "") or ""
        try:
            updated = store.upsert(name, codec.normalize(payload))
        except (CommandStoreError, DecodeError) as e:
            controller.events.error(f"Cannot register command: {e}", e)
            ui.notify(f"Cannot register command: {e}", color="negative")
            return
        name = name.strip()
        controller.events.log(f'Command "{name}" {"updated" if updated else "added"}.')
        if self.name_input:
            self.name_input.value = ""
        if self.payload_input:
            self.payload_input.value = ""
        self._changed()

    def edit_command(self, name: str) -> None:
        cmd = store.get(name)
        if cmd is None:
            return
        if self.name_input:
            self.name_input.value = cmd.name
        if self.payload_input:
            self.payload_input.value = cmd.payload
        controller.events.log(f'Editing command "{name}"; press Add to save changes.')

    def delete_command(self, name: str) -> None:
        try:
            store.remove(name)
        except CommandStoreError as e:
            logging.error("Delete failed: %s", e)
            return
        controller.events.log(f'Command "{name}" deleted.')
        self._changed()

    def export_blob(self) -> None:
        if self.blob_textarea:
            self.blob_textarea.value = store.dumps()
        ui.notify(f"Exported {len(store)} command(s)", color="primary")

    def import_blob(self) -> None:
        text = (self.blob_textarea.value if self.blob_textarea else "") or ""
        try:
            count = store.loads(text)
        except CommandStoreError as e:
            controller.events.error(f"Import failed: {e}", e)
            ui.notify(f"Import failed: {e}", color="negative")
            return
        controller.events.log(f"Imported {count} command(s).")
        self._changed()

    # ---- UI ----

    def render_list(self) -> None:
        if not self.list_container:
            return
        self.list_container.clear()
        with self.list_container:
            if not len(store):
                ui.label("No commands registered").classes("text-sm text-[var(--q-secondary)]")
            for cmd in store:
                with ui.row().classes("w-full items-center no-wrap gap-2"):
                    with ui.column().classes("flex-grow gap-0 min-w-0"):
                        ui.label(cmd.name).classes("text-sm font-bold")
                        ui.label(cmd.payload).classes("text-xs truncate font-mono")
                    ui.button("Edit", on_click=partial(self.edit_command, cmd.name)).props(
                        "flat dense"
                    )
                    ui.button("Delete", on_click=partial(self.delete_command, cmd.name)).props(
                        "flat dense color=negative"
                    )

    def build(self) -> None:
        with ui.row().classes("w-full items-start gap-4 no-wrap"):
            with ui.card().classes("w-1/3"):
                ui.label("Register command").classes("text-md font-medium")
                self.name_input = ui.input(label="Name").classes("w-full")
                self.payload_input = (
                    ui.textarea(label="Payload (hex)", placeholder="A0 B1 C2")
                    .classes("w-full font-mono")
                )
                ui.button("Add command", on_click=self.add_command).props(
                    "unelevated color=primary"
                )
            with ui.card().classes("flex-grow"):
                ui.label("Registered commands").classes("text-md font-medium")
                self.list_container = ui.column().classes("w-full gap-1")
                with ui.expansion("Import / export").classes("w-full"):
                    self.blob_textarea = ui.textarea(label="Commands (JSON)").classes(
                        "w-full font-mono"
                    )
                    with ui.row().classes("gap-2"):
                        ui.button("Export", on_click=self.export_blob).props("unelevated")
                        ui.button("Import", on_click=self.import_blob).props("unelevated")
        self.render_list()
