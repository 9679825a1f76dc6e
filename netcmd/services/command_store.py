from __future__ import annotations

import json
from collections.abc import Iterable, Iterator
from dataclasses import asdict, dataclass

from netcmd.common.errors import CommandStoreError


@dataclass(frozen=True)
class Command:
    name: str
    payload: str  # hex text as authored


class CommandStore:
    """
    Named command library (name -> hex payload), in registration order.

    Adding a command under an existing name replaces its payload in place.
    ``dumps``/``loads`` exchange the library as a JSON text blob; persisting
    that blob is up to the caller.
    """

    def __init__(self, commands: Iterable[Command] = ()) -> None:
        self._commands: dict[str, Command] = {}
        for cmd in commands:
            self.upsert(cmd.name, cmd.payload)

    def __len__(self) -> int:
        return len(self._commands)

    def __iter__(self) -> Iterator[Command]:
        return iter(list(self._commands.values()))

    def __contains__(self, name: object) -> bool:
        return name in self._commands

    def all(self) -> list[Command]:
        return list(self._commands.values())

    def names(self) -> list[str]:
        return list(self._commands)

    def get(self, name: str) -> Command | None:
        return self._commands.get(name)

    def upsert(self, name: str, payload: str) -> bool:
        """Add or update a command. Returns True when an existing entry was updated."""
        name = (name or "").strip()
        payload = (payload or "").strip()
        if not name or not payload:
            raise CommandStoreError("command name and payload must not be empty")
        existed = name in self._commands
        self._commands[name] = Command(name=name, payload=payload)
        return existed

    def remove(self, name: str) -> Command:
        try:
            return self._commands.pop(name)
        except KeyError:
            raise CommandStoreError(f"no command named {name!r}") from None

    # ---- Import/export blobs ----

    def dumps(self) -> str:
        return json.dumps([asdict(c) for c in self._commands.values()], ensure_ascii=False, indent=2)

    def loads(self, text: str, replace: bool = True) -> int:
        """
        Load commands from a JSON blob produced by ``dumps``.

        The store is left untouched when the blob is invalid. Returns the
        number of commands read.
        """
        try:
            data = json.loads(text)
        except (TypeError, json.JSONDecodeError) as e:
            raise CommandStoreError(f"invalid command file: {e}") from e
        if not isinstance(data, list):
            raise CommandStoreError("invalid command file: expected a list")

        staged = CommandStore() if replace else CommandStore(self.all())
        for i, item in enumerate(data):
            if not isinstance(item, dict):
                raise CommandStoreError(f"invalid command file: entry {i} is not an object")
            name, payload = item.get("name"), item.get("payload")
            if not isinstance(name, str) or not isinstance(payload, str):
                raise CommandStoreError(f"invalid command file: entry {i} needs name and payload")
            staged.upsert(name, payload)
        self._commands = staged._commands
        return len(data)


# Module-level singleton instance
store = CommandStore()
