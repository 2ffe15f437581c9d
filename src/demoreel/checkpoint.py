"""
Global-state checkpoints.

Demonstrations temporarily override global settings of the host for visual
effect (a larger font, a hidden clock, a different prompt). The
CheckpointStore records how each setting looked before its first override in
a session and puts everything back when the session ends, even on abort.

A setting's prior disposition is one of:
    - HadValue(original): bound to a value
    - WasBoundButNil: bound, but empty
    - WasUnbound: not bound at all
"""

import logging
from collections.abc import MutableMapping
from dataclasses import dataclass
from typing import Any, Protocol

LOG = logging.getLogger(__name__)


# =============================================================================
# Dispositions
# =============================================================================


@dataclass(frozen=True)
class HadValue:
    original: Any


@dataclass(frozen=True)
class WasBoundButNil:
    pass


@dataclass(frozen=True)
class WasUnbound:
    pass


Disposition = HadValue | WasBoundButNil | WasUnbound


# =============================================================================
# Settings Backends
# =============================================================================


class SettingsBackend(Protocol):
    """Where named global settings live."""

    def lookup(self, name: str) -> tuple[bool, Any]:
        """Return (bound, value); value is None when bound but empty."""
        ...

    def assign(self, name: str, value: Any) -> None:
        ...

    def unset(self, name: str) -> None:
        ...


class MappingSettings:
    """SettingsBackend over any mutable mapping (a dict, os.environ, ...)."""

    def __init__(self, mapping: MutableMapping[str, Any] | None = None) -> None:
        self.mapping = mapping if mapping is not None else {}

    def lookup(self, name: str) -> tuple[bool, Any]:
        if name not in self.mapping:
            return False, None
        return True, self.mapping[name]

    def assign(self, name: str, value: Any) -> None:
        self.mapping[name] = value

    def unset(self, name: str) -> None:
        self.mapping.pop(name, None)


# =============================================================================
# Checkpoint Store
# =============================================================================


class CheckpointStore:
    """
    Records prior dispositions of overridden settings for one session.

    The first override of a name wins; later overrides in the same session
    only change the value. restore_all() puts every name back and empties
    the store.
    """

    def __init__(self, backend: SettingsBackend | None = None) -> None:
        self.backend = backend if backend is not None else MappingSettings()
        self._saved: dict[str, Disposition] = {}

    def checkpoint_and_set(self, *pairs: Any) -> None:
        """
        Override settings, checkpointing each name on its first override.

        Accepts either flat name/value arguments or (name, value) tuples,
        applied left-to-right:

            store.checkpoint_and_set("status", "off", "clock", "none")
            store.checkpoint_and_set(("status", "off"), ("clock", "none"))
        """
        for name, value in _pairs(pairs):
            if name not in self._saved:
                self._saved[name] = self._capture(name)
            self.backend.assign(name, value)

    def restore_all(self) -> None:
        """Restore every checkpointed setting, then clear the store."""
        for name, disposition in self._saved.items():
            LOG.debug("Restoring %s to %r", name, disposition)
            if isinstance(disposition, HadValue):
                self.backend.assign(name, disposition.original)
            elif isinstance(disposition, WasBoundButNil):
                self.backend.assign(name, None)
            else:
                self.backend.unset(name)
        self._saved.clear()

    def disposition(self, name: str) -> Disposition | None:
        """The recorded disposition for a name, if it was checkpointed."""
        return self._saved.get(name)

    def _capture(self, name: str) -> Disposition:
        bound, value = self.backend.lookup(name)
        if not bound:
            return WasUnbound()
        if value is None:
            return WasBoundButNil()
        return HadValue(value)

    def __len__(self) -> int:
        return len(self._saved)

    def __contains__(self, name: str) -> bool:
        return name in self._saved


def _pairs(items: tuple[Any, ...]) -> list[tuple[str, Any]]:
    if items and all(isinstance(item, tuple) and len(item) == 2 for item in items):
        return [(str(name), value) for name, value in items]
    if len(items) % 2:
        msg = "checkpoint_and_set() needs name/value pairs"
        raise ValueError(msg)
    return [(str(items[i]), items[i + 1]) for i in range(0, len(items), 2)]
