#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""Process-wide registry of source stations and their live state.

The connection monitor writes liveness and catalogs, the export pipeline
reads them while fetching. Every :class:`SourceState` guards its fields
with its own lock.
"""

from __future__ import annotations

import enum
import threading
from typing import Dict, Iterable, Optional

from regulation_extract.config import SourceKind
from regulation_extract.logging_config import logger

__all__ = ["ConnectionState", "SourceState", "SourceRegistry"]


class ConnectionState(enum.Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"


class SourceState:
    """Liveness and parameter catalog of one station.

    ``state`` is CONNECTED only after a successful probe followed by a
    successful catalog fetch. ``live`` reflects the last probe or transport
    event, which may run ahead of ``state`` while the catalog is not ready.
    """

    def __init__(self, station, kind):
        self.station = station
        self.kind = kind
        self._lock = threading.Lock()
        self._live = False
        self._state = ConnectionState.DISCONNECTED
        self._catalog = frozenset()

    def __repr__(self):
        return f"SourceState({self.station!r}, {self.kind.value}, {self.state.value})"

    @property
    def live(self):
        with self._lock:
            return self._live

    @property
    def state(self):
        with self._lock:
            return self._state

    @property
    def ready(self):
        with self._lock:
            return self._state is ConnectionState.CONNECTED

    def catalog(self):
        with self._lock:
            return self._catalog

    def has_locator(self, locator):
        with self._lock:
            return locator in self._catalog

    def set_live(self, live):
        with self._lock:
            self._live = bool(live)

    def mark_connected(self, catalog: Iterable[str]):
        with self._lock:
            self._live = True
            self._catalog = frozenset(catalog)
            self._state = ConnectionState.CONNECTED

    def mark_disconnected(self):
        """Record a lost connection. Returns True if this was a transition."""
        with self._lock:
            self._live = False
            was_connected = self._state is ConnectionState.CONNECTED
            self._state = ConnectionState.DISCONNECTED
            self._catalog = frozenset()
            return was_connected


class SourceRegistry:
    """Owned collection of source adapters keyed by (kind, station).

    A station shared by several blocks is registered once and its adapter
    reused.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._adapters: Dict[tuple, object] = {}

    def __len__(self):
        with self._lock:
            return len(self._adapters)

    def register(self, adapter):
        key = (adapter.state.kind, adapter.state.station)
        with self._lock:
            existing = self._adapters.get(key)
            if existing is not None:
                return existing
            self._adapters[key] = adapter
            return adapter

    def adapter(self, kind, station) -> Optional[object]:
        with self._lock:
            return self._adapters.get((kind, station))

    def adapters(self):
        with self._lock:
            return list(self._adapters.values())

    @classmethod
    def from_config(cls, config, factories):
        """Create and register adapters for every station named in the configuration.

        Parameters
        ----------
        config : ExportConfig
            Loaded configuration
        factories : dict
            Mapping of :class:`SourceKind` to a callable taking the station
            locator and returning an adapter
        """
        registry = cls()
        for block in config.blocks.values():
            for source in block.sources:
                factory = factories.get(source.kind)
                if factory is None or source.kind is SourceKind.UNSUPPORTED:
                    logger.warning(f"[{block.name}] source {source.name} has unsupported type, ignored")
                    continue
                for station in source.stations:
                    if registry.adapter(source.kind, station) is None:
                        registry.register(factory(station))
        return registry
