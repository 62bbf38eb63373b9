#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""Background tracking of source reachability.

Every ``period`` seconds each registered adapter is probed. A station that
answers but is not yet ready gets its catalog (re)fetched; it becomes
CONNECTED only when that fetch succeeds. A station that stops answering is
marked DISCONNECTED and its catalog is dropped, so the next successful
probe triggers a fresh catalog fetch.
"""

from __future__ import annotations

import threading

from regulation_extract.logging_config import logger
from regulation_extract.source_base import CatalogError

__all__ = ["ConnectionMonitor"]


class ConnectionMonitor:
    """Cancellable periodic monitor over the adapters of a :class:`SourceRegistry`"""

    def __init__(self, registry, period=1.0):
        self.registry = registry
        self.period = period
        self._stop = threading.Event()
        self._thread = None

    def check(self, adapter):
        """Probe one adapter and apply the resulting transition"""
        state = adapter.state
        try:
            live = adapter.probe()
        except Exception as e:
            logger.error(f"[{adapter.station}] error while getting station status: {e}")
            live = False

        if live and not state.ready:
            try:
                catalog = adapter.refresh_catalog()
            except CatalogError as e:
                logger.debug(f"[{adapter.station}] station not ready: {e}")
                return
            except Exception as e:
                logger.error(f"[{adapter.station}] error while getting parameter list: {e}")
                return
            state.mark_connected(catalog)
            logger.info(f"[{adapter.station}] connection established")
        elif not live and state.mark_disconnected():
            logger.info(f"[{adapter.station}] connection lost")

    def tick(self):
        """One synchronous pass over all registered adapters"""
        for adapter in self.registry.adapters():
            if self._stop.is_set():
                break
            self.check(adapter)

    def _run(self):
        while not self._stop.is_set():
            self.tick()
            self._stop.wait(self.period)

    def start(self):
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="connection-monitor", daemon=True)
        self._thread.start()

    def stop(self, timeout=None):
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    @property
    def running(self):
        return self._thread is not None and self._thread.is_alive()

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, *exc):
        self.stop()
        return False
