#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""Contract shared by the source adapters."""

from __future__ import annotations

from abc import ABC, abstractmethod

from regulation_extract.logging_config import logger
from regulation_extract.registry import SourceState

__all__ = ["CatalogError", "PipeError", "SourceAdapter"]


class CatalogError(RuntimeError):
    """The source is reachable but its parameter catalog could not be obtained"""


class PipeError(ConnectionError):
    """Transport level failure: the link to the source is lost"""


class SourceAdapter(ABC):
    """Fetches hours of samples for configured parameters from one station.

    Subclasses set ``kind`` and implement :meth:`probe`,
    :meth:`refresh_catalog` and :meth:`fetch_hour`. Transport failures are
    not raised to callers of :meth:`fetch_hour`; they are logged, reported
    as a False result and, for pipe errors, recorded as a disconnect.
    """

    kind = None

    def __init__(self, station):
        self.state = SourceState(station, self.kind)

    @property
    def station(self):
        return self.state.station

    @abstractmethod
    def probe(self) -> bool:
        """Check that the station answers. Must not raise for an unreachable station."""

    @abstractmethod
    def refresh_catalog(self):
        """Return the list of parameter locators the station offers.

        Raises
        ------
        CatalogError
            If the catalog cannot be obtained or is empty
        """

    @abstractmethod
    def fetch_hour(self, start_time, parameter, sink) -> bool:
        """Write one hour of samples of ``parameter`` starting at ``start_time`` into ``sink``.

        Returns True iff at least one good-quality sample was received.
        """

    def close(self):
        pass

    def pipe_error(self, exc):
        """Record a transport failure surfaced outside the monitor loop"""
        logger.error(f"[{self.station}] transport error: {exc}")
        if self.state.mark_disconnected():
            logger.info(f"[{self.station}] connection lost")
