#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""Selection of the best source for one reporting unit and one hour.

Candidate sources are evaluated one at a time in configured order. Each
gets a fresh buffer which is filled parameter by parameter and then scored
by rendering it. The source with the strictly greatest score wins, so on a
tie the earlier source is kept. A best score of zero means the hour cannot
be produced.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

import pandas as pd

from regulation_extract.buffer import TimeSeriesBuffer, to_utc
from regulation_extract.logging_config import logger
from regulation_extract.render import ROWS_PER_HOUR, RenderResult

__all__ = ["SourceScore", "ArbitrationResult", "QualityArbiter"]


@dataclass(frozen=True)
class SourceScore:
    source: str
    read: bool
    quality: int


@dataclass
class ArbitrationResult:
    block: str
    hour: pd.Timestamp
    source: Optional[str] = None
    quality: int = 0
    result: Optional[RenderResult] = None
    scores: List[SourceScore] = field(default_factory=list)

    @property
    def produced(self):
        return self.quality > 0


class QualityArbiter:
    """Drive fetching and scoring of candidate sources.

    Parameters
    ----------
    registry : SourceRegistry
        Adapters by source kind and station
    renderer : TemplateRenderer
        Renderer used both to score a buffer and to produce the payload
    """

    def __init__(self, registry, renderer):
        self.registry = registry
        self.renderer = renderer

    def read_interval(self, source, hour):
        """Fetch every parameter of ``source`` for the hour into a new buffer.

        Each station of the source is read in turn. Within a station the
        first parameter that cannot be fetched stops the remaining ones. The
        read succeeds if at least one station delivered every parameter.

        Returns
        -------
        readed : bool
        buffer : TimeSeriesBuffer
        """
        buffer = TimeSeriesBuffer()
        result = False
        for station in source.stations:
            adapter = self.registry.adapter(source.kind, station)
            if adapter is None:
                logger.warning(f"source {source.name}: station {station} is not registered")
                continue
            station_ok = False
            for parameter in source.parameters.values():
                station_ok = adapter.fetch_hour(hour, parameter, buffer)
                if not station_ok:
                    logger.debug(f"[{station}] no data for {parameter.abstract_name}, "
                                 f"remaining parameters of {source.name} skipped")
                    break
            result = result or station_ok
        return result, buffer

    def arbitrate(self, block, hour):
        """Evaluate the sources of ``block`` for the hour starting at ``hour``

        Returns
        -------
        result : ArbitrationResult
        """
        hour = to_utc(hour)
        outcome = ArbitrationResult(block=block.name, hour=hour)
        for source in block.sources:
            readed, buffer = self.read_interval(source, hour)
            if not readed:
                logger.info(f"[{block.name}] interval {hour} UTC: source {source.name} returned no data")
                outcome.scores.append(SourceScore(source.name, False, 0))
                continue

            rendered = self.renderer.render(buffer, hour, source.parameters)
            quality = rendered.quality
            outcome.scores.append(SourceScore(source.name, True, quality))
            if quality < ROWS_PER_HOUR:
                logger.warning(f"[{block.name}] interval {hour} UTC of source {source.name} "
                               f"has {ROWS_PER_HOUR - quality} rows of bad quality")

            if quality > outcome.quality:
                outcome.source = source.name
                outcome.quality = quality
                outcome.result = rendered

        if outcome.produced:
            logger.info(f"[{block.name}] interval {hour} UTC: source {outcome.source} selected")
        return outcome
