#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""Production of the hourly artifacts for every reporting unit.

For each depth ``d`` from the configured depth down to 1 and for each
block, the hour ``current UTC hour - d`` is exported unless its artifact
already exists. An unexpected error while processing one block stops the
remaining blocks of that depth; the next depth is still attempted.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

import pandas as pd

from regulation_extract.buffer import to_utc
from regulation_extract.filename import export_dir, export_name, export_path
from regulation_extract.logging_config import logger

__all__ = ["ExportOutcome", "ExportScheduler", "current_hour"]

SKIPPED = "skipped"
WRITTEN = "written"
EMPTY = "empty"


@dataclass(frozen=True)
class ExportOutcome:
    block: str
    hour: pd.Timestamp
    path: str
    action: str
    source: Optional[str] = None
    quality: int = 0


def current_hour(now=None):
    """Start of the current hour in UTC"""
    now = pd.Timestamp.now(tz="UTC") if now is None else to_utc(now)
    return now.floor("h")


class ExportScheduler:
    """Walk depth x blocks and hand finished hours to the archiver

    Parameters
    ----------
    config : ExportConfig
        Loaded configuration; ``options.path`` and ``options.depth`` are used
    arbiter : QualityArbiter
        Selects the source and renders the payload of an hour
    archiver : ZipArchiver
        Writes the payload to its container
    """

    def __init__(self, config, arbiter, archiver):
        self.config = config
        self.arbiter = arbiter
        self.archiver = archiver

    def hours(self, now=None, depth=None):
        depth = self.config.options.depth if depth is None else depth
        base = current_hour(now)
        return [base - pd.Timedelta(hours=d) for d in range(depth, 0, -1)]

    def process(self, block, hour):
        """Export one (block, hour) job"""
        root = self.config.options.path
        path = export_path(root, block.prefix, hour)
        os.makedirs(export_dir(root, block.prefix, hour), exist_ok=True)

        if self.archiver.exists(path):
            logger.debug(f"[{block.name}] {path} already exists")
            return ExportOutcome(block.name, hour, path, SKIPPED)

        logger.info(f"[{block.name}] for interval {hour} UTC building archive {path}")
        outcome = self.arbiter.arbitrate(block, hour)
        if not outcome.produced:
            logger.info(f"[{block.name}] interval {hour} UTC could not be produced")
            return ExportOutcome(block.name, hour, path, EMPTY)

        self.archiver.archive(path, export_name(block.prefix, hour), outcome.result.payload())
        return ExportOutcome(block.name, hour, path, WRITTEN, outcome.source, outcome.quality)

    def run(self, now=None, depth=None):
        """Export every configured hour and block.

        Returns
        -------
        outcomes : list of ExportOutcome
            One entry per job that was attempted
        """
        outcomes = []
        for hour in self.hours(now, depth):
            for block in self.config.blocks.values():
                try:
                    outcomes.append(self.process(block, hour))
                except Exception as e:
                    logger.error(f"[{block.name}] interval {hour} UTC failed, "
                                 f"remaining blocks of this interval skipped: {e}")
                    break
        return outcomes
