#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""Entry point producing the hourly extracts described by a configuration file."""

import click
import pandas as pd

from regulation_extract.arbiter import QualityArbiter
from regulation_extract.archiver import ZipArchiver
from regulation_extract.config import SourceKind, load_config
from regulation_extract.logging_config import configure_from_options, logger
from regulation_extract.monitor import ConnectionMonitor
from regulation_extract.registry import SourceRegistry
from regulation_extract.render import TemplateRenderer
from regulation_extract.scheduler import WRITTEN, ExportScheduler
from regulation_extract.source_kvint import KvintAdapter
from regulation_extract.source_odbc import OdbcAdapter

__all__ = ["adapter_factories", "run_export", "run_export_cli"]

adapter_factories = {
    SourceKind.KVINT: KvintAdapter,
    SourceKind.ODBC: OdbcAdapter,
}


def run_export(config, now=None, depth=None, monitor_period=1.0, factories=None, archiver=None):
    """Register the sources, start monitoring them and export every pending hour.

    Parameters
    ----------
    config : ExportConfig
        Loaded configuration
    now : datetime, optional
        Reference time, defaults to the current time
    depth : int, optional
        Number of past hours to export, defaults to ``options.depth``
    monitor_period : float
        Seconds between two passes of the connection monitor
    factories : dict, optional
        Adapter constructor per :class:`SourceKind`
    archiver : ZipArchiver, optional

    Returns
    -------
    outcomes : list of ExportOutcome
    """
    registry = SourceRegistry.from_config(config, factories or adapter_factories)
    monitor = ConnectionMonitor(registry, period=monitor_period)
    # first pass before exporting so that catalogs are available to the fetches
    monitor.tick()

    renderer = TemplateRenderer.from_options(config.options)
    scheduler = ExportScheduler(config, QualityArbiter(registry, renderer),
                                archiver if archiver is not None else ZipArchiver())
    try:
        with monitor:
            return scheduler.run(now=now, depth=depth)
    finally:
        for adapter in registry.adapters():
            adapter.close()


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--config", "config_file", default="regulation_extract.yaml", show_default=True,
              type=click.Path(exists=True, dir_okay=False), help="YAML configuration file.")
@click.option("--depth", default=None, type=int, help="Override the number of past hours to export.")
@click.option("--now", default=None, help="Reference timestamp (ISO, UTC) instead of the current time.")
@click.option("--monitor-period", default=1.0, type=float, show_default=True,
              help="Seconds between connection checks of the sources.")
def run_export_cli(config_file, depth, now, monitor_period):
    """Produce the hourly extracts for every configured block."""
    config = load_config(config_file)
    configure_from_options(config.options)
    outcomes = run_export(config,
                          now=None if now is None else pd.Timestamp(now),
                          depth=depth,
                          monitor_period=monitor_period)
    written = sum(1 for o in outcomes if o.action == WRITTEN)
    logger.info(f"{written} archives written, {len(outcomes) - written} jobs skipped or empty")


if __name__ == "__main__":
    run_export_cli()
