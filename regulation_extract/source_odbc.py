#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""Adapter for SQL databases reached through SQLAlchemy.

The station locator is a SQLAlchemy URL (``mssql+pyodbc://...`` for ODBC
data sources). Each parameter carries one or more SELECT statements whose
first column is the sample time in unix seconds and whose second column is
the value. The token ``_unix_basetime_`` in a statement is replaced by the
start of the requested hour in unix seconds. Every returned row is taken
as good quality.
"""

from __future__ import annotations

import math
import threading

import pandas as pd
from sqlalchemy import create_engine, inspect, text
from sqlalchemy.exc import DBAPIError, SQLAlchemyError

from regulation_extract.buffer import to_utc
from regulation_extract.config import SourceKind
from regulation_extract.logging_config import logger
from regulation_extract.source_base import CatalogError, SourceAdapter

__all__ = ["OdbcAdapter", "UNIX_BASETIME_TOKEN", "substitute_basetime"]

UNIX_BASETIME_TOKEN = "_unix_basetime_"


def substitute_basetime(query, start_time):
    """Insert the hour start, in unix seconds, into a SQL statement"""
    seconds = int(to_utc(start_time).timestamp())
    return query.replace(UNIX_BASETIME_TOKEN, str(seconds))


class OdbcAdapter(SourceAdapter):
    """Source adapter holding one open database connection.

    The monitor thread probes the connection while the export thread runs
    queries on it, so every use of the connection goes through ``_lock``.
    """

    kind = SourceKind.ODBC

    def __init__(self, station, engine=None):
        super().__init__(station)
        self.engine = engine if engine is not None else create_engine(station)
        self._connection = None
        self._lock = threading.RLock()

    def _connect(self):
        if self._connection is None:
            self._connection = self.engine.connect()
        return self._connection

    def close(self):
        with self._lock:
            if self._connection is not None:
                self._connection.close()
                self._connection = None

    def _end_transaction(self):
        # reads only; ending the implicit transaction releases the snapshot
        if self._connection is not None and not self._connection.invalidated:
            self._connection.rollback()

    def probe(self):
        with self._lock:
            try:
                self._connect().execute(text("SELECT 1"))
                self._end_transaction()
            except SQLAlchemyError as e:
                logger.debug(f"[{self.station}] database not reachable: {e}")
                self.close()
                self.state.set_live(False)
                return False
        self.state.set_live(True)
        return True

    def refresh_catalog(self):
        # values come from configured statements, the table list is informational
        with self._lock:
            try:
                names = inspect(self._connect()).get_table_names()
            except SQLAlchemyError as e:
                raise CatalogError(f"[{self.station}] table list unavailable: {e}") from e
            finally:
                self._end_transaction()
        logger.debug(f"[{self.station}] {len(names)} tables available")
        return names

    def fetch_hour(self, start_time, parameter, sink):
        if not self.state.live:
            logger.debug(f"[{self.station}] database not connected, {parameter.abstract_name} skipped")
            return False

        count = 0
        with self._lock:
            for query in parameter.queries:
                sql = substitute_basetime(query, start_time)
                try:
                    result = self._connect().execute(text(sql))
                    for row in result:
                        value = row[1]
                        good = value is not None and not math.isnan(float(value))
                        sink.write(parameter.index,
                                   pd.Timestamp(float(row[0]), unit="s", tz="UTC"),
                                   float(value) if value is not None else math.nan,
                                   good)
                        if good:
                            count += 1
                except DBAPIError as e:
                    if e.connection_invalidated:
                        self.close()
                        self.pipe_error(e)
                        break
                    logger.error(f"[{self.station}] query failed for {parameter.abstract_name}: {e}")
                except SQLAlchemyError as e:
                    logger.error(f"[{self.station}] query failed for {parameter.abstract_name}: {e}")
                self._end_transaction()
        return count > 0
