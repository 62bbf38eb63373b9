#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""Adapter for Kvint archive stations.

The vendor protocol itself is not implemented here. The adapter talks to an
:class:`ArchiveClient`, an object exposing ``ping``, ``list_parameters`` and
``query_history``. :class:`HttpArchiveClient` is the client used in
production: it reaches a station through its JSON gateway. Tests and other
deployments may pass any object with the same three methods.
"""

from __future__ import annotations

import enum
import time
from abc import ABC, abstractmethod

import pandas as pd
import requests

from regulation_extract.buffer import to_utc
from regulation_extract.config import SourceKind
from regulation_extract.logging_config import logger
from regulation_extract.source_base import CatalogError, PipeError, SourceAdapter

__all__ = ["KvintQuality", "ArchiveClient", "HttpArchiveClient", "KvintAdapter"]


class KvintQuality(enum.IntEnum):
    GOOD = 0
    UNCERTAIN = 64
    BAD = 128
    NO_DATA = 144


def is_good(code):
    """Codes below UNCERTAIN carry a good value"""
    return int(code) < KvintQuality.UNCERTAIN


class ArchiveClient(ABC):
    """Synchronous client of one archive station"""

    @abstractmethod
    def ping(self):
        """Raise PipeError if the station cannot be reached"""

    @abstractmethod
    def list_parameters(self):
        """Return the long names (``CARD.PARAM``) of the parameters in the current volume"""

    @abstractmethod
    def query_history(self, locator, start, end):
        """Yield ``(timestamp, value, quality_code)`` for ``locator`` in [start, end).

        The last value before ``start`` is included when the station has one.
        """


class HttpArchiveClient(ArchiveClient):
    """Archive client speaking to a station's JSON gateway with requests"""

    def __init__(self, station, session=None, timeout=60, max_attempt=4, retry_wait=1.0):
        self.base_url = station if station.startswith(("http://", "https://")) else f"http://{station}"
        self.base_url = self.base_url.rstrip("/")
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout
        self.max_attempt = max_attempt
        self.retry_wait = retry_wait

    def _get_json(self, url, params=None, retry=True):
        attempt = 0
        attempts = self.max_attempt if retry else 1
        while True:
            attempt = attempt + 1
            try:
                logger.debug(f"Submitting request to URL {url} attempt {attempt}")
                response = self.session.get(url, params=params, timeout=self.timeout)
                response.raise_for_status()
                return response.json()
            except (requests.RequestException, ValueError) as e:
                if attempt >= attempts:
                    raise PipeError(f"{url}: {e}") from e
                logger.debug(f"Exception: {e}")
                time.sleep(self.retry_wait)

    def ping(self):
        self._get_json(f"{self.base_url}/status", retry=False)

    def list_parameters(self):
        data = self._get_json(f"{self.base_url}/parameters")
        return [p["name"] for p in data.get("parameters", []) if "name" in p]

    def query_history(self, locator, start, end):
        params = {
            "start-time": start.strftime("%Y%m%d%H%M%S"),
            "end-time": end.strftime("%Y%m%d%H%M%S"),
            "begin-outside": "true",
        }
        data = self._get_json(f"{self.base_url}/parameters/{locator}/history", params=params)
        points = data.get("points", [])
        if not points:
            return iter(())
        df = pd.DataFrame(
            {
                "datetime": pd.to_datetime([p["t"] for p in points], format="%Y%m%d%H%M%S", utc=True),
                "value": pd.to_numeric([p["v"] for p in points], errors="coerce"),
                "qaqc_flag": [int(p.get("q", KvintQuality.GOOD)) for p in points],
            }
        )
        return df.itertuples(index=False, name=None)


class KvintAdapter(SourceAdapter):
    """Source adapter for one archive station"""

    kind = SourceKind.KVINT

    def __init__(self, station, client=None):
        super().__init__(station)
        self.client = client if client is not None else HttpArchiveClient(station)

    def probe(self):
        try:
            self.client.ping()
        except (PipeError, OSError) as e:
            logger.debug(f"[{self.station}] status request failed: {e}")
            self.state.set_live(False)
            return False
        self.state.set_live(True)
        return True

    def refresh_catalog(self):
        logger.debug(f"[{self.station}] requesting parameter list")
        try:
            names = list(self.client.list_parameters())
        except (PipeError, OSError) as e:
            raise CatalogError(f"[{self.station}] parameter list unavailable: {e}") from e
        if not names:
            raise CatalogError(f"[{self.station}] parameter list is empty")
        return names

    def fetch_hour(self, start_time, parameter, sink):
        if not self.state.has_locator(parameter.name):
            logger.warning(f"[{self.station}] parameter {parameter.name} not found")
            return False

        start = to_utc(start_time)
        end = start + pd.Timedelta(hours=1)
        logger.debug(f"[{self.station}] requesting values of {parameter.name}")
        count = 0
        try:
            for timestamp, value, code in self.client.query_history(parameter.name, start, end):
                good = is_good(code) and not pd.isna(value)
                sink.write(parameter.index, timestamp, value, good)
                if good:
                    count += 1
        except PipeError as e:
            self.pipe_error(e)
        return count > 0
