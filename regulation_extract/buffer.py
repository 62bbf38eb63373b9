#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""In-memory store of the samples fetched for one source and one hour."""

from __future__ import annotations

from typing import NamedTuple, Optional

import numpy as np
import pandas as pd

__all__ = ["Sample", "TimeSeriesBuffer", "to_utc"]

_ONE_SECOND_NS = 1_000_000_000


class Sample(NamedTuple):
    timestamp: pd.Timestamp
    value: float
    quality: bool


def to_utc(timestamp):
    """Coerce a timestamp to a timezone aware UTC pandas Timestamp. Naive input is taken as UTC."""
    ts = pd.Timestamp(timestamp)
    if ts.tzinfo is None:
        return ts.tz_localize("UTC")
    return ts.tz_convert("UTC")


def _to_utc_index(request_times):
    idx = pd.DatetimeIndex(request_times)
    if idx.tz is None:
        return idx.tz_localize("UTC")
    return idx.tz_convert("UTC")


class TimeSeriesBuffer:
    """Deduplicated store of (parameter, timestamp) -> (value, quality).

    The first write for a key wins; later writes with the same key are
    ignored. Lookups return the most recent sample at or before a requested
    second. Sorted per-parameter arrays are built lazily and dropped on the
    next write, so fill the buffer first and read afterwards.
    """

    def __init__(self):
        self._samples = {}
        self._sorted = {}

    def __len__(self):
        return len(self._samples)

    def write(self, parameter_index, timestamp, value, quality):
        """Insert a sample. Returns False if the key was already present."""
        key = (int(parameter_index), to_utc(timestamp).value)
        if key in self._samples:
            return False
        self._samples[key] = (float(value), bool(quality))
        self._sorted.pop(key[0], None)
        return True

    def parameters(self):
        return sorted({index for index, _ in self._samples})

    def _arrays(self, parameter_index):
        arrays = self._sorted.get(parameter_index)
        if arrays is None:
            keys = sorted(ts for index, ts in self._samples if index == parameter_index)
            times = np.array(keys, dtype=np.int64)
            values = np.array([self._samples[(parameter_index, t)][0] for t in keys], dtype=np.float64)
            qualities = np.array([self._samples[(parameter_index, t)][1] for t in keys], dtype=bool)
            arrays = (times, values, qualities)
            self._sorted[parameter_index] = arrays
        return arrays

    def read_nearest_past(self, parameter_index, request_time) -> Optional[Sample]:
        """Return the sample with the greatest timestamp before ``request_time`` + 1 second.

        Samples stamped exactly at ``request_time`` qualify. Returns None
        when the parameter has no such sample.
        """
        times, values, qualities = self._arrays(int(parameter_index))
        limit = to_utc(request_time).value + _ONE_SECOND_NS
        pos = int(np.searchsorted(times, limit, side="left")) - 1
        if pos < 0:
            return None
        return Sample(pd.Timestamp(times[pos], tz="UTC"), float(values[pos]), bool(qualities[pos]))

    def read_nearest_past_many(self, parameter_index, request_times):
        """Vectorized :meth:`read_nearest_past` for a sequence of request times.

        Parameters
        ----------
        parameter_index : int
            Parameter to look up
        request_times : array-like of datetime
            Times of the requests, naive values are taken as UTC

        Returns
        -------
        result : pandas.DataFrame
            Indexed by request time with columns ``timestamp``, ``value``,
            ``quality`` and ``found``. Rows without a sample have
            ``found == False``, NaT timestamp, NaN value and bad quality.
        """
        req = _to_utc_index(request_times)
        times, values, qualities = self._arrays(int(parameter_index))
        limits = req.as_unit("ns").asi8 + _ONE_SECOND_NS
        pos = np.searchsorted(times, limits, side="left") - 1
        found = pos >= 0
        safe = np.where(found, pos, 0)

        if len(times) > 0:
            stamps = np.where(found, times[safe], np.iinfo(np.int64).min)
            vals = np.where(found, values[safe], np.nan)
            quals = np.where(found, qualities[safe], False)
        else:
            stamps = np.full(len(req), np.iinfo(np.int64).min, dtype=np.int64)
            vals = np.full(len(req), np.nan)
            quals = np.zeros(len(req), dtype=bool)

        return pd.DataFrame(
            {
                "timestamp": pd.to_datetime(stamps.astype("datetime64[ns]"), utc=True),
                "value": vals,
                "quality": quals.astype(bool),
                "found": found,
            },
            index=req,
        )

    def frame(self):
        """Contents as a DataFrame indexed by (parameter, datetime), sorted."""
        if not self._samples:
            index = pd.MultiIndex.from_arrays(
                [pd.Index([], dtype=np.int64), pd.DatetimeIndex([], tz="UTC")],
                names=["parameter", "datetime"],
            )
            return pd.DataFrame({"value": pd.Series([], dtype=np.float64),
                                 "quality": pd.Series([], dtype=bool)}, index=index)
        keys = sorted(self._samples)
        index = pd.MultiIndex.from_arrays(
            [[k[0] for k in keys], pd.to_datetime([k[1] for k in keys], utc=True)],
            names=["parameter", "datetime"],
        )
        return pd.DataFrame(
            {
                "value": [self._samples[k][0] for k in keys],
                "quality": [self._samples[k][1] for k in keys],
            },
            index=index,
        )
