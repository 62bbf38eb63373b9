#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""Rendering of one hour of buffered samples into report rows.

Each of the 3600 rows corresponds to one second of the hour. Placeholders
``$name$`` are replaced by the most recent value of that parameter at the
row's second, ``_row_`` by the second offset and ``_quality_`` by ``1``
when the number of good placeholders in that row equals the number of
distinct parameters of the template. Each placeholder occurrence counts,
so a repeated placeholder can push the count past that number.

Two quality figures come out of a rendering and they differ:

* the per-row ``_quality_`` marker requires all parameters to be good;
* the interval score counts rows with at least one good parameter, and is
  what the arbiter compares between sources.
"""

from __future__ import annotations

from dataclasses import dataclass
from itertools import islice, repeat

import numpy as np
import pandas as pd

from regulation_extract.buffer import to_utc
from regulation_extract.config import ParameterKind
from regulation_extract.template import (
    QUALITY_TOKEN,
    ROW_TOKEN,
    parameter_indices,
    placeholder_name,
    split_template,
)

__all__ = ["ROWS_PER_HOUR", "RenderResult", "TemplateRenderer"]

ROWS_PER_HOUR = 3600


@dataclass
class RenderResult:
    rows: list
    quality: int
    row_quality: np.ndarray

    @property
    def text(self):
        return "".join(f"{row}\n" for row in self.rows)

    def payload(self):
        """Rows as newline terminated UTF-8 bytes"""
        return self.text.encode("utf-8")


class TemplateRenderer:
    """Turn a filled :class:`TimeSeriesBuffer` into report rows.

    Parameters
    ----------
    template : str
        Row template
    precision : int
        Number of decimals printed for values
    maximum_latency : int
        Age in seconds beyond which a held value of a noisy parameter is
        reported with bad quality
    """

    def __init__(self, template, precision=2, maximum_latency=10):
        self.template = template
        self.precision = int(precision)
        self.maximum_latency = int(maximum_latency)
        self.tokens = split_template(template)
        self.indices = parameter_indices(template)

    @classmethod
    def from_options(cls, options):
        return cls(options.pattern, options.precision, options.maximum_latency)

    def _lookup(self, buffer, index, kind, times):
        found = buffer.read_nearest_past_many(index, times)
        quality = found["quality"].to_numpy(dtype=bool) & found["found"].to_numpy(dtype=bool)
        if kind is ParameterKind.NOISY:
            age = found.index - pd.DatetimeIndex(found["timestamp"])
            stale = np.asarray(age > pd.Timedelta(seconds=self.maximum_latency), dtype=bool)
            quality = quality & ~stale
        fmt = f"{{:.{self.precision}f}}"
        text = [fmt.format(v) if ok else "" for v, ok in zip(found["value"].to_numpy(), found["found"].to_numpy())]
        return text, quality

    def render(self, buffer, hour_start, parameters=None):
        """Render the hour starting at ``hour_start``.

        Parameters
        ----------
        buffer : TimeSeriesBuffer
            Samples fetched from one source
        hour_start : datetime
            Start of the hour, naive values are taken as UTC
        parameters : dict, optional
            Mapping of parameter index to :class:`ParameterConfig` giving the
            linearity of each parameter for this source. Parameters missing
            from the mapping are treated as noisy.

        Returns
        -------
        result : RenderResult
        """
        parameters = parameters or {}
        start = to_utc(hour_start)
        times = pd.date_range(start, periods=ROWS_PER_HOUR, freq="s")

        lookups = {}
        for name, index in self.indices.items():
            param = parameters.get(index)
            kind = param.kind if param is not None else ParameterKind.NOISY
            lookups[name] = self._lookup(buffer, index, kind, times)

        row_good = np.zeros(ROWS_PER_HOUR, dtype=np.int64)
        columns = []
        quality_positions = []
        for pos, token in enumerate(self.tokens):
            if pos % 2 == 1:
                # delimiter run
                columns.append(repeat(token))
                continue
            name = placeholder_name(token)
            if name is not None:
                text, quality = lookups[name]
                row_good += quality
                columns.append(text)
            elif token == ROW_TOKEN:
                columns.append([str(r) for r in range(ROWS_PER_HOUR)])
            elif token == QUALITY_TOKEN:
                quality_positions.append(len(columns))
                columns.append(None)
            else:
                columns.append(repeat(token))

        markers = np.where(row_good == len(self.indices), "1", "0")
        for pos in quality_positions:
            columns[pos] = markers

        rows = ["".join(parts) for parts in islice(zip(*columns), ROWS_PER_HOUR)]
        score = int(np.count_nonzero(row_good > 0))
        return RenderResult(rows=rows, quality=score, row_quality=row_good)
