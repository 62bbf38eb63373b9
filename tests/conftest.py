import pandas as pd
import pytest

from regulation_extract.config import SourceKind
from regulation_extract.source_base import CatalogError, SourceAdapter

HOUR = pd.Timestamp("2024-03-01 10:00", tz="UTC")


class FakeAdapter(SourceAdapter):
    """In-memory adapter.

    ``data`` maps a parameter locator to a list of (second offset, value, good)
    tuples relative to the requested hour. ``probes`` is consumed one result
    per call, the last one repeats. ``catalogs`` works the same way; an
    exception instance in it is raised.
    """

    kind = SourceKind.KVINT

    def __init__(self, station, data=None, probes=(True,), catalogs=None, kind=None):
        if kind is not None:
            self.kind = kind
        super().__init__(station)
        self.data = data or {}
        self.probes = list(probes)
        self.catalogs = list(catalogs) if catalogs is not None else [sorted(self.data)]
        self.fetches = []
        self.refreshes = 0
        self.closed = False

    @staticmethod
    def _next(values):
        return values.pop(0) if len(values) > 1 else values[0]

    def probe(self):
        result = self._next(self.probes)
        if isinstance(result, Exception):
            raise result
        self.state.set_live(result)
        return result

    def refresh_catalog(self):
        self.refreshes += 1
        catalog = self._next(self.catalogs)
        if isinstance(catalog, Exception):
            raise catalog
        if not catalog:
            raise CatalogError("empty")
        return catalog

    def fetch_hour(self, start_time, parameter, sink):
        self.fetches.append((pd.Timestamp(start_time), parameter.name))
        good = 0
        for offset, value, quality in self.data.get(parameter.name, []):
            sink.write(parameter.index, pd.Timestamp(start_time) + pd.Timedelta(seconds=offset), value, quality)
            good += bool(quality)
        return good > 0

    def close(self):
        self.closed = True


@pytest.fixture
def hour():
    return HOUR


def full_hour(value=1.0):
    return [(s, value, True) for s in range(3600)]
