import numpy as np
import pandas as pd
import pytest

from regulation_extract.buffer import TimeSeriesBuffer


T0 = pd.Timestamp("2024-03-01 10:00", tz="UTC")


def sec(n):
    return T0 + pd.Timedelta(seconds=n)


@pytest.fixture
def buffer():
    buf = TimeSeriesBuffer()
    buf.write(1, sec(0), 1.0, True)
    buf.write(1, sec(5), 2.0, False)
    buf.write(1, sec(10), 3.0, True)
    buf.write(2, sec(3), 20.0, True)
    return buf


def test_duplicate_write_is_ignored(buffer):
    assert buffer.write(1, sec(5), 99.0, True) is False
    sample = buffer.read_nearest_past(1, sec(5))
    assert sample.value == 2.0
    assert sample.quality is False
    assert len(buffer) == 4


def test_duplicate_naive_and_aware_timestamps_collide():
    buf = TimeSeriesBuffer()
    assert buf.write(1, pd.Timestamp("2024-03-01 10:00"), 1.0, True)
    assert not buf.write(1, T0, 2.0, True)
    assert buf.read_nearest_past(1, T0).value == 1.0


def test_read_exact_time_qualifies(buffer):
    sample = buffer.read_nearest_past(1, sec(10))
    assert sample.timestamp == sec(10)
    assert sample.value == 3.0


def test_read_between_samples_returns_previous(buffer):
    sample = buffer.read_nearest_past(1, sec(7))
    assert sample.timestamp == sec(5)
    assert sample.value == 2.0


def test_read_before_first_sample_is_not_found(buffer):
    assert buffer.read_nearest_past(1, sec(-1)) is None
    assert buffer.read_nearest_past(2, sec(2)) is None
    assert buffer.read_nearest_past(3, sec(100)) is None


def test_subsecond_sample_within_request_second_qualifies():
    buf = TimeSeriesBuffer()
    buf.write(1, sec(4) + pd.Timedelta(milliseconds=500), 7.0, True)
    assert buf.read_nearest_past(1, sec(4)).value == 7.0
    assert buf.read_nearest_past(1, sec(3)) is None


def test_parameters_are_independent(buffer):
    assert buffer.read_nearest_past(2, sec(10)).value == 20.0
    assert buffer.parameters() == [1, 2]


def test_nearest_past_is_monotonic(buffer):
    stamps = []
    for n in range(-2, 15):
        sample = buffer.read_nearest_past(1, sec(n))
        stamps.append(pd.Timestamp.min.tz_localize("UTC") if sample is None else sample.timestamp)
    assert stamps == sorted(stamps)


def test_many_matches_single_reads(buffer):
    times = pd.date_range(sec(-2), periods=16, freq="s")
    many = buffer.read_nearest_past_many(1, times)
    assert len(many) == len(times)
    for t, row in many.iterrows():
        single = buffer.read_nearest_past(1, t)
        if single is None:
            assert not row["found"]
            assert pd.isna(row["timestamp"])
            assert np.isnan(row["value"])
            assert not row["quality"]
        else:
            assert row["found"]
            assert row["timestamp"] == single.timestamp
            assert row["value"] == single.value
            assert row["quality"] == single.quality


def test_many_on_unknown_parameter():
    buf = TimeSeriesBuffer()
    many = buf.read_nearest_past_many(5, pd.date_range(T0, periods=3, freq="s"))
    assert not many["found"].any()
    assert not many["quality"].any()


def test_write_after_read_is_visible(buffer):
    assert buffer.read_nearest_past(1, sec(30)).value == 3.0
    buffer.write(1, sec(20), 4.0, True)
    assert buffer.read_nearest_past(1, sec(30)).value == 4.0


def test_frame(buffer):
    df = buffer.frame()
    assert list(df.index.names) == ["parameter", "datetime"]
    assert len(df) == 4
    assert df.loc[(1, sec(10)), "value"] == 3.0
    assert TimeSeriesBuffer().frame().empty
