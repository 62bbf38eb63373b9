#!/usr/bin/env python
# -*- coding: utf-8 -*-

import os
import re

import pandas as pd

ARCHIVE_EXT = ".zip"


def export_dir(root, prefix, hour):
    """Directory holding the artifacts of one unit for one day: root/prefix/YYYY/MM/DD"""
    return os.path.join(root, prefix, f"{hour.year:04d}", f"{hour.month:02d}", f"{hour.day:02d}")


def export_name(prefix, hour):
    """Name of the text member of an artifact: prefixYYYYMMDDHH.txt"""
    return f"{prefix}{hour.year:04d}{hour.month:02d}{hour.day:02d}{hour.hour:02d}.txt"


def export_path(root, prefix, hour):
    """Full path of the compressed artifact for (prefix, hour)

    Parameters
    ----------
    root : str
        Output root directory
    prefix : str
        Output prefix of the reporting unit
    hour : pandas.Timestamp
        Start of the hour, in UTC

    Returns
    -------
    path : str
        ``root/prefix/YYYY/MM/DD/prefixYYYYMMDDHH.txt.zip``
    """
    return os.path.join(export_dir(root, prefix, hour), export_name(prefix, hour) + ARCHIVE_EXT)


_EXPORT_RE = re.compile(r"^(?P<prefix>.*)(?P<year>\d{4})(?P<month>\d{2})(?P<day>\d{2})(?P<hour>\d{2})\.txt(?:\.zip)?$")


def interpret_fname(fname):
    """Convert an artifact file name back to its metadata.

    This routine is complementary to :func:`export_path`.

    Parameters
    ----------
    fname : str
        File name, directories are ignored

    Returns
    -------
    meta : dict
        ``filename``, ``prefix`` and ``hour`` (UTC Timestamp)
    """
    fname = os.path.split(fname)[1]
    m = _EXPORT_RE.match(fname)
    if m is None:
        raise ValueError(f"Naming convention not matched for {fname}")
    hour = pd.Timestamp(int(m.group("year")), int(m.group("month")), int(m.group("day")),
                        int(m.group("hour")), tz="UTC")
    return {"filename": m.group(0), "prefix": m.group("prefix"), "hour": hour}
