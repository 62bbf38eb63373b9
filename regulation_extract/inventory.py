#!/usr/bin/env python
# -*- coding: utf-8 -*-
import glob
import os

import click
import pandas as pd

from regulation_extract.filename import interpret_fname
from regulation_extract.logging_config import logger


def export_inventory(root, prefix=None):
    """List the artifacts present under ``root``

    Parameters
    ----------
    root : str
        Output root directory
    prefix : str, optional
        Restrict the listing to one reporting unit

    Returns
    -------
    inventory : pandas.DataFrame
        Columns ``prefix``, ``hour`` and ``path``, sorted by prefix and hour
    """
    unit = "*" if prefix is None else prefix
    pattern = os.path.join(root, unit, "[0-9]" * 4, "[0-9]" * 2, "[0-9]" * 2, "*.txt.zip")
    records = []
    for path in glob.glob(pattern):
        try:
            meta = interpret_fname(path)
        except ValueError:
            logger.debug(f"Ignoring {path}")
            continue
        if prefix is not None and meta["prefix"] != prefix:
            continue
        records.append({"prefix": meta["prefix"], "hour": meta["hour"], "path": path})
    df = pd.DataFrame(records, columns=["prefix", "hour", "path"])
    return df.sort_values(["prefix", "hour"]).reset_index(drop=True)


@click.command()
@click.argument("root", type=click.Path(exists=True, file_okay=False))
@click.option("--prefix", default=None, help="Only list artifacts of this output prefix.")
def inventory_cli(root, prefix):
    """List the hourly extracts already produced under ROOT."""
    df = export_inventory(root, prefix)
    if df.empty:
        print("None")
    else:
        print(df.to_string(index=False))


if __name__ == "__main__":
    inventory_cli()
