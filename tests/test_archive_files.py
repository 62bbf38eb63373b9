import os
import zipfile

import pandas as pd
import pytest
from click.testing import CliRunner

from regulation_extract.archiver import ZipArchiver
from regulation_extract.filename import export_dir, export_name, export_path, interpret_fname
from regulation_extract.inventory import export_inventory, inventory_cli

HOUR = pd.Timestamp("2024-03-01 07:00", tz="UTC")


def test_export_naming():
    assert export_dir("out", "01", HOUR) == os.path.join("out", "01", "2024", "03", "01")
    assert export_name("01", HOUR) == "012024030107.txt"
    assert export_path("out", "01", HOUR) == os.path.join("out", "01", "2024", "03", "01", "012024030107.txt.zip")


@pytest.mark.parametrize("prefix", ["01", "U7_", "gen"])
def test_interpret_fname_inverts_export_path(prefix):
    meta = interpret_fname(export_path("/data", prefix, HOUR))
    assert meta["prefix"] == prefix
    assert meta["hour"] == HOUR
    assert meta["filename"] == export_name(prefix, HOUR) + ".zip"


def test_interpret_fname_rejects_other_names():
    with pytest.raises(ValueError):
        interpret_fname("/data/01/readme.txt")


def test_archive_round_trip(tmp_path):
    path = export_path(str(tmp_path), "01", HOUR)
    archiver = ZipArchiver()
    assert not archiver.exists(path)

    archiver.archive(path, export_name("01", HOUR), b"0:1.00;1;\n")

    assert archiver.exists(path)
    assert not os.path.exists(path + ".part")
    with zipfile.ZipFile(path) as zf:
        assert zf.read("012024030107.txt") == b"0:1.00;1;\n"


def test_failed_archive_leaves_nothing(tmp_path):
    path = str(tmp_path / "01.txt.zip")
    with pytest.raises(TypeError):
        ZipArchiver().archive(path, "01.txt", object())
    assert os.listdir(tmp_path) == []


def make_tree(root):
    archiver = ZipArchiver()
    for prefix, hours in {"01": [HOUR, HOUR - pd.Timedelta(hours=1)], "02": [HOUR]}.items():
        for hour in hours:
            archiver.archive(export_path(str(root), prefix, hour), export_name(prefix, hour), b"")
    # not an artifact
    open(os.path.join(export_dir(str(root), "01", HOUR), "notes.txt.zip"), "w").close()


def test_inventory(tmp_path):
    make_tree(tmp_path)
    df = export_inventory(str(tmp_path))
    assert list(df.columns) == ["prefix", "hour", "path"]
    assert list(df.prefix) == ["01", "01", "02"]
    assert list(df.hour) == [HOUR - pd.Timedelta(hours=1), HOUR, HOUR]

    only = export_inventory(str(tmp_path), prefix="02")
    assert len(only) == 1
    assert export_inventory(str(tmp_path / "01" / "2024"), prefix="01").empty


def test_inventory_cli(tmp_path):
    runner = CliRunner()
    result = runner.invoke(inventory_cli, [str(tmp_path)])
    assert result.exit_code == 0
    assert result.output.strip() == "None"

    make_tree(tmp_path)
    result = runner.invoke(inventory_cli, [str(tmp_path), "--prefix", "01"])
    assert result.exit_code == 0
    assert "012024030107.txt.zip" in result.output
    # header and the two hours of unit 01
    assert len(result.output.strip().split("\n")) == 3
