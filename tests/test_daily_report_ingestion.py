from pathlib import Path

import pandas as pd
import pytest

from covid_watch.errors import LoadError, ParseError
from covid_watch.services.daily_report_ingestion_service import (
    load_day,
    normalize_rows,
    parse_counter,
    resolve_columns,
)


LEGACY_HEADER = "Province/State,Country/Region,Last Update,Confirmed,Deaths,Recovered"
CURRENT_HEADER = (
    "FIPS,Admin2,Province_State,Country_Region,Last_Update,Lat,Long_,"
    "Confirmed,Deaths,Recovered,Active,Combined_Key"
)


def _write_csv(path: Path, header: str, rows: list[str]):
    path.write_text("\n".join([header] + rows), encoding="utf-8")
    return path


def test_parse_counter_accepts_only_non_negative_integers():
    assert parse_counter("12") == 12
    assert parse_counter(" 7 ") == 7
    assert parse_counter("0") == 0
    for bad in ("", "-1", "1.5", "abc", None, "1_000"):
        assert parse_counter(bad) is None


def test_resolve_columns_legacy_and_current():
    legacy = resolve_columns(LEGACY_HEADER.split(","))
    assert legacy["country"] == "Country/Region"
    assert legacy["province"] == "Province/State"
    assert legacy["updated"] == "Last Update"

    current = resolve_columns(CURRENT_HEADER.split(","))
    assert current["country"] == "Country_Region"
    assert current["updated"] == "Last_Update"
    assert current["recovered"] == "Recovered"


def test_resolve_columns_missing_country_raises():
    with pytest.raises(ParseError):
        resolve_columns(["Province_State", "Last_Update", "Confirmed"])


def test_normalize_rows_treats_bad_counters_as_absent():
    df = pd.DataFrame(
        {
            "Province/State": ["Hubei", ""],
            "Country/Region": ["Mainland China", "Italy"],
            "Last Update": ["1/22/2020 17:00", "1/22/2020 17:00"],
            "Confirmed": ["444", ""],
            "Deaths": ["n/a", "3"],
            "Recovered": ["-2", "1"],
        }
    )
    rows = list(normalize_rows(df))
    assert rows[0].province == "Hubei"
    assert rows[0].cases == 444
    assert rows[0].deaths is None
    assert rows[0].recovered is None
    assert rows[1].province is None
    assert rows[1].cases is None
    assert rows[1].deaths == 3


def test_load_day_merges_subregions(tmp_path):
    p = _write_csv(
        tmp_path / "01-22-2020.csv",
        LEGACY_HEADER,
        [
            "Lombardy,Italy,1/22/2020 17:00,5,1,0",
            "Veneto,Italy,1/22/2020 17:00,3,0,1",
        ],
    )
    ds = load_day(p)

    italy = ds["Italy"]
    assert (italy.cases, italy.deaths, italy.recovered) == (8, 1, 1)
    assert italy.active == 6
    assert italy.percentage == 75.0
    # Europe rollup present and built from the merged total
    assert ds["Europe"].cases == 8


def test_load_day_current_format_with_missing_counters(tmp_path):
    p = _write_csv(
        tmp_path / "06-01-2020.csv",
        CURRENT_HEADER,
        [
            ",,,France,2020-06-01 02:32:27,46.2,2.2,1000,100,,900,France",
            ",,Bavaria,Germany,2020-06-01 02:32:27,48.7,11.4,500,,,,\"Bavaria, Germany\"",
            ",,Hesse,Germany,2020-06-01 02:32:27,50.6,9.0,200,10,50,140,\"Hesse, Germany\"",
        ],
    )
    ds = load_day(p)

    assert ds["France"].recovered == 0
    assert ds["France"].active == 900
    germany = ds["Germany"]
    assert (germany.cases, germany.deaths, germany.recovered) == (700, 10, 50)
    assert ds["Europe"].cases == 1700


def test_load_day_without_recovered_column(tmp_path):
    p = _write_csv(
        tmp_path / "03-01-2020.csv",
        "Province/State,Country/Region,Last Update,Confirmed,Deaths",
        [",Spain,2020-03-01T10:00:00,10,1"],
    )
    ds = load_day(p)
    assert ds["Spain"].recovered == 0
    assert ds["Spain"].active == 9


def test_load_day_custom_region(tmp_path):
    p = _write_csv(
        tmp_path / "03-01-2020.csv",
        LEGACY_HEADER,
        [",Japan,x,4,0,0", ",Korea South,x,6,0,0", ",Italy,x,100,0,0"],
    )
    ds = load_day(p, region_name="East Asia", region_members=["Japan", "Korea South"])
    assert ds["East Asia"].cases == 10
    assert "Europe" not in ds


def test_load_day_missing_country_column_raises_load_error(tmp_path):
    p = _write_csv(tmp_path / "01-23-2020.csv", "Province/State,Last Update,Confirmed", ["Hubei,x,1"])
    with pytest.raises(LoadError) as info:
        load_day(p)
    assert isinstance(info.value.__cause__, ParseError)


def test_load_day_only_blank_country_rows_loads_empty(tmp_path):
    p = _write_csv(tmp_path / "01-23-2020.csv", LEGACY_HEADER, ["Hubei,,x,1,0,0"])
    ds = load_day(p)
    assert list(ds) == ["Europe"]
    assert ds["Europe"].cases == 0


def test_load_day_empty_file_raises_load_error(tmp_path):
    p = tmp_path / "01-23-2020.csv"
    p.write_text("", encoding="utf-8")
    with pytest.raises(LoadError):
        load_day(p)


def test_load_day_missing_file_raises_load_error(tmp_path):
    with pytest.raises(LoadError):
        load_day(tmp_path / "01-23-2020.csv")


def test_load_day_bad_encoding_raises_load_error(tmp_path):
    p = tmp_path / "01-23-2020.csv"
    p.write_bytes(LEGACY_HEADER.encode("utf-8") + b"\n,\xff\xfe\xfa,x,1,0,0\n")
    with pytest.raises(LoadError):
        load_day(p)


def test_blank_country_row_is_skipped_not_fatal(tmp_path, caplog):
    p = _write_csv(
        tmp_path / "01-22-2020.csv",
        LEGACY_HEADER,
        ["Lombardy,Italy,x,500,10,0", "Somewhere,,x,1,0,0", "Veneto,Italy,x,20,0,0"],
    )
    with caplog.at_level("WARNING"):
        ds = load_day(p)

    assert ds["Italy"].cases == 520
    assert "" not in ds
    assert "Row 3" in caplog.text
