from pathlib import Path

from gridsift.config import GuessSettings
from gridsift.inference.columns import guess_columns
from gridsift.source import DataFrameRowSource
from gridsift.utils.io import read_table
from gridsift.utils.profiling import profile_section, profile_summary


def test_guess_columns_profiling_is_opt_in():
    fixture_path = Path(__file__).parent / "fixtures" / "orders.csv"
    df = read_table(fixture_path)

    timings: dict[str, float] = {}
    guess_columns(DataFrameRowSource(df), GuessSettings(), profile=timings)

    assert set(timings) == {"collect_samples", "guess_formats"}
    assert all(ms >= 0.0 for ms in timings.values())


def test_profile_section_without_store_is_noop():
    with profile_section("step", None):
        pass


def test_profile_section_accumulates_repeated_steps():
    store: dict[str, float] = {}

    with profile_section("step", store):
        pass
    first = store["step"]
    with profile_section("step", store):
        pass

    assert store["step"] >= first


def test_profile_section_records_time_on_error():
    store: dict[str, float] = {}

    try:
        with profile_section("failing", store):
            raise RuntimeError("boom")
    except RuntimeError:
        pass

    assert "failing" in store


def test_profile_summary():
    summary = profile_summary({"read_file": 1.23456, "guess_formats": 2.0})

    assert summary == {
        "total_ms": 3.235,
        "steps": {"read_file": 1.235, "guess_formats": 2.0},
    }
