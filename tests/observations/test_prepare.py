"""Tests for flattening and derived date fields."""

import pandas as pd
import pytest

from conftest import make_observation
from src.observations.models import Record
from src.observations.prepare import (DATE_FIELDS, add_date_fields,
                                      prepare_observations, records_to_frame)


class TestRecordsToFrame:

    def test_nested_fields_become_dot_paths(self):
        records = [Record.from_json(make_observation(i)) for i in (1, 2)]

        df = records_to_frame(records)

        assert len(df) == 2
        assert "taxon.name" in df.columns
        assert "observed_on_details.year" in df.columns
        assert df["taxon.name"].tolist() == ["Insecta", "Insecta"]

    def test_lists_stay_as_cells(self):
        df = records_to_frame([Record.from_json(make_observation(1))])

        assert isinstance(df.loc[0, "photos"], list)

    def test_empty_result_set(self):
        df = records_to_frame([])

        assert df.empty
        assert list(df.columns) == ["id"]


class TestAddDateFields:

    def test_calendar_fields(self):
        df = pd.DataFrame({"id": [1], "observed_on": ["2021-05-03"]})

        out = add_date_fields(df)

        row = out.iloc[0]
        assert row["observed_date"] == pd.Timestamp("2021-05-03")
        assert row["year"] == 2021
        assert row["month"] == 5
        assert row["month_name"] == "May"
        assert row["week"] == 18
        assert row["day_of_year"] == 123
        assert row["weekday"] == 0
        assert row["weekday_name"] == "Monday"

    def test_does_not_modify_input(self):
        df = pd.DataFrame({"id": [1], "observed_on": ["2021-05-03"]})

        add_date_fields(df)

        assert list(df.columns) == ["id", "observed_on"]

    def test_missing_date_gives_na(self):
        df = pd.DataFrame({"id": [1, 2], "observed_on": ["2021-05-03", None]})

        out = add_date_fields(df)

        assert pd.isna(out.loc[1, "observed_date"])
        assert pd.isna(out.loc[1, "year"])
        assert out.loc[0, "year"] == 2021

    def test_unparseable_date_gives_na(self):
        df = pd.DataFrame({"id": [1], "observed_on": ["not a date"]})

        out = add_date_fields(df)

        assert pd.isna(out.loc[0, "month"])

    def test_fallback_timestamp(self):
        df = pd.DataFrame({
            "id": [1, 2],
            "observed_on": ["2021-05-03", None],
            "time_observed_at": [None, "2020-02-29T23:30:00+00:00"],
        })

        out = add_date_fields(df)

        assert out.loc[1, "observed_date"] == pd.Timestamp("2020-02-29")
        assert out.loc[1, "day_of_year"] == 60

    def test_no_date_columns(self):
        df = pd.DataFrame({"id": [1, 2]})

        out = add_date_fields(df)

        for col in DATE_FIELDS:
            assert col in out.columns
        assert out["observed_date"].isna().all()

    def test_year_columns_are_nullable_ints(self):
        df = pd.DataFrame({"id": [1, 2], "observed_on": ["2021-05-03", None]})

        out = add_date_fields(df)

        assert str(out["year"].dtype) == "Int64"
        assert str(out["week"].dtype) == "Int64"


class TestPrepareObservations:

    def test_sorted_by_id(self):
        df = pd.DataFrame({
            "id": [9, 3, 5],
            "observed_on": ["2021-01-01", "2022-06-15", "2023-12-31"],
        })

        out = prepare_observations(df)

        assert out["id"].tolist() == [3, 5, 9]
        assert out["year"].tolist() == [2022, 2023, 2021]

    def test_empty_frame(self):
        out = prepare_observations(records_to_frame([]))

        assert out.empty
        assert "year" in out.columns

    @pytest.mark.parametrize("observed_on,expected_week", [
        ("2021-01-01", 53),  # ISO week belongs to 2020
        ("2021-01-04", 1),
        ("2021-12-31", 52),
    ])
    def test_iso_weeks(self, observed_on, expected_week):
        df = pd.DataFrame({"id": [1], "observed_on": [observed_on]})

        out = prepare_observations(df)

        assert out.loc[0, "week"] == expected_week
