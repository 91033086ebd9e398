"""Tests for candidate sources."""

import json
from pathlib import Path

import pandas as pd
import pytest

from addrmatch.sources import (
    ACTIVE_JOB_STATUSES,
    CandidateSourceError,
    FrameCandidateSource,
    StaticCandidateSource,
    customer_source,
    job_source,
)
from addrmatch.types import Candidate


@pytest.fixture()
def jobs_df() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "id": ["j1", "j2", "j3", "j4", "j5"],
            "address": ["1 Main St", "2 Oak Ave", None, "  ", "5 Pine Ln"],
            "status": ["scheduled", "completed", "scheduled", "working_on_it", "parts_needed"],
        }
    )


def test_frame_source_drops_blank_addresses(jobs_df: pd.DataFrame):
    ids = [c.id for c in FrameCandidateSource(jobs_df).fetch()]
    assert ids == ["j1", "j2", "j5"]


def test_job_source_filters_statuses(jobs_df: pd.DataFrame):
    ids = [c.id for c in job_source(jobs_df).fetch()]
    assert ids == ["j1", "j5"]


def test_job_source_include_archived(jobs_df: pd.DataFrame):
    ids = [c.id for c in job_source(jobs_df, include_archived=True).fetch()]
    assert ids == ["j1", "j2", "j5"]


def test_job_source_without_status_column():
    df = pd.DataFrame({"id": [1], "address": ["1 Main St"]})
    assert [c.id for c in job_source(df).fetch()] == ["1"]


def test_active_statuses():
    assert set(ACTIVE_JOB_STATUSES) == {"scheduled", "working_on_it", "parts_needed"}


def test_customer_source_reads_names():
    df = pd.DataFrame(
        {"id": ["c1", "c2"], "name": ["Jane Doe", None], "address": ["1 Main St", "2 Oak Ave"]}
    )
    customers = customer_source(df).fetch()
    assert customers == [
        Candidate("c1", "1 Main St", "Jane Doe"),
        Candidate("c2", "2 Oak Ave", None),
    ]


def test_missing_columns_raise():
    df = pd.DataFrame({"id": ["x"], "street": ["1 Main St"]})
    with pytest.raises(CandidateSourceError) as exc_info:
        FrameCandidateSource(df, name="jobs").fetch()
    assert exc_info.value.source == "jobs"
    assert "address" in exc_info.value.detail


def test_float_ids_become_integer_strings():
    df = pd.DataFrame({"id": [101.0, 102.0], "address": ["1 Main St", "2 Oak Ave"]})
    assert [c.id for c in FrameCandidateSource(df).fetch()] == ["101", "102"]


def test_from_csv(tmp_path: Path):
    path = tmp_path / "jobs.csv"
    path.write_text("id,address,status\n7,1 Main St,scheduled\n8,2 Oak Ave,completed\n")
    source = FrameCandidateSource.from_file(path, status_column="status", statuses=["scheduled"])
    assert source.name == "jobs.csv"
    assert source.fetch() == [Candidate("7", "1 Main St")]


def test_from_jsonl(tmp_path: Path):
    path = tmp_path / "customers.jsonl"
    rows = [{"id": 1, "address": "1 Main St", "name": "Jane"}, {"id": 2, "address": "", "name": "Bob"}]
    path.write_text("\n".join(json.dumps(r) for r in rows) + "\n")
    source = FrameCandidateSource.from_file(path, name_column="name")
    assert source.fetch() == [Candidate("1", "1 Main St", "Jane")]


def test_from_missing_file(tmp_path: Path):
    with pytest.raises(CandidateSourceError):
        FrameCandidateSource.from_file(tmp_path / "nope.csv")


def test_static_source_skips_blank():
    source = StaticCandidateSource([Candidate("a", "1 Main St"), Candidate("b", " ")])
    assert [c.id for c in source.fetch()] == ["a"]


def test_static_source_skips_non_string_addresses():
    source = StaticCandidateSource([Candidate("a", float("nan")), Candidate("b", "2 Oak Ave")])
    assert [c.id for c in source.fetch()] == ["b"]
