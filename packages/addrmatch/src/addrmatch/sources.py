"""Candidate sources: the data-store side of job and customer matching."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Protocol

import pandas as pd

from addrmatch.types import Candidate

ACTIVE_JOB_STATUSES = ("scheduled", "working_on_it", "parts_needed")


class CandidateSourceError(Exception):
    """Candidate rows could not be fetched from the backing store."""

    def __init__(self, source: str, detail: str):
        self.source = source
        self.detail = detail
        super().__init__(f"Failed to fetch candidates from {source}: {detail}")


class CandidateSource(Protocol):
    """Protocol for anything that can supply ``{id, address}`` rows.

    Implementations raise ``CandidateSourceError`` on storage failures.
    """

    def fetch(self) -> list[Candidate]: ...


class StaticCandidateSource:
    """In-memory source over an already-fetched list."""

    def __init__(self, candidates: Iterable[Candidate], name: str = "static") -> None:
        self._candidates = list(candidates)
        self.name = name

    def fetch(self) -> list[Candidate]:
        return [c for c in self._candidates if isinstance(c.address, str) and c.address.strip()]


class FrameCandidateSource:
    """Candidate rows held in a pandas DataFrame."""

    def __init__(
        self,
        frame: pd.DataFrame,
        id_column: str = "id",
        address_column: str = "address",
        name_column: str | None = None,
        status_column: str | None = None,
        statuses: Iterable[str] | None = None,
        name: str = "frame",
    ) -> None:
        self.frame = frame
        self.id_column = id_column
        self.address_column = address_column
        self.name_column = name_column
        self.status_column = status_column
        self.statuses = set(statuses) if statuses is not None else None
        self.name = name

    @classmethod
    def from_file(cls, path: str | Path, **kwargs) -> FrameCandidateSource:
        """Load rows from ``.csv``, ``.xlsx`` or ``.jsonl``."""
        path = Path(path)
        try:
            frame = read_table(path)
        except (OSError, ValueError) as exc:
            raise CandidateSourceError(str(path), str(exc)) from exc
        kwargs.setdefault("name", path.name)
        return cls(frame, **kwargs)

    def fetch(self) -> list[Candidate]:
        df = self.frame
        missing = [
            col
            for col in (self.id_column, self.address_column, self.name_column, self.status_column)
            if col is not None and col not in df.columns
        ]
        if missing:
            raise CandidateSourceError(self.name, f"missing columns: {', '.join(missing)}")

        df = df[df[self.address_column].notna()]
        if self.status_column is not None and self.statuses is not None:
            df = df[df[self.status_column].isin(self.statuses)]

        candidates: list[Candidate] = []
        for _, row in df.iterrows():
            address = str(row[self.address_column]).strip()
            if not address:
                continue
            name = None
            if self.name_column is not None and pd.notna(row[self.name_column]):
                name = str(row[self.name_column])
            candidates.append(Candidate(id=_as_id(row[self.id_column]), address=address, name=name))
        return candidates


def job_source(
    frame: pd.DataFrame,
    include_archived: bool = False,
    status_column: str = "status",
) -> FrameCandidateSource:
    """Jobs source; only active statuses unless *include_archived*."""
    has_status = status_column in frame.columns
    return FrameCandidateSource(
        frame,
        status_column=status_column if has_status else None,
        statuses=None if include_archived else ACTIVE_JOB_STATUSES,
        name="jobs",
    )


def customer_source(frame: pd.DataFrame) -> FrameCandidateSource:
    return FrameCandidateSource(
        frame,
        name_column="name" if "name" in frame.columns else None,
        name="customers",
    )


def read_table(path: str | Path) -> pd.DataFrame:
    path = Path(path)
    if path.suffix == ".xlsx":
        return pd.read_excel(path, dtype=object)
    if path.suffix == ".jsonl":
        return pd.read_json(path, lines=True, dtype=False)
    return pd.read_csv(path, dtype=object)


def _as_id(value: object) -> str:
    # Excel and JSON hand back whole-number ids as floats/ints
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
