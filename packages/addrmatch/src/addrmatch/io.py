"""Tabular input and output for batch address matching."""

from __future__ import annotations

from pathlib import Path

import pandas as pd

from addrmatch.sources import read_table
from addrmatch.types import MatchResult


def read_addresses(path: str | Path, column: str = "address") -> list[str]:
    """Read the non-empty values of *column* from CSV, XLSX or JSONL."""
    df = read_table(path)
    if column not in df.columns:
        raise ValueError(f"{path}: no '{column}' column (found: {', '.join(map(str, df.columns))})")
    return [str(v).strip() for v in df[column].dropna() if str(v).strip()]


def results_frame(
    results: dict[str, MatchResult | None],
    entity: str = "job",
    key_column: str = "address",
) -> pd.DataFrame:
    """One row per query: the key plus the match fields (blank when unmatched)."""
    empty = {
        f"{entity}_id": None,
        f"{entity}_address": None,
        "match_score": None,
        "match_method": None,
        "confidence": None,
    }
    rows = []
    for key, match in results.items():
        row = {key_column: key}
        if match is None:
            row.update(empty)
        else:
            record = match.to_dict(entity)
            record["match_score"] = round(match.score, 4)
            row.update(record)
        rows.append(row)
    return pd.DataFrame(rows)


def review_frame(query: str, matches: list[MatchResult], entity: str = "job") -> pd.DataFrame:
    """Ranked candidates for one query, as shown to a human reviewer."""
    rows = []
    for rank, match in enumerate(matches, start=1):
        record = match.to_dict(entity)
        record["match_score"] = round(match.score, 4)
        rows.append({"query": query, "rank": rank, **record})
    return pd.DataFrame(rows)


def write_table(df: pd.DataFrame, path: str | Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.suffix == ".xlsx":
        df.to_excel(path, index=False)
    elif path.suffix == ".jsonl":
        df.to_json(path, orient="records", lines=True)
    else:
        df.to_csv(path, index=False)
