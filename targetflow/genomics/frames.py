"""
DataFrame adapters for TargetFlow records

Converts already-tabulated peak and region tables into records and exports
assigned peaks, targets and test results as DataFrames for inspection.
"""

from dataclasses import asdict
from typing import List, Optional, Sequence

import pandas as pd

from ..exceptions import InvalidIntervalError, MissingColumnError
from .assignment import AssignedPeak
from .intervals import Peak, Region
from .scoring import Target
from .statistical import GroupTest

CHROM_COLS = ["chr", "chrom", "chromosome", "seqnames"]
SIGNAL_COLS = ["signal", "signalValue", "score"]
PEAK_ID_COLS = ["peak_id", "name"]
REGION_ID_COLS = ["region_id", "tx_id", "transcript_id"]

REGION_COLUMNS = {"chromosome", "start", "end", "strand", "region_id", "gene_id"}


def detect_column(
    df: pd.DataFrame, candidates: List[str], required: bool = False, name: str = "DataFrame"
) -> Optional[str]:
    """Find the first matching column name from a list of candidates (case-insensitive)"""
    cols_lower = {c.lower(): c for c in df.columns}
    for cand in candidates:
        if cand.lower() in cols_lower:
            return cols_lower[cand.lower()]
    if required:
        raise MissingColumnError(candidates[0], name, available=list(df.columns))
    return None


def _require(df: pd.DataFrame, column: str, name: str) -> str:
    return detect_column(df, [column], required=True, name=name)


def _convert(row: pd.Series, column: str, cast, name: str, idx):
    """Cast one cell, naming the table and row when the value is unusable"""
    try:
        return cast(row[column])
    except (TypeError, ValueError) as e:
        raise InvalidIntervalError(
            f"Invalid {column} value {row[column]!r} in {name} row {idx}"
        ) from e


def _strands(df: pd.DataFrame) -> pd.Series:
    col = detect_column(df, ["strand"])
    if col is None:
        return pd.Series(["*"] * len(df), index=df.index)
    return df[col].fillna("*").astype(str)


def peaks_from_frame(df: pd.DataFrame) -> List[Peak]:
    """
    Build peak records from a table with chr/start/end and optional signal

    Peaks without a signal column get a signal of 1.0.
    """
    chrom_col = detect_column(df, CHROM_COLS, required=True, name="peaks")
    start_col = _require(df, "start", "peaks")
    end_col = _require(df, "end", "peaks")
    signal_col = detect_column(df, SIGNAL_COLS)
    id_col = detect_column(df, PEAK_ID_COLS)
    strands = _strands(df)

    peaks = []
    for idx, row in df.iterrows():
        peaks.append(
            Peak(
                str(row[chrom_col]),
                _convert(row, start_col, int, "peaks", idx),
                _convert(row, end_col, int, "peaks", idx),
                strands.loc[idx],
                signal=_convert(row, signal_col, float, "peaks", idx) if signal_col else 1.0,
                peak_id=str(row[id_col]) if id_col and pd.notna(row[id_col]) else None,
            )
        )
    return peaks


def regions_from_frame(
    df: pd.DataFrame, stat_columns: Optional[Sequence[str]] = None
) -> List[Region]:
    """
    Build region records from a table with coordinates, ids and statistics

    Args:
        df: Table with chr/start/end, gene_id, optional strand and region_id
        stat_columns: Statistic columns to carry; defaults to every numeric
            column that is not a coordinate

    Returns:
        Region records in table order
    """
    chrom_col = detect_column(df, CHROM_COLS, required=True, name="regions")
    start_col = _require(df, "start", "regions")
    end_col = _require(df, "end", "regions")
    gene_col = _require(df, "gene_id", "regions")
    region_col = detect_column(df, REGION_ID_COLS)
    strands = _strands(df)

    if stat_columns is None:
        used = {chrom_col, start_col, end_col, gene_col, region_col} | REGION_COLUMNS
        stat_columns = [
            col
            for col in df.select_dtypes(include="number").columns
            if col not in used
        ]
    for col in stat_columns:
        if col not in df.columns:
            raise MissingColumnError(col, "regions", available=list(df.columns))

    regions = []
    for idx, row in df.iterrows():
        statistics = {
            col: _convert(row, col, float, "regions", idx)
            for col in stat_columns
            if pd.notna(row[col])
        }
        regions.append(
            Region(
                str(row[chrom_col]),
                _convert(row, start_col, int, "regions", idx),
                _convert(row, end_col, int, "regions", idx),
                strands.loc[idx],
                region_id=str(row[region_col]) if region_col else f"region_{idx}",
                gene_id=str(row[gene_col]),
                statistics=statistics,
            )
        )
    return regions


def assigned_to_frame(assigned: Sequence[AssignedPeak]) -> pd.DataFrame:
    columns = ["peak_ref", "region_id", "gene_id", "key", "distance", "peak_score",
               "peak_index", "region_index"]
    return pd.DataFrame([asdict(item) for item in assigned], columns=columns)


def targets_to_frame(targets: Sequence[Target], labels: Optional[Sequence[str]] = None) -> pd.DataFrame:
    """Targets as a DataFrame, optionally with their group label"""
    columns = ["gene_id", "score", "score_rank", "rank", "stat", "region_id",
               "distance", "n_peaks"]
    df = pd.DataFrame([asdict(target) for target in targets], columns=columns)
    if labels is not None:
        df["group"] = list(labels)
    return df


def tests_to_frame(tests: Sequence[GroupTest]) -> pd.DataFrame:
    columns = ["group", "reference", "statistic", "p_value", "p_adjusted",
               "significant", "n_group", "n_reference", "alternative"]
    rows = []
    for test in tests:
        row = asdict(test)
        row["n_group"], row["n_reference"] = row.pop("group_sizes")
        rows.append(row)
    return pd.DataFrame(rows, columns=columns)
