"""Source readers: contracts and pandas-backed implementations.

Readers only fetch and shape records. Matching and merging happen in the
engine, which treats an empty reader result as a valid input.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Any, Protocol

import pandas as pd
import structlog

from plantmerge.errors import SourceUnavailable
from plantmerge.types import FacilityInfo, GeneratorRecord, ResearchUnit, RetirementFilters

log = structlog.get_logger()

GENERATOR_COLUMNS = {
    "plant_id_eia",
    "generator_id",
    "report_date",
    "capacity_mw",
    "fuel_type_code_pudl",
    "operational_status",
    "planned_generator_retirement_date",
    "generator_retirement_date",
}
PLANT_COLUMNS = {"plant_id_eia", "plant_name_eia", "state"}
RESEARCH_COLUMNS = {
    "plant_name",
    "plant_slug",
    "unit_name",
    "status",
    "fuel_type",
    "planned_retirement_year",
    "state",
}


class AuthoritativeSource(Protocol):
    """Regulatory filing snapshots, one row per generator per report date."""

    def latest_report_date(self) -> date | None: ...

    def fetch_generators(
        self, report_date: date, filters: RetirementFilters
    ) -> list[GeneratorRecord]: ...

    def fetch_facilities(self, ids: list[int]) -> dict[int, FacilityInfo]: ...


class ResearchSource(Protocol):
    """Research wiki units, one row per unit."""

    def fetch_research_units(self, filters: RetirementFilters) -> list[ResearchUnit]: ...


def read_frame(path: str | Path) -> pd.DataFrame:
    """Read a CSV, JSONL or Excel file into a DataFrame."""
    path = Path(path)
    if path.suffix in (".xlsx", ".xls"):
        return pd.read_excel(path)
    if path.suffix == ".jsonl":
        return pd.read_json(path, lines=True)
    return pd.read_csv(path)


def _load(source: str, path: str | Path) -> pd.DataFrame:
    try:
        df = read_frame(path)
    except (OSError, ValueError) as e:
        raise SourceUnavailable(source, f"{path}: {e}") from e
    log.info("source_file_loaded", source=source, path=str(path), rows=len(df))
    return df


def _require(source: str, df: pd.DataFrame, columns: set[str]) -> None:
    missing = columns - set(df.columns)
    if missing:
        raise SourceUnavailable(source, f"missing columns {sorted(missing)}")


def _str(value: Any) -> str | None:
    if value is None or pd.isna(value):
        return None
    s = str(value).strip()
    return s or None


def _float(value: Any) -> float | None:
    if value is None or pd.isna(value):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _int(value: Any) -> int | None:
    f = _float(value)
    return int(f) if f is not None else None


def _date(value: Any) -> date | None:
    if value is None or pd.isna(value):
        return None
    ts = pd.to_datetime(value, errors="coerce")
    if pd.isna(ts):
        return None
    return ts.date()


def _id_str(value: Any) -> str | None:
    """Generator ids like 1 must not come back as "1.0" after a CSV round trip."""
    if isinstance(value, float) and not pd.isna(value) and value.is_integer():
        return str(int(value))
    return _str(value)


class SnapshotSource:
    """Authoritative source over generator and plant DataFrames.

    Only the snapshot with the maximum report date is ever served.
    """

    name = "authoritative"

    def __init__(self, generators: pd.DataFrame, plants: pd.DataFrame) -> None:
        _require(self.name, generators, GENERATOR_COLUMNS)
        _require(self.name, plants, PLANT_COLUMNS)
        self._generators = generators.copy()
        self._generators["report_date"] = pd.to_datetime(
            self._generators["report_date"], errors="coerce"
        ).dt.date
        self._plants = plants

    @classmethod
    def from_files(cls, generators_path: str | Path, plants_path: str | Path) -> SnapshotSource:
        return cls(_load(cls.name, generators_path), _load(cls.name, plants_path))

    def latest_report_date(self) -> date | None:
        dates = self._generators["report_date"].dropna()
        if dates.empty:
            return None
        return max(dates)

    def fetch_generators(
        self, report_date: date, filters: RetirementFilters
    ) -> list[GeneratorRecord]:
        df = self._generators[self._generators["report_date"] == report_date]
        if filters.fuel_type:
            fuel = df["fuel_type_code_pudl"].fillna("").astype(str).str.lower()
            df = df[fuel == filters.fuel_type]

        records: list[GeneratorRecord] = []
        for row in df.to_dict("records"):
            facility_id = _int(row["plant_id_eia"])
            generator_id = _id_str(row["generator_id"])
            if facility_id is None or generator_id is None:
                continue
            records.append(GeneratorRecord(
                facility_id=facility_id,
                generator_id=generator_id,
                report_date=row["report_date"],
                capacity_mw=_float(row["capacity_mw"]),
                fuel_type=_str(row["fuel_type_code_pudl"]),
                operational_status=_str(row["operational_status"]),
                planned_retirement_date=_date(row["planned_generator_retirement_date"]),
                actual_retirement_date=_date(row["generator_retirement_date"]),
            ))
        log.debug("generators_fetched", report_date=str(report_date), count=len(records))
        return records

    def fetch_facilities(self, ids: list[int]) -> dict[int, FacilityInfo]:
        df = self._plants[self._plants["plant_id_eia"].isin(ids)]
        facilities: dict[int, FacilityInfo] = {}
        for row in df.to_dict("records"):
            facility_id = _int(row["plant_id_eia"])
            if facility_id is None or facility_id in facilities:
                continue
            facilities[facility_id] = FacilityInfo(
                name=_str(row["plant_name_eia"]) or "",
                state=_str(row["state"]) or "",
                county=_str(row.get("county")),
                city=_str(row.get("city")),
                latitude=_float(row.get("latitude")),
                longitude=_float(row.get("longitude")),
            )
        return facilities


class WikiSource:
    """Research source over a DataFrame of wiki units.

    (plant_slug, unit_name) is unique: later duplicates are dropped here so
    nothing downstream sees them.
    """

    name = "research"

    def __init__(self, units: pd.DataFrame) -> None:
        _require(self.name, units, RESEARCH_COLUMNS)
        deduped = units.drop_duplicates(subset=["plant_slug", "unit_name"], keep="first")
        dropped = len(units) - len(deduped)
        if dropped:
            log.warning("research_duplicate_units_dropped", count=dropped)
        self._units = deduped

    @classmethod
    def from_file(cls, path: str | Path) -> WikiSource:
        return cls(_load(cls.name, path))

    def fetch_research_units(self, filters: RetirementFilters) -> list[ResearchUnit]:
        df = self._units
        if filters.state:
            df = df[df["state"] == filters.state]
        if filters.fuel_type:
            fuel = df["fuel_type"].fillna("").astype(str)
            df = df[fuel.str.contains(filters.fuel_type, case=False, regex=False)]

        units: list[ResearchUnit] = []
        for row in df.to_dict("records"):
            name = _str(row["plant_name"])
            unit_name = _id_str(row["unit_name"])
            if name is None or unit_name is None:
                continue
            units.append(ResearchUnit(
                facility_name=name,
                facility_slug=_str(row["plant_slug"]) or name,
                unit_name=unit_name,
                status=_str(row["status"]) or "unknown",
                fuel_type=_str(row["fuel_type"]) or "unknown",
                capacity_mw=_float(row.get("capacity_mw")),
                planned_retirement_year=_int(row["planned_retirement_year"]),
                actual_retirement_year=_int(row.get("retired_year")),
                state=_str(row["state"]) or "",
                county=_str(row.get("county")),
                owner=_str(row.get("owner")),
            ))
        log.debug("research_units_fetched", count=len(units))
        return units
