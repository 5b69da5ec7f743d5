"""Configuration for the plantmerge retirement reconciliation system."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

DATA_DIR = Path(os.environ.get("PLANTMERGE_CONFIG_DATA") or "config_data")


@dataclass
class NormalizationConfig:
    # Generic facility-type words that carry no identity
    stopwords: tuple[str, ...] = (
        "steam",
        "plant",
        "station",
        "generating",
        "power",
        "energy",
        "center",
        "complex",
        "fossil",
    )


@dataclass
class FilterConfig:
    known_fuel_types: tuple[str, ...] = (
        "gas",
        "coal",
        "nuclear",
        "wind",
        "solar",
        "hydro",
        "oil",
        "waste",
        "other",
    )
    # Empty means every fuel type is of interest
    fuel_types_of_interest: list[str] = field(default_factory=list)
    default_page: int = 1


@dataclass
class PaginationConfig:
    page_size: int = 50
    null_date_sentinel: date = date(9999, 12, 31)


@dataclass
class DedupConfig:
    # "digits" collapses on the numeric part of the unit label, "full" on the
    # whole lower-cased label.
    unit_key: str = "digits"


@dataclass
class ServerConfig:
    passphrase: str | None = None
    header_name: str = "X-Access-Passphrase"

    def __post_init__(self) -> None:
        if self.passphrase is None:
            self.passphrase = os.environ.get("PLANTMERGE_PASSPHRASE") or None


@dataclass
class MergeConfig:
    normalization: NormalizationConfig = field(default_factory=NormalizationConfig)
    filters: FilterConfig = field(default_factory=FilterConfig)
    pagination: PaginationConfig = field(default_factory=PaginationConfig)
    dedup: DedupConfig = field(default_factory=DedupConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    data_dir: Path = DATA_DIR
