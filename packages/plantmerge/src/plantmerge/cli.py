"""CLI tool for reconciling power plant retirement data."""

import argparse
from pathlib import Path

import pandas as pd
import structlog

from plantmerge.aliases import AliasTable, load_alias_pairs
from plantmerge.config import MergeConfig
from plantmerge.engine import MergeEngine
from plantmerge.errors import SourceUnavailable
from plantmerge.filters import validate_filters
from plantmerge.index import ResearchIndex
from plantmerge.io import write_records
from plantmerge.logging import configure_logging
from plantmerge.manual_delays import ManualDelayIndex, load_citations
from plantmerge.matcher import Matcher
from plantmerge.normalize import normalize
from plantmerge.service import RetirementService
from plantmerge.sources import SnapshotSource, WikiSource
from plantmerge.summary import summarize
from plantmerge.types import FacilityRecord, MergedRecord, RetirementFilters


def _build_engine(args: argparse.Namespace, config: MergeConfig) -> MergeEngine:
    """Build a MergeEngine from the curated alias and citation files."""
    log = structlog.get_logger()
    aliases = AliasTable(load_alias_pairs(args.aliases))
    manual = ManualDelayIndex(load_citations(args.delays), config.normalization)
    log.info("build_engine_done", aliases=len(aliases), citations=len(manual))
    return MergeEngine(aliases=aliases, manual_delays=manual, config=config)


def _build_service(args: argparse.Namespace, config: MergeConfig) -> RetirementService:
    """Wire file-backed sources; an unreadable source is left out."""
    log = structlog.get_logger()
    authoritative = None
    research = None
    try:
        authoritative = SnapshotSource.from_files(args.generators, args.plants)
    except SourceUnavailable as e:
        log.warning("source_unavailable", source=e.source, reason=e.reason)
    try:
        research = WikiSource.from_file(args.research)
    except SourceUnavailable as e:
        log.warning("source_unavailable", source=e.source, reason=e.reason)

    return RetirementService(
        authoritative,
        research,
        engine=_build_engine(args, config),
        config=config,
    )


def cmd_merge(args: argparse.Namespace) -> None:
    config = MergeConfig()
    service = _build_service(args, config)
    filters = validate_filters(args.state, args.fuel_type, 1, config.filters)

    records = service.records(filters)

    if args.show:
        _show_records(records)

    _print_summary(records)
    write_records(records, args.output)
    print(f"\nSaved to: {args.output}")


def _show_records(records: list[MergedRecord]) -> None:
    """Display merged records on screen."""
    if not records:
        print("\n=== No records ===")
        return

    df = pd.DataFrame([r.to_dict() for r in records])
    display_cols = [
        "facilityName", "state", "generatorId", "unitName",
        "resolvedPlannedDate", "delayMonths", "dataSources",
    ]
    print(f"\n=== Records ({len(records)}) ===")
    print(df[display_cols].to_string(index=False))


def _print_summary(records: list[MergedRecord]) -> None:
    s = summarize(records)
    print("\n--- Summary ---")
    print(f"Records: {s.record_count}")
    print(f"Capacity: {s.total_capacity_mw:,.1f} MW")
    print(f"Extended: {s.extended_count}")
    if s.unbounded_delay_count:
        print(f"Indefinite / emergency order: {s.unbounded_delay_count}")
    parts = [f"{k}={v}" for k, v in s.by_source.items()]
    print(f"By source: {', '.join(parts)}")


def cmd_lookup(args: argparse.Namespace) -> None:
    """Show how a facility name normalizes and what it resolves to."""
    config = MergeConfig()
    engine = _build_engine(args, config)
    state = args.state.upper()

    print(f"Name:       {args.name}")
    print(f"Normalized: {normalize(args.name, config.normalization)!r}")
    aliases = engine.aliases.aliases_for(args.name)
    print(f"Aliases:    {', '.join(aliases) if aliases else '-'}")

    citation = engine.manual_delays.lookup(args.name, state)
    if citation is None:
        print("Citation:   -")
    else:
        revised = citation.revised_year if citation.revised_year is not None else "-"
        print(
            f"Citation:   {citation.facility_name} ({citation.state}) "
            f"{citation.original_year} -> {revised} [{citation.source_label}]"
        )

    try:
        research = WikiSource.from_file(args.research)
    except SourceUnavailable as e:
        print(f"Research:   unavailable ({e.reason})")
        return

    index = ResearchIndex(config.normalization)
    index.build(research.fetch_research_units(RetirementFilters(state=state)))
    probe = FacilityRecord(
        facility_id=0,
        facility_name=args.name,
        generator_id=args.generator or "",
        state=state,
        capacity_mw=None,
        fuel_type=None,
        operational_status=None,
        planned_retirement_date=None,
        actual_retirement_date=None,
    )
    match = Matcher(engine.aliases, config.normalization).match(probe, index)
    if match is None:
        print("Research:   no match")
        return
    names = ", ".join(k[0] for k in match.group_keys)
    print(f"Research:   {names} via {match.tier} match")
    for unit in match.units:
        marker = "*" if unit is match.unit else " "
        print(
            f"  {marker} {unit.unit_name}: {unit.status}, "
            f"planned {unit.planned_retirement_year or '-'}"
        )


def cmd_serve(args: argparse.Namespace) -> None:
    """Run the HTTP API."""
    import uvicorn

    from plantmerge.server import create_app

    configure_logging(args.log_level, colors=False)
    log = structlog.get_logger()
    config = MergeConfig()
    service = _build_service(args, config)
    app = create_app(service, config)

    log.info(
        "server_start",
        host=args.host,
        port=args.port,
        passphrase_gate=bool(config.server.passphrase),
    )
    uvicorn.run(app, host=args.host, port=args.port, log_level="warning")


def _add_source_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--generators", default="localdata/generators.csv", help="Authoritative generator snapshots")
    parser.add_argument("--plants", default="localdata/plants.csv", help="Authoritative plant entities")
    parser.add_argument("--research", default="localdata/research_units.csv", help="Research wiki units")


def main() -> None:
    # Parent parser with global options (inherited by all subcommands)
    parent_parser = argparse.ArgumentParser(add_help=False)
    parent_parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Set logging level (default: INFO)",
    )
    data_dir = MergeConfig().data_dir
    parent_parser.add_argument(
        "--delays",
        default=str(Path(data_dir) / "manual_delays.json"),
        help="Path to manual delay citations",
    )
    parent_parser.add_argument(
        "--aliases",
        default=str(Path(data_dir) / "plant_aliases.json"),
        help="Path to facility name aliases",
    )

    parser = argparse.ArgumentParser(
        description="Power plant retirement reconciliation CLI",
        parents=[parent_parser],
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # merge subcommand
    merge_parser = subparsers.add_parser("merge", parents=[parent_parser], help="Merge all sources")
    _add_source_args(merge_parser)
    merge_parser.add_argument("--state", default="", help="Two-letter state code")
    merge_parser.add_argument("--fuel-type", default="", help="Fuel type (coal, gas, ...)")
    merge_parser.add_argument("--show", action="store_true", help="Display records on screen")
    merge_parser.add_argument("--output", default="localdata/retirements.xlsx", help="Output file path")
    merge_parser.set_defaults(func=cmd_merge)

    # lookup subcommand
    lookup_parser = subparsers.add_parser("lookup", parents=[parent_parser], help="Explain how a name matches")
    lookup_parser.add_argument("name", help="Facility name as filed")
    lookup_parser.add_argument("--state", required=True, help="Two-letter state code")
    lookup_parser.add_argument("--generator", help="Generator id to pick a unit with")
    lookup_parser.add_argument("--research", default="localdata/research_units.csv", help="Research wiki units")
    lookup_parser.set_defaults(func=cmd_lookup)

    # serve subcommand
    serve_parser = subparsers.add_parser("serve", parents=[parent_parser], help="Run the HTTP API")
    _add_source_args(serve_parser)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8765, help="Server port (default: 8765)")
    serve_parser.set_defaults(func=cmd_serve)

    args = parser.parse_args()
    configure_logging(args.log_level)
    args.func(args)


if __name__ == "__main__":
    main()
