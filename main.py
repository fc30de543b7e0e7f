# main.py
import argparse
from pathlib import Path

from config import EngineSettings, load_calendar_config_from_yaml, load_engine_settings_from_yaml
from logger import log, setup_logger
from simulation.engine import CalendarEngine, TurnReport
from store.codecs import render_calendar_text
from store.records import InMemoryRecordStore, JsonFileRecordStore, Record, RecordStore


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run the narrative calendar for a number of turns.")
    parser.add_argument("--turns", type=int, default=10, help="number of turns to process")
    parser.add_argument("--start-turn", type=int, default=0, help="turn counter of the first turn")
    parser.add_argument("--store", type=Path, default=None, help="JSON record store file")
    parser.add_argument(
        "--calendar-yaml",
        type=Path,
        default=None,
        help="YAML calendar definition written into the configuration record",
    )
    parser.add_argument("--settings-yaml", type=Path, default=None, help="YAML engine settings")
    return parser


def open_store(path: Path | None) -> RecordStore:
    if path is None:
        return InMemoryRecordStore()
    return JsonFileRecordStore(path)


def seed_calendar(store: RecordStore, settings: EngineSettings, calendar_yaml: Path) -> None:
    """Replace the configuration record with a calendar loaded from YAML."""
    config = load_calendar_config_from_yaml(calendar_yaml)
    store.upsert(Record(settings.config_record, entry=render_calendar_text(config)))
    log(f"Calendar configuration loaded from {calendar_yaml}", level="INFO")


def describe_turn(turn: int, report: TurnReport | None) -> None:
    if report is None:
        log(f"Turn {turn}: calendar unavailable", level="WARNING")
        return
    for notification in report.notifications:
        details = {key: value for key, value in notification.data.items() if key != "state"}
        log(f"Turn {turn}: {notification.type} {details}", level="INFO")


def status_line(engine: CalendarEngine) -> str:
    date = engine.current_date()
    if date is None:
        return "Calendar unavailable"
    parts = [f"{engine.formatted_time()}, {date}"]
    season = engine.current_season()
    if season:
        parts.append(season)
    names = [scheduled.rule.name for scheduled in engine.today_events()]
    if names:
        parts.append(f"Today: {', '.join(names)}")
    return " | ".join(parts)


def main(argv: list[str] | None = None) -> None:
    """Process ``--turns`` consecutive turns and print the final status."""
    args = build_parser().parse_args(argv)
    settings = load_engine_settings_from_yaml(args.settings_yaml) if args.settings_yaml else EngineSettings()
    setup_logger(settings.logging_level, settings.log_file, settings.log_format)
    log("Starting calendar run...", level="INFO")

    store = open_store(args.store)
    if args.calendar_yaml is not None:
        seed_calendar(store, settings, args.calendar_yaml)

    engine = CalendarEngine(store, settings)
    for turn in range(args.start_turn, args.start_turn + args.turns):
        describe_turn(turn, engine.process_turn(turn))

    status = status_line(engine)
    log(status, level="INFO")
    print(status)


if __name__ == "__main__":
    main()
