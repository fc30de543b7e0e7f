import json
import textwrap
from pathlib import Path

import pytest

import main
from config import EngineSettings
from simulation.engine import CalendarEngine
from store.codecs import parse_calendar_text
from store.records import InMemoryRecordStore, JsonFileRecordStore, Record, RecordStore


def test_stores_satisfy_the_protocol(tmp_path: Path) -> None:
    assert isinstance(InMemoryRecordStore(), RecordStore)
    assert isinstance(JsonFileRecordStore(tmp_path / "records.json"), RecordStore)


def test_json_store_persists_records(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "records.json"
    store = JsonFileRecordStore(path)
    store.upsert(Record("Notes", entry="hello", description="world"))

    payload = json.loads(path.read_text(encoding="utf-8"))
    reopened = JsonFileRecordStore(path)

    assert payload == {"Notes": {"entry": "hello", "description": "world"}}
    assert reopened.get("Notes") == Record("Notes", entry="hello", description="world")
    assert reopened.get("Other") is None


def test_engine_state_survives_reopening_the_json_store(tmp_path: Path) -> None:
    path = tmp_path / "records.json"
    CalendarEngine(JsonFileRecordStore(path)).process_turn(250)

    engine = CalendarEngine(JsonFileRecordStore(path))

    assert engine.day_number() == 1
    assert engine.state().progress == 51


def test_cli_runs_turns_and_prints_status(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    store_path = tmp_path / "records.json"

    main.main(["--turns", "3", "--store", str(store_path)])

    output = capsys.readouterr().out
    assert "Sunday, November 6, 2022" in output
    assert "Autumn" in output
    assert JsonFileRecordStore(store_path).get(EngineSettings().state_record) is not None


def test_cli_seeds_calendar_from_yaml(tmp_path: Path) -> None:
    calendar_yaml = tmp_path / "calendar.yaml"
    calendar_yaml.write_text(
        textwrap.dedent(
            """\
            weekdays: [Moonday, Starday]
            months:
              - {name: Thaw, base_days: 10}
            time_periods:
              Day: {start: 0.0, end: 1.0}
            actions_per_day: 10
            """
        ),
        encoding="utf-8",
    )
    store_path = tmp_path / "records.json"

    main.main(["--turns", "1", "--store", str(store_path), "--calendar-yaml", str(calendar_yaml)])

    stored = JsonFileRecordStore(store_path).get(EngineSettings().config_record)
    assert stored is not None
    cfg = parse_calendar_text(stored.entry)
    assert cfg.weekdays == ["Moonday", "Starday"]
    assert cfg.actions_per_day == 10


def test_status_line_when_unavailable() -> None:
    store = InMemoryRecordStore([Record(EngineSettings().config_record, entry="broken")])

    assert main.status_line(CalendarEngine(store)) == "Calendar unavailable"
