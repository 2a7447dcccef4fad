"""Tests for the JSON file state repository."""

import json
from datetime import date
from pathlib import Path

import pytest

from nutrivision.adapters.json_state_repository import JsonFileStateRepository
from nutrivision.domain.entries import FoodEntry, Macros
from nutrivision.domain.goals import Goals, StreakState
from nutrivision.services.entries import EntryStore
from tests.conftest import fixed_calendar, make_entry


def test_entries_round_trip_preserves_order_and_fields(tmp_path: Path) -> None:
    repository = JsonFileStateRepository.create(str(tmp_path / "state.json"))
    entries = [
        make_entry("a", calories=500, protein=30, carbs=40, fat=10),
        FoodEntry(
            id="b",
            timestamp=1760875200000,
            food_name="Pizza",
            calories=700,
            macros=Macros(protein=25, carbs=80, fat=30),
            ingredients=("cheese", "dough", "tomato"),
            health_tip="Pair with a salad.",
            confidence_score=72,
            image_url="data:image/png;base64,AAAA",
        ),
        make_entry("c", food_name="Apple"),
    ]

    repository.save_entries(entries)
    reloaded = JsonFileStateRepository(path=repository.path).load_entries()

    assert reloaded == entries


def test_store_reload_yields_same_entries(tmp_path: Path) -> None:
    path = str(tmp_path / "state.json")
    store = EntryStore(
        repository=JsonFileStateRepository.create(path), calendar=fixed_calendar()
    )
    store.add_manual("Toast", 120, Macros(protein=4, carbs=20, fat=2))
    store.append(make_entry("x"))

    reopened = EntryStore(
        repository=JsonFileStateRepository.create(path), calendar=fixed_calendar()
    )

    assert reopened.all() == store.all()


def test_persisted_history_uses_camel_case_keys(tmp_path: Path) -> None:
    repository = JsonFileStateRepository.create(str(tmp_path / "state.json"))

    repository.save_entries([make_entry("a")])

    data = json.loads(repository.path.read_text(encoding="utf-8"))
    record = data["history"][0]
    assert record["foodName"] == "Oatmeal"
    assert record["confidenceScore"] == 88
    assert "imageUrl" not in record


def test_missing_file_loads_empty_defaults(tmp_path: Path) -> None:
    repository = JsonFileStateRepository.create(str(tmp_path / "nested" / "state.json"))

    assert repository.load_entries() == []
    assert repository.load_goals() is None
    assert repository.load_streak() is None
    assert repository.get_water("2026-10-19") == 0
    assert repository.get_dark_mode() is None


def test_corrupt_file_loads_empty_store(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    path.write_text("{not json", encoding="utf-8")
    repository = JsonFileStateRepository(path=path)

    store = EntryStore(repository=repository, calendar=fixed_calendar())

    assert store.all() == []


def test_malformed_history_record_loads_empty(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    path.write_text(
        json.dumps({"history": [{"id": "a", "foodName": "Soup"}]}), encoding="utf-8"
    )

    assert JsonFileStateRepository(path=path).load_entries() == []


def test_writing_after_corruption_recovers(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    path.write_text("[]", encoding="utf-8")
    repository = JsonFileStateRepository(path=path)

    repository.save_entries([make_entry("a")])

    assert [entry.id for entry in repository.load_entries()] == ["a"]


def test_keys_are_stored_independently(tmp_path: Path) -> None:
    repository = JsonFileStateRepository.create(str(tmp_path / "state.json"))

    repository.save_entries([make_entry("a")])
    repository.save_goals(
        Goals(daily_calorie_goal=1800, daily_protein_goal=120, hydration_goal=10)
    )
    repository.save_streak(StreakState(count=4, last_active_date=date(2026, 10, 18)))
    repository.set_water("2026-10-19", 3)
    repository.set_water("2026-10-18", 6)
    repository.set_dark_mode(False)

    assert [entry.id for entry in repository.load_entries()] == ["a"]
    assert repository.load_goals() == Goals(1800, 120, 10)
    assert repository.load_streak() == StreakState(
        count=4, last_active_date=date(2026, 10, 18)
    )
    assert repository.get_water("2026-10-19") == 3
    assert repository.get_water("2026-10-18") == 6
    assert repository.get_water("2026-10-20") == 0
    assert repository.get_dark_mode() is False


def test_invalid_goals_fall_back_to_defaults(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    path.write_text(
        json.dumps(
            {
                "goals": {
                    "dailyCalorieGoal": 0,
                    "dailyProteinGoal": 100,
                    "hydrationGoal": 8,
                },
                "streak": {"count": "x"},
            }
        ),
        encoding="utf-8",
    )
    repository = JsonFileStateRepository(path=path)

    assert repository.load_goals() is None
    assert repository.load_streak() is None


def test_no_temp_files_left_behind(tmp_path: Path) -> None:
    repository = JsonFileStateRepository.create(str(tmp_path / "state.json"))

    repository.save_entries([make_entry("a")])
    repository.set_water("2026-10-19", 1)

    assert sorted(p.name for p in tmp_path.iterdir()) == ["state.json"]


@pytest.mark.parametrize(
    ("calories", "macros"),
    [
        (-10, {"protein": 1, "carbs": 1, "fat": 1}),
        (100, {"protein": -1, "carbs": 1, "fat": 1}),
        (100, {"protein": 1, "carbs": 1, "fat": -3}),
    ],
)
def test_negative_nutrition_loads_empty(tmp_path: Path, calories, macros) -> None:
    path = tmp_path / "state.json"
    record = {
        "id": "a",
        "timestamp": 1760875200000,
        "foodName": "Soup",
        "calories": calories,
        "macros": macros,
    }
    path.write_text(json.dumps({"history": [record]}), encoding="utf-8")

    assert JsonFileStateRepository(path=path).load_entries() == []
