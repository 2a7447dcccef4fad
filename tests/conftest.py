"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest

from nutrivision.config import Settings
from nutrivision.containers import AppContainer
from nutrivision.domain.entries import FoodEntry, Macros
from nutrivision.domain.goals import Goals, StreakState
from nutrivision.services.analysis import (
    AnalysisClient,
    AnalysisGateway,
    DecodingParams,
)
from nutrivision.services.calendar import LocalCalendar
from nutrivision.services.capture import CaptureFlow
from nutrivision.services.dashboard import DashboardService
from nutrivision.services.entries import EntryRepository, EntryStore
from nutrivision.services.goals import (
    GoalsRepository,
    GoalTracker,
    StreakRepository,
    WaterLogRepository,
)
from nutrivision.services.preferences import (
    PreferencesRepository,
    PreferencesService,
)
from nutrivision.services.stats import StatsService

UTC_ZONE = ZoneInfo("UTC")
NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC_ZONE)


@dataclass(frozen=True)
class FixedCalendar(LocalCalendar):
    """Calendar pinned to a fixed instant."""

    current: datetime = NOW

    def now(self) -> datetime:
        return self.current.astimezone(self.tz)


def fixed_calendar(current: datetime = NOW) -> FixedCalendar:
    return FixedCalendar(tz=UTC_ZONE, current=current)


def timestamp_ms(value: datetime) -> int:
    return int(value.timestamp() * 1000)


def make_entry(  # noqa: PLR0913
    entry_id: str = "entry-1",
    *,
    at: datetime = NOW,
    food_name: str = "Oatmeal",
    calories: int = 300,
    protein: int = 10,
    carbs: int = 50,
    fat: int = 5,
    ingredients: tuple[str, ...] = ("milk", "oats"),
) -> FoodEntry:
    return FoodEntry(
        id=entry_id,
        timestamp=timestamp_ms(at),
        food_name=food_name,
        calories=calories,
        macros=Macros(protein=protein, carbs=carbs, fat=fat),
        ingredients=ingredients,
        health_tip="Add berries for fiber.",
        confidence_score=88,
        image_url=None,
    )


@dataclass
class InMemoryStateRepository(
    EntryRepository,
    GoalsRepository,
    StreakRepository,
    WaterLogRepository,
    PreferencesRepository,
):
    """In-memory state repository for tests."""

    entries: list[FoodEntry] = field(default_factory=list)
    goals: Goals | None = None
    streak: StreakState | None = None
    water: dict[str, int] = field(default_factory=dict)
    dark_mode: bool | None = None
    saves: int = 0

    def load_entries(self) -> list[FoodEntry]:
        return list(self.entries)

    def save_entries(self, entries: list[FoodEntry]) -> None:
        self.entries = list(entries)
        self.saves += 1

    def load_goals(self) -> Goals | None:
        return self.goals

    def save_goals(self, goals: Goals) -> None:
        self.goals = goals

    def load_streak(self) -> StreakState | None:
        return self.streak

    def save_streak(self, streak: StreakState) -> None:
        self.streak = streak

    def get_water(self, day_key: str) -> int:
        return self.water.get(day_key, 0)

    def set_water(self, day_key: str, glasses: int) -> None:
        self.water[day_key] = glasses

    def get_dark_mode(self) -> bool | None:
        return self.dark_mode

    def set_dark_mode(self, enabled: bool) -> None:
        self.dark_mode = enabled


def analysis_payload() -> dict[str, object]:
    return {
        "foodName": "Chicken Salad",
        "calories": 420,
        "macros": {"protein": 35, "carbs": 12, "fat": 24},
        "ingredients": ["lettuce", "chicken", "olive oil"],
        "healthTip": "Great protein source.",
        "confidenceScore": 87,
    }


@dataclass
class FakeAnalysisClient(AnalysisClient):
    """Fake analysis client that records requests."""

    json_payload: dict[str, object] = field(default_factory=analysis_payload)
    text: str = "Nice balance so far. Add a yogurt with berries."
    error: Exception | None = None
    calls: list[dict[str, object]] = field(default_factory=list)

    async def generate_json(  # noqa: PLR0913
        self,
        *,
        prompt: str,
        image_data_url: str | None,
        schema: dict[str, object],
        schema_name: str,
        decoding: DecodingParams,
    ) -> dict[str, object]:
        self.calls.append(
            {
                "prompt": prompt,
                "image_data_url": image_data_url,
                "schema": schema,
                "schema_name": schema_name,
                "decoding": decoding,
            }
        )
        if self.error is not None:
            raise self.error
        return self.json_payload

    async def generate_text(self, *, prompt: str, decoding: DecodingParams) -> str:
        self.calls.append({"prompt": prompt, "decoding": decoding})
        if self.error is not None:
            raise self.error
        return self.text


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        openai_api_keys="key-a, key-b",
        state_path=str(tmp_path / "state.json"),
        timezone="UTC",
    )


@pytest.fixture
def state_repository() -> InMemoryStateRepository:
    return InMemoryStateRepository()


@pytest.fixture
def analysis_client() -> FakeAnalysisClient:
    return FakeAnalysisClient()


@pytest.fixture
def container(
    settings: Settings,
    state_repository: InMemoryStateRepository,
    analysis_client: FakeAnalysisClient,
) -> AppContainer:
    calendar = fixed_calendar()
    gateway = AnalysisGateway(client=analysis_client, seed=settings.analysis_seed)
    entry_store = EntryStore(repository=state_repository, calendar=calendar)
    stats_service = StatsService(store=entry_store, calendar=calendar)
    goal_tracker = GoalTracker(
        goals_repository=state_repository,
        streak_repository=state_repository,
        water_repository=state_repository,
        calendar=calendar,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        calendar=calendar,
        entry_store=entry_store,
        stats_service=stats_service,
        goal_tracker=goal_tracker,
        analysis_gateway=gateway,
        capture_flow=CaptureFlow(gateway=gateway, store=entry_store),
        dashboard_service=DashboardService(
            stats_service=stats_service,
            goal_tracker=goal_tracker,
            gateway=gateway,
        ),
        preferences_service=PreferencesService(state_repository),
        close_resources=close_resources,
    )


def today() -> date:
    return NOW.date()
