"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from nutrivision.adapters.json_state_repository import JsonFileStateRepository
from nutrivision.adapters.openai_analysis_client import OpenAIAnalysisClient
from nutrivision.config import Settings, parse_api_keys
from nutrivision.services.analysis import AnalysisGateway
from nutrivision.services.calendar import LocalCalendar
from nutrivision.services.capture import CaptureFlow
from nutrivision.services.credentials import CredentialPool
from nutrivision.services.dashboard import DashboardService
from nutrivision.services.entries import EntryStore
from nutrivision.services.goals import GoalTracker
from nutrivision.services.preferences import PreferencesService
from nutrivision.services.stats import StatsService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    calendar: LocalCalendar
    entry_store: EntryStore
    stats_service: StatsService
    goal_tracker: GoalTracker
    analysis_gateway: AnalysisGateway
    capture_flow: CaptureFlow
    dashboard_service: DashboardService
    preferences_service: PreferencesService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    calendar = LocalCalendar.create(resolved_settings.timezone)
    state_repository = JsonFileStateRepository.create(resolved_settings.state_path)
    credentials = CredentialPool.create(
        parse_api_keys(resolved_settings.openai_api_keys),
        strategy=resolved_settings.key_selection,
    )
    openai_client = OpenAIAnalysisClient.create(
        model=resolved_settings.openai_model,
        credentials=credentials,
        timeout=resolved_settings.openai_timeout_seconds,
    )
    analysis_gateway = AnalysisGateway(
        client=openai_client, seed=resolved_settings.analysis_seed
    )
    entry_store = EntryStore(repository=state_repository, calendar=calendar)
    stats_service = StatsService(store=entry_store, calendar=calendar)
    goal_tracker = GoalTracker(
        goals_repository=state_repository,
        streak_repository=state_repository,
        water_repository=state_repository,
        calendar=calendar,
    )
    capture_flow = CaptureFlow(gateway=analysis_gateway, store=entry_store)
    dashboard_service = DashboardService(
        stats_service=stats_service,
        goal_tracker=goal_tracker,
        gateway=analysis_gateway,
    )
    preferences_service = PreferencesService(state_repository)

    async def close_resources() -> None:
        await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        calendar=calendar,
        entry_store=entry_store,
        stats_service=stats_service,
        goal_tracker=goal_tracker,
        analysis_gateway=analysis_gateway,
        capture_flow=capture_flow,
        dashboard_service=dashboard_service,
        preferences_service=preferences_service,
        close_resources=close_resources,
    )
