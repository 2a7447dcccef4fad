"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager, contextmanager
from dataclasses import asdict
from uuid import UUID

from fastapi import FastAPI, HTTPException, Request, status

from nutrivision.api.models import (
    CaloriePatchRequest,
    CaptureEditRequest,
    GoalsUpdateRequest,
    IngredientRequest,
    ManualEntryRequest,
    ThemeRequest,
    WaterAdjustRequest,
)
from nutrivision.app_logging import configure_logging
from nutrivision.containers import AppContainer
from nutrivision.domain.entries import FoodEntry, Macros
from nutrivision.domain.goals import Goals, StreakState
from nutrivision.domain.stats import DailyTotals
from nutrivision.services.analysis import AnalysisFailure, RecalculationFailure
from nutrivision.services.bmi import bmi_category, bmi_plan, calculate_bmi
from nutrivision.services.capture import (
    CaptureBusyError,
    CaptureNotFoundError,
    CaptureSnapshot,
    StaleResultError,
)
from nutrivision.services.dashboard import DashboardSnapshot
from nutrivision.services.stats import PeriodSummary

ANALYSIS_FAILED_MESSAGE = "Analysis failed. Please try a clearer photo."
RECALCULATION_FAILED_MESSAGE = "Recalculation failed. Your edits were kept."


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        streak = app.state.container.goal_tracker.start_session()
        logger.info("Session started with a %s day streak", streak.count)
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/session")
    async def start_session(request: Request) -> dict[str, object]:
        """Advance the usage streak for a new session."""
        state_container: AppContainer = request.app.state.container
        return _streak_payload(state_container.goal_tracker.start_session())

    @app.post("/captures")
    async def start_capture(request: Request) -> dict[str, object]:
        """Analyze an uploaded photo and open it for editing."""
        state_container: AppContainer = request.app.state.container
        image_bytes = await request.body()
        if not image_bytes:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="Image body is empty"
            )
        try:
            snapshot = await state_container.capture_flow.start(image_bytes)
        except AnalysisFailure as exc:
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail=ANALYSIS_FAILED_MESSAGE,
            ) from exc
        except StaleResultError as exc:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT, detail=str(exc)
            ) from exc
        return _capture_payload(snapshot)

    @app.get("/captures/current")
    async def current_capture(request: Request) -> dict[str, object]:
        """Return the pending capture."""
        state_container: AppContainer = request.app.state.container
        snapshot = state_container.capture_flow.current()
        if snapshot is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return _capture_payload(snapshot)

    @app.delete("/captures/{token}")
    async def discard_capture(token: UUID, request: Request) -> dict[str, str]:
        """Drop the pending capture."""
        state_container: AppContainer = request.app.state.container
        with _capture_errors():
            state_container.capture_flow.discard(token)
        return {"status": "discarded"}

    @app.post("/captures/{token}/ingredients")
    async def add_ingredient(
        token: UUID, payload: IngredientRequest, request: Request
    ) -> dict[str, object]:
        """Add an ingredient to the pending capture."""
        state_container: AppContainer = request.app.state.container
        with _capture_errors():
            snapshot = state_container.capture_flow.add_ingredient(token, payload.name)
        return _capture_payload(snapshot)

    @app.delete("/captures/{token}/ingredients/{index}")
    async def remove_ingredient(
        token: UUID, index: int, request: Request
    ) -> dict[str, object]:
        """Remove an ingredient from the pending capture."""
        state_container: AppContainer = request.app.state.container
        with _capture_errors():
            snapshot = state_container.capture_flow.remove_ingredient(token, index)
        return _capture_payload(snapshot)

    @app.patch("/captures/{token}")
    async def edit_capture(
        token: UUID, payload: CaptureEditRequest, request: Request
    ) -> dict[str, object]:
        """Override calories or macros on the pending capture."""
        state_container: AppContainer = request.app.state.container
        macros = (
            Macros(**payload.macros.model_dump()) if payload.macros is not None else None
        )
        with _capture_errors():
            snapshot = state_container.capture_flow.edit_nutrition(
                token, calories=payload.calories, macros=macros
            )
        return _capture_payload(snapshot)

    @app.post("/captures/{token}/recalculate")
    async def recalculate_capture(token: UUID, request: Request) -> dict[str, object]:
        """Recompute nutrition for the confirmed ingredients."""
        state_container: AppContainer = request.app.state.container
        try:
            with _capture_errors():
                snapshot = await state_container.capture_flow.recalculate(token)
        except RecalculationFailure as exc:
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail=RECALCULATION_FAILED_MESSAGE,
            ) from exc
        return _capture_payload(snapshot)

    @app.post("/captures/{token}/save")
    async def save_capture(token: UUID, request: Request) -> dict[str, object]:
        """Commit the pending capture to the history log."""
        state_container: AppContainer = request.app.state.container
        with _capture_errors():
            entry = state_container.capture_flow.save(token)
        return _entry_payload(entry)

    @app.get("/entries")
    async def list_entries(request: Request) -> dict[str, object]:
        """Return the full history, oldest first."""
        state_container: AppContainer = request.app.state.container
        return {
            "entries": [
                _entry_payload(entry) for entry in state_container.entry_store.all()
            ]
        }

    @app.post("/entries")
    async def add_manual_entry(
        payload: ManualEntryRequest, request: Request
    ) -> dict[str, object]:
        """Log a food item without a photo."""
        state_container: AppContainer = request.app.state.container
        entry = state_container.entry_store.add_manual(
            payload.food_name,
            payload.calories,
            Macros(**payload.macros.model_dump()),
        )
        return _entry_payload(entry)

    @app.patch("/entries/{entry_id}")
    async def patch_entry(
        entry_id: str, payload: CaloriePatchRequest, request: Request
    ) -> dict[str, object]:
        """Correct the calories of a logged entry."""
        state_container: AppContainer = request.app.state.container
        store = state_container.entry_store
        if store.get(entry_id) is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        updated = store.patch_calories(entry_id, payload.calories)
        if updated is None:
            raise HTTPException(
                status_code=422,
                detail="Calories must be zero or more",
            )
        return _entry_payload(updated)

    @app.delete("/entries/{entry_id}")
    async def delete_entry(entry_id: str, request: Request) -> dict[str, bool]:
        """Remove a logged entry."""
        state_container: AppContainer = request.app.state.container
        return {"removed": state_container.entry_store.remove(entry_id)}

    @app.get("/stats/today")
    async def stats_today(request: Request) -> dict[str, object]:
        """Return today's totals."""
        state_container: AppContainer = request.app.state.container
        return _totals_payload(state_container.stats_service.get_today())

    @app.get("/stats/week")
    async def stats_week(request: Request) -> dict[str, object]:
        """Return the last seven days with averages."""
        state_container: AppContainer = request.app.state.container
        return _period_payload(state_container.stats_service.get_week())

    @app.get("/dashboard")
    async def dashboard(request: Request) -> dict[str, object]:
        """Return today's dashboard snapshot."""
        state_container: AppContainer = request.app.state.container
        return _dashboard_payload(state_container.dashboard_service.snapshot())

    @app.get("/advice")
    async def advice(request: Request) -> dict[str, str]:
        """Return coaching advice for today."""
        state_container: AppContainer = request.app.state.container
        return {"advice": await state_container.dashboard_service.advice()}

    @app.get("/goals")
    async def get_goals(request: Request) -> dict[str, int]:
        """Return the current goals."""
        state_container: AppContainer = request.app.state.container
        return _goals_payload(state_container.goal_tracker.goals)

    @app.put("/goals")
    async def update_goals(
        payload: GoalsUpdateRequest, request: Request
    ) -> dict[str, int]:
        """Apply goal changes; non-positive values are ignored."""
        state_container: AppContainer = request.app.state.container
        tracker = state_container.goal_tracker
        if payload.daily_calorie_goal is not None:
            tracker.set_calorie_goal(payload.daily_calorie_goal)
        if payload.daily_protein_goal is not None:
            tracker.set_protein_goal(payload.daily_protein_goal)
        if payload.hydration_goal is not None:
            tracker.set_hydration_goal(payload.hydration_goal)
        return _goals_payload(tracker.goals)

    @app.post("/water")
    async def adjust_water(
        payload: WaterAdjustRequest, request: Request
    ) -> dict[str, int]:
        """Add or remove glasses of water for today."""
        state_container: AppContainer = request.app.state.container
        return {"glasses": state_container.goal_tracker.adjust_water(payload.delta)}

    @app.get("/bmi")
    async def bmi(height_cm: float, weight_kg: float) -> dict[str, object]:
        """Return BMI with category and plan."""
        value = calculate_bmi(height_cm, weight_kg)
        if value is None:
            raise HTTPException(
                status_code=422,
                detail="Height and weight must be positive",
            )
        return {
            "bmi": value,
            "category": asdict(bmi_category(value)),
            "plan": asdict(bmi_plan(value)),
        }

    @app.get("/preferences/theme")
    async def get_theme(request: Request) -> dict[str, bool]:
        """Return the theme preference."""
        state_container: AppContainer = request.app.state.container
        return {"dark_mode": state_container.preferences_service.is_dark_mode()}

    @app.put("/preferences/theme")
    async def set_theme(payload: ThemeRequest, request: Request) -> dict[str, bool]:
        """Update the theme preference."""
        state_container: AppContainer = request.app.state.container
        state_container.preferences_service.set_dark_mode(payload.dark_mode)
        return {"dark_mode": payload.dark_mode}

    return app


@contextmanager
def _capture_errors() -> Iterator[None]:
    """Translate capture flow errors into HTTP errors."""
    try:
        yield
    except CaptureNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)
        ) from exc
    except (CaptureBusyError, StaleResultError) as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail=str(exc)
        ) from exc


def _macros_payload(macros: Macros) -> dict[str, int]:
    return {"protein": macros.protein, "carbs": macros.carbs, "fat": macros.fat}


def _entry_payload(entry: FoodEntry) -> dict[str, object]:
    return {
        "id": entry.id,
        "timestamp": entry.timestamp,
        "food_name": entry.food_name,
        "calories": entry.calories,
        "macros": _macros_payload(entry.macros),
        "ingredients": list(entry.ingredients),
        "health_tip": entry.health_tip,
        "confidence_score": entry.confidence_score,
        "image_url": entry.image_url,
    }


def _capture_payload(snapshot: CaptureSnapshot) -> dict[str, object]:
    return {
        "token": str(snapshot.token),
        "status": snapshot.status,
        "revision": snapshot.revision,
        "food_name": snapshot.food_name,
        "calories": snapshot.calories,
        "macros": _macros_payload(snapshot.macros),
        "ingredients": list(snapshot.ingredients),
        "health_tip": snapshot.health_tip,
        "confidence_score": snapshot.confidence_score,
    }


def _totals_payload(totals: DailyTotals) -> dict[str, object]:
    return {
        "day": totals.day.isoformat(),
        "calories": totals.calories,
        "macros": _macros_payload(totals.macros),
        "count": totals.count,
    }


def _period_payload(summary: PeriodSummary) -> dict[str, object]:
    return {
        "daily": [_totals_payload(day) for day in summary.daily],
        "avg_calories": summary.avg_calories,
        "avg_protein_g": summary.avg_protein_g,
        "avg_fat_g": summary.avg_fat_g,
        "avg_carbs_g": summary.avg_carbs_g,
    }


def _goals_payload(goals: Goals) -> dict[str, int]:
    return {
        "daily_calorie_goal": goals.daily_calorie_goal,
        "daily_protein_goal": goals.daily_protein_goal,
        "hydration_goal": goals.hydration_goal,
    }


def _streak_payload(streak: StreakState) -> dict[str, object]:
    return {
        "count": streak.count,
        "last_active_date": (
            streak.last_active_date.isoformat() if streak.last_active_date else None
        ),
    }


def _dashboard_payload(snapshot: DashboardSnapshot) -> dict[str, object]:
    return {
        "totals": _totals_payload(snapshot.totals),
        "goals": _goals_payload(snapshot.goals),
        "targets": asdict(snapshot.targets),
        "progress": asdict(snapshot.progress),
        "water_glasses": snapshot.water_glasses,
        "health_score": snapshot.health_score,
        "health_rating": snapshot.health_rating,
        "streak": _streak_payload(snapshot.streak),
        "daily_tip": snapshot.daily_tip,
        "recent": [asdict(point) for point in snapshot.recent],
    }
