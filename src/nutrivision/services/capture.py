"""Capture flow: analyze a photo, edit the result, then commit it."""

import logging
from dataclasses import dataclass, field
from uuid import UUID, uuid4

from nutrivision.domain.analysis import FoodAnalysis
from nutrivision.domain.entries import FoodEntry, Macros
from nutrivision.services.analysis import AnalysisFailure, AnalysisGateway, to_data_url
from nutrivision.services.entries import EntryStore

logger = logging.getLogger(__name__)

ANALYZING = "ANALYZING"
READY = "READY"
RECALCULATING = "RECALCULATING"


class CaptureError(Exception):
    """Base error for capture flow misuse."""


class CaptureNotFoundError(CaptureError):
    """The token does not match the current capture."""


class CaptureBusyError(CaptureError):
    """An operation for this capture is already in progress."""


class StaleResultError(CaptureError):
    """A result arrived for a capture or edit that is no longer current."""


@dataclass(frozen=True)
class CaptureSnapshot:
    """Read-only view of the pending capture."""

    token: UUID
    status: str
    revision: int
    food_name: str
    calories: int
    macros: Macros
    ingredients: tuple[str, ...]
    health_tip: str
    confidence_score: int


@dataclass
class _PendingCapture:
    token: UUID
    image_bytes: bytes
    status: str = ANALYZING
    revision: int = 0
    food_name: str = ""
    calories: int = 0
    macros: Macros = field(default_factory=Macros)
    ingredients: list[str] = field(default_factory=list)
    health_tip: str = ""
    confidence_score: int = 0

    def apply_analysis(self, analysis: FoodAnalysis) -> None:
        self.food_name = analysis.food_name
        self.calories = analysis.calories
        self.macros = analysis.macros.to_domain()
        self.ingredients = list(analysis.ingredients)
        self.health_tip = analysis.health_tip
        self.confidence_score = analysis.confidence_score
        self.status = READY

    def snapshot(self) -> CaptureSnapshot:
        return CaptureSnapshot(
            token=self.token,
            status=self.status,
            revision=self.revision,
            food_name=self.food_name,
            calories=self.calories,
            macros=self.macros,
            ingredients=tuple(self.ingredients),
            health_tip=self.health_tip,
            confidence_score=self.confidence_score,
        )


@dataclass
class CaptureFlow:
    """Single foreground flow guarding against stale and re-entrant results."""

    gateway: AnalysisGateway
    store: EntryStore
    _pending: _PendingCapture | None = field(default=None, init=False, repr=False)

    def current(self) -> CaptureSnapshot | None:
        """Return the pending capture, if any."""
        return self._pending.snapshot() if self._pending else None

    async def start(self, image_bytes: bytes) -> CaptureSnapshot:
        """Analyze a new photo, superseding any pending capture."""
        pending = _PendingCapture(token=uuid4(), image_bytes=image_bytes)
        self._pending = pending
        try:
            analysis = await self.gateway.analyze(image_bytes)
        except AnalysisFailure:
            if self._pending is pending:
                self._pending = None
            raise
        if self._pending is not pending:
            logger.info("Discarding analysis for superseded capture %s", pending.token)
            raise StaleResultError("Capture was replaced before analysis finished")
        pending.apply_analysis(analysis)
        return pending.snapshot()

    def add_ingredient(self, token: UUID, name: str) -> CaptureSnapshot:
        """Append an ingredient; blank names are ignored."""
        pending = self._editable(token)
        cleaned = name.strip()
        if cleaned:
            pending.ingredients.append(cleaned)
            pending.revision += 1
        return pending.snapshot()

    def remove_ingredient(self, token: UUID, index: int) -> CaptureSnapshot:
        """Remove the ingredient at index; out-of-range indexes are ignored."""
        pending = self._editable(token)
        if 0 <= index < len(pending.ingredients):
            del pending.ingredients[index]
            pending.revision += 1
        return pending.snapshot()

    def edit_nutrition(
        self,
        token: UUID,
        calories: int | None = None,
        macros: Macros | None = None,
    ) -> CaptureSnapshot:
        """Manually override calories and macros before saving."""
        pending = self._editable(token)
        if calories is not None and calories >= 0:
            pending.calories = calories
            pending.revision += 1
        if macros is not None:
            pending.macros = macros
            pending.revision += 1
        return pending.snapshot()

    async def recalculate(self, token: UUID) -> CaptureSnapshot:
        """Recompute nutrition for the confirmed ingredients.

        Only one recalculation may run per capture. The result is applied only
        if the capture and its ingredient edits are unchanged when it arrives;
        on failure the previously edited values stay in place.
        """
        pending = self._require(token)
        if pending.status != READY:
            raise CaptureBusyError(f"Capture is {pending.status.lower()}")
        revision = pending.revision
        pending.status = RECALCULATING
        try:
            result = await self.gateway.recalculate(
                pending.food_name, pending.ingredients, pending.image_bytes
            )
        finally:
            pending.status = READY
        if self._pending is not pending or pending.revision != revision:
            logger.info("Discarding recalculation for stale capture %s", token)
            raise StaleResultError("Capture changed before recalculation finished")
        if result.calories is not None:
            pending.calories = result.calories
        if result.macros is not None:
            pending.macros = result.macros.to_domain()
        if result.health_tip:
            pending.health_tip = result.health_tip
        return pending.snapshot()

    def save(self, token: UUID) -> FoodEntry:
        """Commit the edited capture to the history log."""
        pending = self._require(token)
        if pending.status != READY:
            raise CaptureBusyError(f"Capture is {pending.status.lower()}")
        entry = self.store.create(
            food_name=pending.food_name,
            calories=pending.calories,
            macros=pending.macros,
            ingredients=pending.ingredients,
            health_tip=pending.health_tip,
            confidence_score=pending.confidence_score,
            image_url=to_data_url(pending.image_bytes),
        )
        self._pending = None
        logger.info("Saved capture %s as entry %s", token, entry.id)
        return entry

    def discard(self, token: UUID) -> None:
        """Drop the pending capture; late results for it will be ignored."""
        self._require(token)
        self._pending = None

    def _require(self, token: UUID) -> _PendingCapture:
        pending = self._pending
        if pending is None or pending.token != token:
            raise CaptureNotFoundError(f"No pending capture {token}")
        return pending

    def _editable(self, token: UUID) -> _PendingCapture:
        pending = self._require(token)
        if pending.status == ANALYZING:
            raise CaptureBusyError("Capture is still being analyzed")
        return pending
