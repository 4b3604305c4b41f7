"""Venue selection strategies."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

import structlog

from liquidity_desk.constants import (
    SELECTION_DIRECTIONAL_BONUS,
    SELECTION_LIQUIDITY_CAP,
    SELECTION_LIQUIDITY_UNIT,
    SELECTION_QUALITY_WEIGHT,
)

if TYPE_CHECKING:
    from collections.abc import Mapping
    from decimal import Decimal

    from liquidity_desk.analysis.metrics import VenueMetrics
    from liquidity_desk.execution.models import LiquidityOperation
    from liquidity_desk.venues.models import VenueId

logger = structlog.get_logger()


class SelectionStrategy(Protocol):
    """Pick the single best venue for an operation, or None when nothing is eligible."""

    def select(
        self, metrics: Mapping[VenueId, VenueMetrics], operation: LiquidityOperation
    ) -> VenueId | None: ...


def is_eligible(metrics: VenueMetrics) -> bool:
    """A venue can take an operation only when it is up, quoting a price and trading on it."""
    return (
        metrics.available
        and metrics.trading_enabled
        and metrics.price is not None
        and metrics.price > 0
    )


class DefaultSelectionStrategy:
    """
    Weighted scoring: half the quality score, plus liquidity (1 point per 1M, capped at 30),
    plus a fixed directional bonus.

    The directional bonus is applied to buys and sells alike and does not compare prices
    across venues. A price-aware strategy can replace this one without touching the manager.
    Ties go to the venue that appears first in the metrics mapping.
    """

    def score(self, metrics: VenueMetrics, operation: LiquidityOperation) -> Decimal:
        liquidity_points = min(
            metrics.liquidity / SELECTION_LIQUIDITY_UNIT, SELECTION_LIQUIDITY_CAP
        )
        return (
            metrics.quality_score * SELECTION_QUALITY_WEIGHT
            + liquidity_points
            + self._directional_bonus(metrics, operation)
        )

    def _directional_bonus(self, metrics: VenueMetrics, operation: LiquidityOperation) -> Decimal:
        # TODO: compare metrics.price against the other candidates once venue prices are
        # trusted enough to favour the cheapest venue for buys and the richest for sells.
        return SELECTION_DIRECTIONAL_BONUS

    def select(
        self, metrics: Mapping[VenueId, VenueMetrics], operation: LiquidityOperation
    ) -> VenueId | None:
        candidates = [m for m in metrics.values() if is_eligible(m)]
        if not candidates:
            logger.info("venue_selection_no_candidates", venues=len(metrics))
            return None
        if len(candidates) == 1:
            return candidates[0].venue

        best = candidates[0]
        best_score = self.score(best, operation)
        for candidate in candidates[1:]:
            candidate_score = self.score(candidate, operation)
            if candidate_score > best_score:
                best, best_score = candidate, candidate_score

        logger.debug(
            "venue_selected",
            venue=best.venue.value,
            score=str(best_score),
            candidates=len(candidates),
        )
        return best.venue
