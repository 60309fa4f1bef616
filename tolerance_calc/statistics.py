"""Contribution and Pareto analysis for stack-up results."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DimensionContribution:
    """Share of the closing-dimension variation owed to one dimension.

    Attributes:
        dimension_id: Identifier of the contributing dimension.
        name: Its name, for reports.
        percent_contribution: Share of the total, 0-100.
        variance_contribution: The weight the share was computed from
            (squared tolerance term; squared linear term for worst-case).
    """
    dimension_id: str
    name: str
    percent_contribution: float
    variance_contribution: float

    def to_dict(self) -> dict:
        return {
            "dimension_id": self.dimension_id,
            "name": self.name,
            "percent_contribution": self.percent_contribution,
            "variance_contribution": self.variance_contribution,
        }


def percent_contribution(weights: list[float]) -> list[float]:
    """Normalise non-negative weights to percentages that sum to 100.

    All-zero weights give 0 % for every entry.
    """
    total = sum(weights)
    if total <= 0:
        return [0.0 for _ in weights]
    return [w / total * 100.0 for w in weights]


@dataclass(frozen=True)
class ParetoEntry:
    name: str
    dimension_id: str
    percent: float
    cumulative_percent: float


def pareto(contributions: list[DimensionContribution]) -> list[ParetoEntry]:
    """Contributions sorted largest first, with running cumulative share.

    Ties keep their original loop order.
    """
    ranked = sorted(contributions, key=lambda c: c.percent_contribution, reverse=True)
    entries = []
    running = 0.0
    for c in ranked:
        running += c.percent_contribution
        entries.append(ParetoEntry(
            name=c.name,
            dimension_id=c.dimension_id,
            percent=c.percent_contribution,
            cumulative_percent=running,
        ))
    return entries
