"""Data models for one-dimensional tolerance stack-up analysis."""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from tolerance_calc.results import Unit

DEFAULT_PROCESS_CAPABILITY = 1.33


class StackupSign(Enum):
    """Whether increasing a dimension grows or shrinks the closing gap."""
    POSITIVE = "positive"
    NEGATIVE = "negative"

    @property
    def multiplier(self) -> int:
        return 1 if self is StackupSign.POSITIVE else -1


class AnalysisMethod(Enum):
    """Tolerance accumulation method."""
    WORST_CASE = "worst-case"
    RSS = "rss"
    SIX_SIGMA = "six-sigma"

    @classmethod
    def parse(cls, value: str) -> AnalysisMethod:
        key = value.lower().strip().replace("_", "-")
        aliases = {"wc": "worst-case", "6sigma": "six-sigma", "six-sigma": "six-sigma"}
        return cls(aliases.get(key, key))


class PositiveDirection(Enum):
    """Reference direction for the positive sign convention."""
    LEFT_TO_RIGHT = "left-to-right"
    RIGHT_TO_LEFT = "right-to-left"
    BOTTOM_TO_TOP = "bottom-to-top"
    TOP_TO_BOTTOM = "top-to-bottom"


@dataclass
class StackupDimension:
    """A single dimension in the stack-up loop.

    Attributes:
        name: Descriptive name.
        nominal: Drawing nominal.
        tolerance_plus: Upper tolerance (positive value).
        tolerance_minus: Lower tolerance (positive value, will be subtracted).
        sign: POSITIVE if the dimension adds to the gap, NEGATIVE if it subtracts.
        sensitivity_coefficient: Multiplier for non 1:1 geometric relationships.
        process_capability: Cp of the producing process, used by the
            six-sigma method. None means DEFAULT_PROCESS_CAPABILITY.
        id: Stable identifier.
    """
    name: str
    nominal: float
    tolerance_plus: float
    tolerance_minus: float
    sign: StackupSign = StackupSign.POSITIVE
    sensitivity_coefficient: float = 1.0
    process_capability: Optional[float] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    description: str = ""
    source_drawing: str = ""
    source_revision: str = ""

    @property
    def effective_process_capability(self) -> float:
        if self.process_capability is None:
            return DEFAULT_PROCESS_CAPABILITY
        return self.process_capability

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "nominal": self.nominal,
            "tolerance_plus": self.tolerance_plus,
            "tolerance_minus": self.tolerance_minus,
            "sign": self.sign.value,
            "sensitivity_coefficient": self.sensitivity_coefficient,
            "process_capability": self.process_capability,
            "description": self.description,
            "source_drawing": self.source_drawing,
            "source_revision": self.source_revision,
        }

    @classmethod
    def from_dict(cls, d: dict) -> StackupDimension:
        kwargs = {}
        if d.get("id"):
            kwargs["id"] = str(d["id"])
        return cls(
            name=d["name"],
            nominal=d["nominal"],
            tolerance_plus=d.get("tolerance_plus", 0.0),
            tolerance_minus=d.get("tolerance_minus", 0.0),
            sign=StackupSign(d.get("sign", "positive")),
            sensitivity_coefficient=d.get("sensitivity_coefficient", 1.0),
            process_capability=d.get("process_capability"),
            description=d.get("description", ""),
            source_drawing=d.get("source_drawing", ""),
            source_revision=d.get("source_revision", ""),
            **kwargs,
        )


@dataclass
class AcceptanceCriteria:
    """Limits the closing dimension must respect. Either bound may be open."""
    minimum: Optional[float] = None
    maximum: Optional[float] = None

    def to_dict(self) -> dict:
        return {"minimum": self.minimum, "maximum": self.maximum}

    @classmethod
    def from_dict(cls, d: dict) -> AcceptanceCriteria:
        return cls(minimum=d.get("minimum"), maximum=d.get("maximum"))


@dataclass
class StackupAnalysis:
    """A complete stack-up definition.

    Attributes:
        name: Descriptive name.
        dimensions: Ordered dimensions in the loop.
        acceptance_criteria: Pass/fail limits on the closing dimension.
        analysis_method: Accumulation method.
        unit: Unit of all dimensions.
        measurement_objective: What is being measured (e.g. "bearing clearance").
        positive_direction: Reference direction for the sign convention.
        description: Optional longer description.
    """
    name: str
    dimensions: list[StackupDimension] = field(default_factory=list)
    acceptance_criteria: AcceptanceCriteria = field(default_factory=AcceptanceCriteria)
    analysis_method: AnalysisMethod = AnalysisMethod.WORST_CASE
    unit: Unit = Unit.MM
    measurement_objective: str = ""
    positive_direction: PositiveDirection = PositiveDirection.LEFT_TO_RIGHT
    description: str = ""

    def add(self, dimension: StackupDimension) -> None:
        """Append a dimension to the loop."""
        self.dimensions.append(dimension)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "measurement_objective": self.measurement_objective,
            "positive_direction": self.positive_direction.value,
            "analysis_method": self.analysis_method.value,
            "unit": self.unit.value,
            "acceptance_criteria": self.acceptance_criteria.to_dict(),
            "dimensions": [d.to_dict() for d in self.dimensions],
        }

    @classmethod
    def from_dict(cls, data: dict) -> StackupAnalysis:
        analysis = cls(
            name=data["name"],
            acceptance_criteria=AcceptanceCriteria.from_dict(data.get("acceptance_criteria", {})),
            analysis_method=AnalysisMethod.parse(data.get("analysis_method", "worst-case")),
            unit=Unit(data.get("unit", "mm")),
            measurement_objective=data.get("measurement_objective", ""),
            positive_direction=PositiveDirection(data.get("positive_direction", "left-to-right")),
            description=data.get("description", ""),
        )
        for d in data.get("dimensions", []):
            analysis.add(StackupDimension.from_dict(d))
        return analysis

    def save(self, path: str) -> None:
        """Save the analysis definition to a JSON file."""
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path: str) -> StackupAnalysis:
        """Load an analysis definition from a JSON file."""
        with open(path) as f:
            return cls.from_dict(json.load(f))
