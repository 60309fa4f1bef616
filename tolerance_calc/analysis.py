"""Tolerance stack-up engine supporting Worst-Case, RSS, and Six Sigma.

Asymmetric tolerances are handled by shifting the drawing nominal to the
centre of each tolerance zone (mean shift) and stacking the symmetric
half-widths about that centre.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Optional

from tolerance_calc.models import (
    AcceptanceCriteria, AnalysisMethod, StackupAnalysis, StackupDimension, StackupSign,
)
from tolerance_calc.results import CalculatorError, ErrorCode, Unit
from tolerance_calc.rounding import round_half_up
from tolerance_calc.statistics import DimensionContribution, percent_contribution

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AcceptanceResult:
    """Outcome of an acceptance check; margins are negative when violated."""
    passes: bool
    margin_to_minimum: Optional[float] = None
    margin_to_maximum: Optional[float] = None


@dataclass(frozen=True)
class StackupResult:
    """Results from a stack-up calculation.

    Attributes:
        method: Accumulation method used.
        nominal_result: Signed sum of drawing nominals.
        mean_shift: Offset of the statistical centre from nominal_result.
        total_tolerance: Symmetric half-width about the centre.
        minimum_value: Centre minus total tolerance.
        maximum_value: Centre plus total tolerance.
        contributions: Per-dimension shares, in loop order.
        passes_acceptance_criteria: True if both configured bounds hold.
        margin_to_minimum: minimum_value - criteria.minimum, if bounded.
        margin_to_maximum: criteria.maximum - maximum_value, if bounded.
        unit: Unit of all values.
    """
    method: AnalysisMethod
    nominal_result: float
    mean_shift: float
    total_tolerance: float
    minimum_value: float
    maximum_value: float
    contributions: tuple[DimensionContribution, ...] = field(default_factory=tuple)
    passes_acceptance_criteria: bool = True
    margin_to_minimum: Optional[float] = None
    margin_to_maximum: Optional[float] = None
    unit: Unit = Unit.MM

    @property
    def centered_nominal(self) -> float:
        return self.nominal_result + self.mean_shift

    def summary(self) -> str:
        u = self.unit.value
        lines = [
            f"=== {self.method.value} stack-up ===",
            f"  Nominal result:   {self.nominal_result:+.6f} {u}",
            f"  Mean shift:       {self.mean_shift:+.6f} {u}",
            f"  Total tolerance:  ±{self.total_tolerance:.6f} {u}",
            f"  Result range:     [{self.minimum_value:+.6f}, {self.maximum_value:+.6f}]",
        ]
        if self.margin_to_minimum is not None:
            lines.append(f"  Margin to min:    {self.margin_to_minimum:+.6f}")
        if self.margin_to_maximum is not None:
            lines.append(f"  Margin to max:    {self.margin_to_maximum:+.6f}")
        lines.append(f"  Acceptance:       {'PASS' if self.passes_acceptance_criteria else 'FAIL'}")
        if self.contributions:
            lines.append("  Contribution:")
            for c in self.contributions:
                lines.append(f"    {c.name:30s}  {c.percent_contribution:6.2f}%")
        return "\n".join(lines)

    def to_dict(self) -> dict:
        return {
            "method": self.method.value,
            "unit": self.unit.value,
            "nominal_result": self.nominal_result,
            "mean_shift": self.mean_shift,
            "total_tolerance": self.total_tolerance,
            "minimum_value": self.minimum_value,
            "maximum_value": self.maximum_value,
            "passes_acceptance_criteria": self.passes_acceptance_criteria,
            "margin_to_minimum": self.margin_to_minimum,
            "margin_to_maximum": self.margin_to_maximum,
            "contributions": [c.to_dict() for c in self.contributions],
        }


# ---------------------------------------------------------------------------
# Nominal and mean shift
# ---------------------------------------------------------------------------

def bilateral_tolerance(dim: StackupDimension) -> float:
    """Symmetric half-width equivalent of a plus/minus tolerance."""
    return (dim.tolerance_plus + dim.tolerance_minus) / 2.0


def calculate_nominal(dimensions: list[StackupDimension]) -> float:
    """Sum of sign * nominal * sensitivity over the loop."""
    return sum(d.sign.multiplier * d.nominal * d.sensitivity_coefficient for d in dimensions)


def calculate_mean_shift(dimensions: list[StackupDimension]) -> float:
    """Offset of the statistical centre caused by asymmetric tolerances.

    50 +0.025/-0 is centred at 50.0125 (shift +0.0125); the shift takes the
    dimension's sign, so a NEGATIVE dimension contributes its shift inverted.
    """
    return sum(
        d.sign.multiplier * (d.tolerance_plus - d.tolerance_minus) / 2.0 * d.sensitivity_coefficient
        for d in dimensions
    )


# ---------------------------------------------------------------------------
# Total tolerance by method
# ---------------------------------------------------------------------------

def calculate_worst_case(dimensions: list[StackupDimension]) -> float:
    """T_wc = sum |t_i * S_i|. Sign independent."""
    return sum(abs(bilateral_tolerance(d) * d.sensitivity_coefficient) for d in dimensions)


def calculate_rss(dimensions: list[StackupDimension]) -> float:
    """T_rss = sqrt(sum (t_i * S_i)^2)."""
    return math.sqrt(sum((bilateral_tolerance(d) * d.sensitivity_coefficient) ** 2
                         for d in dimensions))


def _six_sigma_std(dim: StackupDimension) -> float:
    # sigma_i = t_i * S_i / (3 * Cp_i)
    return bilateral_tolerance(dim) * dim.sensitivity_coefficient / (
        3.0 * dim.effective_process_capability)


def calculate_six_sigma(dimensions: list[StackupDimension]) -> float:
    """T_6s = 3 * sqrt(sum sigma_i^2), sigma_i from each process capability."""
    return 3.0 * math.sqrt(sum(_six_sigma_std(d) ** 2 for d in dimensions))


def calculate_total_tolerance(
    dimensions: list[StackupDimension],
    method: AnalysisMethod,
) -> float:
    if method is AnalysisMethod.WORST_CASE:
        return calculate_worst_case(dimensions)
    if method is AnalysisMethod.RSS:
        return calculate_rss(dimensions)
    if method is AnalysisMethod.SIX_SIGMA:
        return calculate_six_sigma(dimensions)
    raise ValueError(f"Unknown analysis method: {method!r}")


# ---------------------------------------------------------------------------
# Contribution analysis
# ---------------------------------------------------------------------------

def calculate_contributions(
    dimensions: list[StackupDimension],
    method: AnalysisMethod,
) -> list[DimensionContribution]:
    """Percent contribution of each dimension, in loop order.

    Worst-case shares are linear in |t_i * S_i| since worst-case tolerances
    add linearly; RSS shares are (t_i * S_i)^2 and six-sigma shares are
    sigma_i^2.
    """
    if method is AnalysisMethod.WORST_CASE:
        linear = [abs(bilateral_tolerance(d) * d.sensitivity_coefficient) for d in dimensions]
        weights = linear
        variances = [v ** 2 for v in linear]
    elif method is AnalysisMethod.RSS:
        variances = [(bilateral_tolerance(d) * d.sensitivity_coefficient) ** 2 for d in dimensions]
        weights = variances
    elif method is AnalysisMethod.SIX_SIGMA:
        variances = [_six_sigma_std(d) ** 2 for d in dimensions]
        weights = variances
    else:
        raise ValueError(f"Unknown analysis method: {method!r}")

    pcts = percent_contribution(weights)
    return [
        DimensionContribution(
            dimension_id=d.id,
            name=d.name,
            percent_contribution=pct,
            variance_contribution=var,
        )
        for d, pct, var in zip(dimensions, pcts, variances)
    ]


# ---------------------------------------------------------------------------
# Acceptance
# ---------------------------------------------------------------------------

def check_acceptance(
    minimum_value: float,
    maximum_value: float,
    criteria: AcceptanceCriteria,
) -> AcceptanceResult:
    """Compare a result range to the acceptance limits.

    Passes iff (no minimum or minimum_value >= minimum) and (no maximum or
    maximum_value <= maximum).
    """
    passes = True
    margin_min = None
    margin_max = None

    if criteria.minimum is not None:
        margin_min = minimum_value - criteria.minimum
        if minimum_value < criteria.minimum:
            passes = False

    if criteria.maximum is not None:
        margin_max = criteria.maximum - maximum_value
        if maximum_value > criteria.maximum:
            passes = False

    return AcceptanceResult(passes=passes, margin_to_minimum=margin_min,
                            margin_to_maximum=margin_max)


# ---------------------------------------------------------------------------
# Full calculation
# ---------------------------------------------------------------------------

def calculate_stackup(
    analysis: StackupAnalysis,
    method: Optional[AnalysisMethod] = None,
) -> StackupResult:
    """Calculate a stack-up with the analysis' method (or ``method``).

    Raises:
        ValueError: If the analysis fails ``validate_stackup_input``.
    """
    check = validate_stackup_input(analysis)
    if not check.valid:
        raise ValueError("; ".join(e.message for e in check.errors))

    method = method or analysis.analysis_method
    dims = analysis.dimensions

    nominal = calculate_nominal(dims)
    shift = calculate_mean_shift(dims)
    center = nominal + shift
    total = calculate_total_tolerance(dims, method)

    maximum = center + total
    minimum = center - total

    acceptance = check_acceptance(minimum, maximum, analysis.acceptance_criteria)
    logger.debug("%s stack-up %r: nominal=%g shift=%g total=%g passes=%s",
                 method.value, analysis.name, nominal, shift, total, acceptance.passes)

    return StackupResult(
        method=method,
        nominal_result=nominal,
        mean_shift=shift,
        total_tolerance=total,
        minimum_value=minimum,
        maximum_value=maximum,
        contributions=tuple(calculate_contributions(dims, method)),
        passes_acceptance_criteria=acceptance.passes,
        margin_to_minimum=acceptance.margin_to_minimum,
        margin_to_maximum=acceptance.margin_to_maximum,
        unit=analysis.unit,
    )


def compare_all_methods(analysis: StackupAnalysis) -> dict[AnalysisMethod, StackupResult]:
    """Run every method on the same analysis, side by side."""
    return {m: calculate_stackup(analysis, method=m) for m in AnalysisMethod}


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StackupValidationResult:
    valid: bool
    errors: tuple[CalculatorError, ...] = ()
    warnings: tuple[str, ...] = ()


def validate_stackup_input(analysis: StackupAnalysis) -> StackupValidationResult:
    """Check a stack-up definition before calculating it.

    Errors make the analysis unusable; warnings flag likely modelling
    mistakes (zero tolerance, zero sensitivity, incapable process,
    single-signed loop).
    """
    errors: list[CalculatorError] = []
    warnings: list[str] = []
    dims = analysis.dimensions

    if len(dims) < 2:
        errors.append(CalculatorError(
            ErrorCode.INSUFFICIENT_DIMENSIONS,
            "Stack-up requires at least 2 dimensions",
            "dimensions",
        ))

    for i, d in enumerate(dims):
        label = f'Dimension {i + 1} "{d.name}"'
        if d.tolerance_plus < 0 or d.tolerance_minus < 0:
            errors.append(CalculatorError(
                ErrorCode.INVALID_TOLERANCE,
                f"{label}: Tolerances must be non-negative",
                f"dimensions[{i}]",
            ))
        if d.process_capability is not None and d.process_capability <= 0:
            errors.append(CalculatorError(
                ErrorCode.INVALID_PROCESS_CAPABILITY,
                f"{label}: Process capability must be greater than zero",
                f"dimensions[{i}].process_capability",
            ))
        if d.tolerance_plus == 0 and d.tolerance_minus == 0:
            warnings.append(f"{label}: Zero tolerance (basic dimension)")
        if d.sensitivity_coefficient == 0:
            warnings.append(f"{label}: Zero sensitivity (no contribution)")
        if (analysis.analysis_method is AnalysisMethod.SIX_SIGMA
                and d.process_capability is not None
                and 0 < d.process_capability < 1.0):
            warnings.append(f"{label}: Cp < 1.0 indicates incapable process")

    signs = {d.sign for d in dims}
    if dims and (StackupSign.POSITIVE not in signs or StackupSign.NEGATIVE not in signs):
        warnings.append("All dimensions have same sign. Verify sign convention is correct.")

    if errors:
        logger.info("stack-up %r rejected: %s", analysis.name, [e.code.value for e in errors])

    return StackupValidationResult(valid=not errors, errors=tuple(errors),
                                   warnings=tuple(warnings))


def format_result(value: float, decimals: int, unit: Unit) -> str:
    """Rounded value with its unit, e.g. ``0.123 mm``."""
    return f"{round_half_up(value, decimals):.{decimals}f} {unit.value}"
