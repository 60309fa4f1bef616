"""Built-in example stack-ups and inspection records for demonstration."""

from tolerance_calc.models import (
    AcceptanceCriteria, AnalysisMethod, StackupAnalysis, StackupDimension, StackupSign,
)


def create_bearing_clearance_example(
    method: AnalysisMethod = AnalysisMethod.WORST_CASE,
) -> StackupAnalysis:
    """Radial clearance between a housing bore and a bearing outer ring.

    Dimension loop:
        +Housing bore   Ø50.000 +0.025/-0.000
        -Bearing OD     Ø50.000 +0.000/-0.013
        = Clearance (must not go negative)
    """
    analysis = StackupAnalysis(
        name="Bearing Clearance",
        description="Fit of a deep-groove bearing in its housing bore",
        measurement_objective="Diametral clearance between bore and bearing OD",
        acceptance_criteria=AcceptanceCriteria(minimum=0.0),
        analysis_method=method,
    )
    analysis.add(StackupDimension(
        name="Housing Bore",
        nominal=50.000,
        tolerance_plus=0.025,
        tolerance_minus=0.000,
        sign=StackupSign.POSITIVE,
        source_drawing="HSG-100",
    ))
    analysis.add(StackupDimension(
        name="Bearing OD",
        nominal=50.000,
        tolerance_plus=0.000,
        tolerance_minus=0.013,
        sign=StackupSign.NEGATIVE,
        source_drawing="Catalogue 6010",
    ))
    return analysis


def create_bolt_pattern_example(
    method: AnalysisMethod = AnalysisMethod.WORST_CASE,
) -> StackupAnalysis:
    """Radial misalignment of a bolt against its clearance hole.

    Both location errors push the bolt the same way, so both are positive
    and the allowed misalignment is capped at 0.5.
    """
    analysis = StackupAnalysis(
        name="Bolt Pattern Misalignment",
        measurement_objective="Bolt offset relative to clearance hole centre",
        acceptance_criteria=AcceptanceCriteria(maximum=0.5),
        analysis_method=method,
    )
    analysis.add(StackupDimension(
        name="Hole location (flange)",
        nominal=0.0,
        tolerance_plus=0.15,
        tolerance_minus=0.15,
    ))
    analysis.add(StackupDimension(
        name="Tapped hole location (base)",
        nominal=0.0,
        tolerance_plus=0.20,
        tolerance_minus=0.20,
    ))
    return analysis


def create_shaft_housing_example(
    method: AnalysisMethod = AnalysisMethod.RSS,
) -> StackupAnalysis:
    """Classic end-play stack of a shaft retained inside a housing.

    Dimension loop:
        +Housing length
        -Shaft length
        -Washer thickness
        -Retaining ring width
        = End play
    """
    analysis = StackupAnalysis(
        name="Shaft-Housing End Play",
        description="Gap between shaft end and housing inner wall",
        measurement_objective="Axial end play",
        acceptance_criteria=AcceptanceCriteria(minimum=0.1, maximum=2.0),
        analysis_method=method,
    )
    analysis.add(StackupDimension(
        name="Housing bore depth", nominal=50.000,
        tolerance_plus=0.100, tolerance_minus=0.100,
        sign=StackupSign.POSITIVE, process_capability=1.0,
    ))
    analysis.add(StackupDimension(
        name="Shaft length", nominal=45.000,
        tolerance_plus=0.050, tolerance_minus=0.050,
        sign=StackupSign.NEGATIVE, process_capability=1.67,
    ))
    analysis.add(StackupDimension(
        name="Washer thickness", nominal=2.000,
        tolerance_plus=0.025, tolerance_minus=0.025,
        sign=StackupSign.NEGATIVE,
    ))
    analysis.add(StackupDimension(
        name="Retaining ring width", nominal=1.500,
        tolerance_plus=0.030, tolerance_minus=0.030,
        sign=StackupSign.NEGATIVE,
    ))
    return analysis


def position_at_mmc_record() -> dict:
    """Inspection record for Ø0.2 (M) position on a Ø10.0 +0.2/-0 hole."""
    return {
        "characteristic": "position",
        "unit": "mm",
        "geometric_tolerance": 0.2,
        "material_condition": "mmc",
        "feature_type": "hole",
        "diametral_zone": True,
        "size_dimension": {
            "nominal": 10.0, "tolerance_plus": 0.2, "tolerance_minus": 0.0,
            "feature_type": "hole",
        },
        "true_position": {"basic_x": 25.0, "basic_y": 40.0},
        "measured": {"actual_x": 25.05, "actual_y": 40.05, "actual_size": 10.1},
    }


def flatness_record() -> dict:
    """Nine-point flatness survey of a 100 x 100 mounting face."""
    heights = [0.000, 0.004, 0.002, 0.003, 0.006, 0.001, -0.002, 0.003, 0.000]
    points = []
    for i, z in enumerate(heights):
        points.append({"x": (i % 3) * 50.0, "y": (i // 3) * 50.0, "z": z})
    return {
        "characteristic": "flatness",
        "unit": "mm",
        "tolerance": 0.01,
        "measured_points": points,
    }


STACK_EXAMPLES = {
    "bearing": create_bearing_clearance_example,
    "bolt-pattern": create_bolt_pattern_example,
    "shaft": create_shaft_housing_example,
}

RECORD_EXAMPLES = {
    "position": position_at_mmc_record,
    "flatness": flatness_record,
}
