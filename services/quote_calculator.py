"""Quote calculation for the Yannova API.

Deterministic price estimate for a renovation project:

- Cost: base rate per m² x complexity x urgency, split 40% materials / 60% labor
- Duration: base days per category x complexity x max(1, size / 100), rounded up
- Breakdown: materials cost allocated over category specific line items
- Validity: 30 days from issuance

Unknown categories, complexities and urgencies are priced with the OTHER
defaults instead of failing.
"""

import math
from datetime import date, datetime, timedelta, timezone
from typing import Dict, List, Optional, Tuple, Union

import structlog

from models.quote import (
    BreakdownItem,
    Complexity,
    ProjectRequest,
    ProjectType,
    QuoteResult,
    Urgency,
)

logger = structlog.get_logger()

Number = Union[int, float]


# =============================================================================
# RATE TABLES
# =============================================================================

BASE_RATES: Dict[ProjectType, float] = {
    ProjectType.ISOLATIEWERKEN: 45,
    ProjectType.RENOVATIEWERKEN: 60,
    ProjectType.PLATEDAKKEN: 55,
    ProjectType.RAMEN_DEUREN: 50,
    ProjectType.TUINAANLEG: 40,
    ProjectType.OTHER: 50,
}

COMPLEXITY_COST_MULTIPLIERS: Dict[Complexity, float] = {
    Complexity.SIMPLE: 1.0,
    Complexity.MEDIUM: 1.3,
    Complexity.COMPLEX: 1.6,
    Complexity.OTHER: 1.0,
}

URGENCY_MULTIPLIERS: Dict[Urgency, float] = {
    Urgency.NORMAL: 1.0,
    Urgency.URGENT: 1.2,
    Urgency.ASAP: 1.5,
    Urgency.OTHER: 1.0,
}

BASE_DURATIONS: Dict[ProjectType, int] = {
    ProjectType.ISOLATIEWERKEN: 1,
    ProjectType.RENOVATIEWERKEN: 4,
    ProjectType.PLATEDAKKEN: 2,
    ProjectType.RAMEN_DEUREN: 1,
    ProjectType.TUINAANLEG: 3,
    ProjectType.OTHER: 2,
}

COMPLEXITY_DURATION_MULTIPLIERS: Dict[Complexity, float] = {
    Complexity.SIMPLE: 1.0,
    Complexity.MEDIUM: 1.5,
    Complexity.COMPLEX: 2.0,
    Complexity.OTHER: 1.0,
}

# (line item, share of materials cost); shares sum to 1.0 per category
BREAKDOWN_SPLITS: Dict[ProjectType, List[Tuple[str, float]]] = {
    ProjectType.ISOLATIEWERKEN: [
        ("Isolatiemateriaal", 0.6),
        ("Afdichtingsmaterialen", 0.3),
        ("Overige materialen", 0.1),
    ],
    ProjectType.RENOVATIEWERKEN: [
        ("Bouwmateriaal", 0.5),
        ("Afwerkingsmaterialen", 0.3),
        ("Hardware en bevestigingsmaterialen", 0.2),
    ],
    ProjectType.PLATEDAKKEN: [
        ("Dakbedekking materiaal", 0.7),
        ("Isolatie en damprem", 0.2),
        ("Goten en afvoeren", 0.1),
    ],
    ProjectType.RAMEN_DEUREN: [
        ("Ramen/Deuren", 0.8),
        ("Kozijnen", 0.15),
        ("Hardware en bevestigingsmaterialen", 0.05),
    ],
    ProjectType.TUINAANLEG: [
        ("Planten en beplanting", 0.4),
        ("Grond en bemesting", 0.3),
        ("Bestrating en materialen", 0.3),
    ],
    ProjectType.OTHER: [
        ("Materialen", 0.7),
        ("Overige kosten", 0.3),
    ],
}

MATERIALS_SHARE = 0.4
LABOR_SHARE = 0.6
SIZE_DURATION_DIVISOR = 100
QUOTE_VALIDITY_DAYS = 30


# =============================================================================
# HELPERS
# =============================================================================


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves towards +infinity.

    Matches JavaScript's Math.round, which the published prices were
    calculated with; Python's round() would send 0.5 to the even neighbour.
    """
    return int(math.floor(value + 0.5))


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def valid_until_for(issued_at: datetime) -> date:
    """Last valid calendar date (UTC) of a quote issued at `issued_at`."""
    if issued_at.tzinfo is not None:
        issued_at = issued_at.astimezone(timezone.utc)
    return (issued_at + timedelta(days=QUOTE_VALIDITY_DAYS)).date()


# =============================================================================
# CALCULATION
# =============================================================================


def calculate_rate_per_m2(
    project_type: Optional[str],
    complexity: Optional[str],
    urgency: Optional[str],
) -> float:
    """Base rate for the category adjusted for complexity and urgency."""
    base_rate = BASE_RATES[ProjectType.parse(project_type)]
    complexity_multiplier = COMPLEXITY_COST_MULTIPLIERS[Complexity.parse(complexity)]
    urgency_multiplier = URGENCY_MULTIPLIERS[Urgency.parse(urgency)]
    return base_rate * complexity_multiplier * urgency_multiplier


def calculate_duration(
    project_type: Optional[str],
    size: Number,
    complexity: Optional[str],
) -> int:
    """Estimated duration in days, rounded up."""
    size_multiplier = max(1, size / SIZE_DURATION_DIVISOR)
    base_duration = BASE_DURATIONS[ProjectType.parse(project_type)]
    complexity_multiplier = COMPLEXITY_DURATION_MULTIPLIERS[Complexity.parse(complexity)]

    return math.ceil(base_duration * complexity_multiplier * size_multiplier)


def generate_breakdown(
    project_type: Optional[str],
    materials_cost: float,
    labor_cost: float,
) -> List[BreakdownItem]:
    """Allocate the materials cost over the category line items.

    Each item is rounded on its own, so the items may differ from the
    rounded materials total by a few units. Labor is not itemized.
    """
    split = BREAKDOWN_SPLITS[ProjectType.parse(project_type)]
    return [
        BreakdownItem(item=item, cost=round_half_up(materials_cost * share))
        for item, share in split
    ]


def calculate_quote(
    project_type: Optional[str],
    size: Number,
    complexity: Optional[str] = None,
    location: Optional[str] = None,
    urgency: Optional[str] = None,
    now: Optional[datetime] = None,
) -> QuoteResult:
    """Calculate a price estimate.

    Args:
        project_type: Project category; unknown values use the default rate.
        size: Project size in m². Not validated here.
        complexity: simple | medium | complex.
        location: Free text, echoed back.
        urgency: normal | urgent | asap.
        now: Issuance time, defaults to the current UTC time.

    Returns:
        QuoteResult with rounded costs, duration, breakdown and validity date.
    """
    rate_per_m2 = calculate_rate_per_m2(project_type, complexity, urgency)
    materials_cost = size * rate_per_m2 * MATERIALS_SHARE
    labor_cost = size * rate_per_m2 * LABOR_SHARE
    total_cost = materials_cost + labor_cost

    duration = calculate_duration(project_type, size, complexity)
    issued_at = now or _utcnow()

    if ProjectType.parse(project_type) is ProjectType.OTHER:
        logger.warning("quote_unknown_project_type", project_type=project_type)

    return QuoteResult(
        project_type=project_type,
        size=size,
        complexity=complexity,
        location=location,
        urgency=urgency,
        total_cost=round_half_up(total_cost),
        materials_cost=round_half_up(materials_cost),
        labor_cost=round_half_up(labor_cost),
        duration=duration,
        breakdown=generate_breakdown(project_type, materials_cost, labor_cost),
        valid_until=valid_until_for(issued_at),
    )


def calculate_quote_for_request(
    request: ProjectRequest,
    now: Optional[datetime] = None,
) -> QuoteResult:
    """Calculate a quote from a validated ProjectRequest."""
    return calculate_quote(
        project_type=request.project_type,
        size=request.size,
        complexity=request.complexity,
        location=request.location,
        urgency=request.urgency,
        now=now,
    )
