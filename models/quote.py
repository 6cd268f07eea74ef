"""Quote models for the Yannova API.

Pydantic models for price estimate requests, calculated quotes and the
quote records stored in Supabase.
"""

from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field


# =============================================================================
# ENUMS
# =============================================================================


class ProjectType(str, Enum):
    """Project categories with their own rate tables.

    OTHER is the explicit arm for any category not in the tables; it prices
    with the default rate, duration and breakdown.
    """

    ISOLATIEWERKEN = "isolatiewerken"
    RENOVATIEWERKEN = "renovatiewerken"
    PLATEDAKKEN = "platedakken"
    RAMEN_DEUREN = "ramen-deuren"
    TUINAANLEG = "tuinaanleg"
    OTHER = "other"

    @classmethod
    def parse(cls, value: Optional[str]) -> "ProjectType":
        """Map a raw category string to a member, OTHER when unrecognized."""
        try:
            return cls(value)
        except ValueError:
            return cls.OTHER

    @classmethod
    def known(cls) -> List["ProjectType"]:
        """Categories that have dedicated rate tables."""
        return [member for member in cls if member is not cls.OTHER]


class Complexity(str, Enum):
    """Coarse labor difficulty tier."""

    SIMPLE = "simple"
    MEDIUM = "medium"
    COMPLEX = "complex"
    OTHER = "other"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Complexity":
        try:
            return cls(value)
        except ValueError:
            return cls.OTHER


class Urgency(str, Enum):
    """Rush pricing tier."""

    NORMAL = "normal"
    URGENT = "urgent"
    ASAP = "asap"
    OTHER = "other"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Urgency":
        try:
            return cls(value)
        except ValueError:
            return cls.OTHER


class QuoteStatus(str, Enum):
    """Lifecycle status of a stored quote."""

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# =============================================================================
# CALCULATION MODELS
# =============================================================================


class ProjectRequest(BaseModel):
    """Input for a single quote calculation."""

    project_type: str = Field(
        alias="projectType",
        description="Project category, e.g. 'isolatiewerken'"
    )
    size: float = Field(description="Project size in m²")
    complexity: Optional[str] = Field(default=None, description="simple | medium | complex")
    location: Optional[str] = Field(default=None, description="Free text location")
    urgency: Optional[str] = Field(default=None, description="normal | urgent | asap")

    class Config:
        populate_by_name = True
        frozen = True


class BreakdownItem(BaseModel):
    """One materials line item of a quote."""

    item: str
    cost: int


class QuoteResult(BaseModel):
    """Calculated price estimate.

    Inputs are echoed as received, whatever their JSON type; monetary values
    are whole currency units.
    """

    project_type: Any = Field(alias="projectType")
    size: Union[int, float]
    complexity: Any = None
    location: Any = None
    urgency: Any = None
    total_cost: int = Field(alias="totalCost")
    materials_cost: int = Field(alias="materialsCost")
    labor_cost: int = Field(alias="laborCost")
    duration: int = Field(description="Estimated duration in working days")
    breakdown: List[BreakdownItem] = Field(default_factory=list)
    valid_until: date = Field(alias="validUntil")

    class Config:
        populate_by_name = True

    def to_response_dict(self) -> Dict[str, Any]:
        """Convert to the camelCase JSON shape returned by the API."""
        return self.model_dump(by_alias=True, mode="json")


# =============================================================================
# STORED QUOTE RECORD
# =============================================================================


class QuoteRecord(BaseModel):
    """Quote row from the Supabase `quotes` table, in API shape."""

    quote_id: str = Field(alias="id")
    klant_naam: Optional[str] = Field(default=None, alias="klantNaam")
    email: Optional[str] = None
    telefoon: Optional[str] = None
    project_type: Optional[str] = Field(default=None, alias="projectType")
    size: Optional[float] = None
    complexity: Optional[str] = None
    urgency: Optional[str] = None
    location: Optional[str] = None
    opmerkingen: Optional[str] = None
    status: str = QuoteStatus.PENDING.value
    estimated_value: Optional[float] = Field(default=None, alias="estimatedValue")
    final_price: Optional[float] = Field(default=None, alias="finalPrice")
    quote_details: Optional[Dict[str, Any]] = Field(default=None, alias="quoteDetails")
    created_at: Optional[datetime] = Field(default=None, alias="timestamp")
    valid_until: Optional[datetime] = Field(default=None, alias="validUntil")
    admin_notes: Optional[str] = Field(default=None, alias="adminNotes")
    assigned_to: Optional[str] = Field(default=None, alias="assignedTo")
    contact_attempts: Optional[int] = Field(default=None, alias="contactAttempts")
    last_contact_attempt: Optional[datetime] = Field(default=None, alias="lastContactAttempt")

    class Config:
        populate_by_name = True

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "QuoteRecord":
        """Build from a snake_case database row.

        Unknown columns (internal id, ip address, ...) are dropped.
        """
        fields = set(cls.model_fields)
        return cls.model_validate({k: v for k, v in row.items() if k in fields})

    def to_response_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")
