"""Advisory suggestion models.

Suggestions are the only "errors" the pure core surfaces: a
``validation_error`` suggestion is domain output, not an exception.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class SuggestionType(str, Enum):
    """Kind of advisory suggestion."""
    MISSING_DEDUCTION = "missing_deduction"
    VALIDATION_ERROR = "validation_error"
    OPTIMIZATION = "optimization"
    WARNING = "warning"
    INFO = "info"


class SuggestionPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Sort key: high first."""
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {
    SuggestionPriority.HIGH: 0,
    SuggestionPriority.MEDIUM: 1,
    SuggestionPriority.LOW: 2,
}


class TaxSuggestion(BaseModel):
    """One suggestion shown to the user while reviewing a filing.

    Attributes:
        type: Kind of suggestion
        priority: Display priority
        title: Short heading; also the deduplication key across documents
        description: Full message, may span several lines
        affected_fields: Filing paths the suggestion concerns (e.g. "income.t4Slips")
        action_label: Optional call-to-action text
        action_route: Optional wizard route for the action
        estimated_impact: Optional estimated tax effect in dollars
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    id: str = Field(default_factory=lambda: str(uuid4()))
    type: SuggestionType
    priority: SuggestionPriority
    title: str
    description: str
    affected_fields: list[str] = Field(default_factory=list)
    action_label: Optional[str] = None
    action_route: Optional[str] = None
    estimated_impact: Optional[Decimal] = None

    @property
    def is_validation_error(self) -> bool:
        return self.type == SuggestionType.VALIDATION_ERROR


class CrossCheckResult(BaseModel):
    """Outcome of cross-checking one extracted document against a filing.

    ``matches`` is reserved and currently always empty.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    is_valid: bool = True
    discrepancies: list[TaxSuggestion] = Field(default_factory=list)
    matches: list[TaxSuggestion] = Field(default_factory=list)


def sort_by_priority(suggestions: list[TaxSuggestion]) -> list[TaxSuggestion]:
    """Order high, medium, low; stable within a tier."""
    return sorted(suggestions, key=lambda s: s.priority.rank)


def dedupe_by_title(suggestions: list[TaxSuggestion]) -> list[TaxSuggestion]:
    """Keep the first suggestion for each title."""
    seen = set()
    unique = []
    for suggestion in suggestions:
        if suggestion.title in seen:
            continue
        seen.add(suggestion.title)
        unique.append(suggestion)
    return unique
