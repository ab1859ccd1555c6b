"""Order compilation models."""
import math
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    model_validator,
)
from pydantic.alias_generators import to_camel

CANONICAL_COMPILER_VERSION = "canonical-v1"

# Largest quantity accepted for a single order line
MAX_QUANTITY = 99

UUID_PATTERN = (
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)
OPTION_PRICE_PATTERN = r"^-?\d+\.\d{2}$"


def _require_finite(value: float) -> float:
    if not math.isfinite(value):
        raise ValueError("Amount must be a finite number")
    return value


def _require_iso_timestamp(value: str) -> str:
    datetime.fromisoformat(value)
    return value


def _price_to_text(value: Any) -> Any:
    """Catalog prices arrive as Decimal (database) or float (YAML)."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (Decimal, int, float)):
        return str(value)
    return value


Guid = Annotated[str, Field(pattern=UUID_PATTERN)]
Money = Annotated[float, AfterValidator(_require_finite)]
CatalogPrice = Annotated[Optional[str], BeforeValidator(_price_to_text)]


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        validate_by_name=True,
        validate_by_alias=True,
        serialize_by_alias=True,
    )


class CompileStatus(str, Enum):
    """Outcome of compiling an order against a catalog."""

    READY_TO_EXECUTE = "ready_to_execute"
    NEEDS_USER_INPUT = "needs_user_input"
    UNFULFILLABLE = "unfulfillable"

    def __str__(self) -> str:
        return self.value


class IssueSeverity(str, Enum):
    """How a compilation issue affects the order."""

    NEEDS_USER_INPUT = "needs_user_input"  # guest can fix it with more input
    UNFULFILLABLE = "unfulfillable"  # structural, needs ops intervention

    def __str__(self) -> str:
        return self.value


class IssueCode(str, Enum):
    """Compilation issue codes."""

    INVALID_PAYLOAD = "invalid_payload"
    MENU_ITEM_NOT_FOUND = "menu_item_not_found"
    MODIFIER_GROUP_NOT_FOUND = "modifier_group_not_found"
    MODIFIER_OPTION_NOT_FOUND = "modifier_option_not_found"
    MODIFIER_OPTION_NOT_IN_GROUP = "modifier_option_not_in_group"
    INVALID_PRICE = "invalid_price"
    REQUIRED_MODIFIER_MISSING = "required_modifier_missing"
    SELECTION_COUNT_OUT_OF_RANGE = "selection_count_out_of_range"
    DUPLICATE_SELECTION = "duplicate_selection"
    MODIFIER_GROUP_MISCONFIGURED = "modifier_group_misconfigured"

    def __str__(self) -> str:
        return self.value


ISSUE_SEVERITY: Dict[IssueCode, IssueSeverity] = {
    IssueCode.INVALID_PAYLOAD: IssueSeverity.UNFULFILLABLE,
    IssueCode.MENU_ITEM_NOT_FOUND: IssueSeverity.UNFULFILLABLE,
    IssueCode.MODIFIER_GROUP_NOT_FOUND: IssueSeverity.UNFULFILLABLE,
    IssueCode.MODIFIER_OPTION_NOT_FOUND: IssueSeverity.UNFULFILLABLE,
    IssueCode.MODIFIER_OPTION_NOT_IN_GROUP: IssueSeverity.UNFULFILLABLE,
    IssueCode.INVALID_PRICE: IssueSeverity.UNFULFILLABLE,
    IssueCode.REQUIRED_MODIFIER_MISSING: IssueSeverity.NEEDS_USER_INPUT,
    IssueCode.SELECTION_COUNT_OUT_OF_RANGE: IssueSeverity.NEEDS_USER_INPUT,
    IssueCode.DUPLICATE_SELECTION: IssueSeverity.NEEDS_USER_INPUT,
    IssueCode.MODIFIER_GROUP_MISCONFIGURED: IssueSeverity.UNFULFILLABLE,
}


# Free-text matching


class ParsedRequestLine(CamelModel):
    """One item segment of a free-text order request."""

    raw: str
    normalized: str
    quantity: int = Field(default=1, ge=1, le=MAX_QUANTITY)
    tokens: List[str] = []


class MatchScore(CamelModel):
    """Score of one request line against one menu item."""

    score: int
    matched_text: str
    exact_name_match: bool = False
    phrase_match: bool = False
    token_hits_in_name: int = 0
    token_hits_in_description: int = 0
    semantic_adjustment: int = 0


class RestaurantCoverageCandidate(CamelModel):
    """Best score a restaurant achieved for one request line."""

    restaurant_guid: str
    score: float


class ConfidenceLevel(str, Enum):
    """Confidence in the top candidate for a request line."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    def __str__(self) -> str:
        return self.value


class SelectionQuality(CamelModel):
    """How clearly the top candidate beats the runner-up."""

    level: ConfidenceLevel
    is_ambiguous: bool
    top_score: Optional[float] = None
    score_gap: Optional[float] = None


# Catalog snapshot


class CatalogMenuItem(CamelModel):
    """Menu item row as supplied by the catalog provider."""

    model_config = ConfigDict(frozen=True)

    id: int
    menu_item_guid: Guid
    name: str = Field(min_length=1)
    description: Optional[str] = None
    price: CatalogPrice = None


class CatalogModifierGroup(CamelModel):
    """Modifier group row; belongs to exactly one menu item."""

    model_config = ConfigDict(frozen=True)

    id: int
    modifier_group_guid: Guid
    menu_item_id: int
    name: str = Field(min_length=1)
    min_selections: Optional[int] = None
    max_selections: Optional[int] = None
    is_required: Optional[bool] = None
    is_multi_select: Optional[bool] = None


class CatalogModifierOption(CamelModel):
    """Modifier option row; belongs to exactly one modifier group."""

    model_config = ConfigDict(frozen=True)

    id: int
    modifier_option_guid: Guid
    modifier_group_id: int
    name: str = Field(min_length=1)
    price: CatalogPrice = None


class Catalog(CamelModel):
    """Immutable catalog snapshot used for one compilation."""

    model_config = ConfigDict(frozen=True)

    menu_items: List[CatalogMenuItem] = []
    modifier_groups: List[CatalogModifierGroup] = []
    modifier_options: List[CatalogModifierOption] = []


# Compilation


class OrderRequestItem(CamelModel):
    """Guest intent for one menu item."""

    menu_item_guid: str = Field(min_length=1)
    quantity: int = Field(ge=1, le=MAX_QUANTITY)
    selected_modifiers: Dict[str, List[str]] = {}


class ModifierOptionDetail(CamelModel):
    """Selected option with its price formatted to cents."""

    option_id: Guid
    option_name: str = Field(min_length=1)
    option_price: Annotated[str, Field(pattern=OPTION_PRICE_PATTERN)]


class ModifierGroupDetail(CamelModel):
    """Selected options grouped under their modifier group."""

    group_id: Guid
    group_name: str = Field(min_length=1)
    options: List[ModifierOptionDetail]


class CompiledOrderItem(CamelModel):
    """Priced, validated order line."""

    menu_item_guid: Guid
    item_name: str = Field(min_length=1)
    base_price: Money
    modifier_price: Money
    unit_price: Money
    quantity: int = Field(ge=1)
    total_price: Money
    modifier_details: List[ModifierGroupDetail]


class CompilationIssue(CamelModel):
    """Structured, non-fatal problem found while compiling."""

    severity: IssueSeverity
    code: IssueCode
    message: str
    menu_item_guid: Optional[str] = None
    group_id: Optional[str] = None
    option_id: Optional[str] = None


class CompiledOrderResult(CamelModel):
    """Result of compiling a set of request items."""

    status: CompileStatus
    items: List[CompiledOrderItem] = []
    issues: List[CompilationIssue] = []
    subtotal: Money = 0.0


# Canonical artifact


class CanonicalOrderArtifact(CamelModel):
    """Frozen, versioned record of a ready-to-execute compilation."""

    model_config = ConfigDict(frozen=True)

    compiler_version: Literal["canonical-v1"]
    compiled_at: Annotated[str, AfterValidator(_require_iso_timestamp)]
    status: Literal["ready_to_execute"]
    subtotal: Money
    item_count: int = Field(ge=0)
    items: List[CompiledOrderItem]

    @model_validator(mode="after")
    def _check_item_count(self) -> "CanonicalOrderArtifact":
        if self.item_count != len(self.items):
            raise ValueError("itemCount does not match items")
        return self


class CanonicalBotOrderItem(CamelModel):
    """Reduced item shape used by bot-ordering automation."""

    item_name: str
    quantity: int
    modifier_details: List[ModifierGroupDetail]


class CompileServerResult(CompiledOrderResult):
    """Compile result enriched with the restaurant's fee configuration."""

    restaurant_id: int
    hotel_id: Optional[int] = None
    delivery_fee: Money
    service_fee_percent: Money


# Free-text preview


class MatchResolution(str, Enum):
    """How a request line was resolved against the menu."""

    SELECTED = "selected"
    AMBIGUOUS = "ambiguous"
    MODIFIER_ONLY = "modifier_only"
    UNMATCHED = "unmatched"

    def __str__(self) -> str:
        return self.value


class PreviewIssueCode(str, Enum):
    """Issues raised while turning free text into draft items."""

    MODIFIER_CONTEXT_MISSING = "modifier_context_missing"
    AMBIGUOUS_ITEM_MATCH = "ambiguous_item_match"
    MENU_ITEM_UNCLEAR = "menu_item_unclear"

    def __str__(self) -> str:
        return self.value


class CandidateMatch(CamelModel):
    """Scored menu item for one request line."""

    restaurant_guid: str
    restaurant_name: str
    menu_item_guid: str
    menu_item_name: str
    score: int
    reason: str


class MatchConfidence(CamelModel):
    level: ConfidenceLevel
    top_score: Optional[float] = None
    score_gap: Optional[float] = None


class ResolvedMatch(CamelModel):
    """Outcome of matching one request line."""

    request_text: str
    normalized_request: str
    quantity: int
    resolution: MatchResolution
    resolution_reason: Optional[str] = None
    confidence: Optional[MatchConfidence] = None
    selected_candidate: Optional[CandidateMatch] = None
    candidates: List[CandidateMatch] = []


class DraftOrderItem(CamelModel):
    """Request item proposed from a confident match."""

    menu_item_guid: str
    menu_item_name: str
    quantity: int = Field(ge=1, le=MAX_QUANTITY)
    selected_modifiers: Dict[str, List[str]] = {}

    def to_request_item(self) -> OrderRequestItem:
        return OrderRequestItem(
            menu_item_guid=self.menu_item_guid,
            quantity=self.quantity,
            selected_modifiers=self.selected_modifiers,
        )


class CanonicalDraft(CamelModel):
    restaurant_guid: str
    items: List[DraftOrderItem] = []


class PreviewIssue(CamelModel):
    """Compiler or input-resolution issue surfaced by the preview."""

    code: str
    message: str
    severity: IssueSeverity


class PreviewCompileSummary(CamelModel):
    status: CompileStatus
    subtotal: Money
    item_count: int
    issues: List[PreviewIssue] = []


class SelectedRestaurant(CamelModel):
    restaurant_guid: str
    restaurant_name: Optional[str] = None


class PreviewInput(CamelModel):
    message: str
    restaurant_guid: Optional[str] = None


class SearchStats(CamelModel):
    menu_items_scanned: int
    request_lines_parsed: int
    restaurants_considered: int


class OrderCompilerPreview(CamelModel):
    """Full result of a free-text order preview."""

    input: PreviewInput
    selected_restaurant: SelectedRestaurant
    matches: List[ResolvedMatch]
    unmatched_requests: List[str] = []
    canonical_draft: CanonicalDraft
    compile: Optional[PreviewCompileSummary] = None
    compile_error: Optional[str] = None
    search_stats: SearchStats
