from pydantic import BaseModel, Field, field_validator
from typing import TypedDict, Literal, Optional, List, Dict, Any, Union, Annotated

MAX_PAGE_SIZE = 40


class FetchParams(BaseModel):
    """Filters for a single RAWG query. Platform/genre names are resolved by the data source."""
    platforms: Optional[List[str]] = None
    genres: Optional[List[str]] = None
    date_from: Optional[str] = None          # YYYY-MM-DD
    date_to: Optional[str] = None            # YYYY-MM-DD
    metacritic_min: Optional[int] = None
    metacritic_max: Optional[int] = None
    page_size: int = MAX_PAGE_SIZE
    page: Optional[int] = None
    ordering: Optional[str] = None
    search: Optional[str] = None
    search_exact: bool = False
    tags: Optional[str] = None
    developers: Optional[str] = None         # slug, e.g. "nintendo" or "nintendo,sega"
    publishers: Optional[str] = None
    exclude_additions: bool = False

    @field_validator("page_size", mode="before")
    @classmethod
    def _clamp_page_size(cls, value: Any) -> Any:
        if value is None:
            return MAX_PAGE_SIZE
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return max(1, min(int(value), MAX_PAGE_SIZE))
        return value


class FetchAction(BaseModel):
    action: Literal["fetch"] = "fetch"
    id: str
    params: FetchParams = Field(default_factory=FetchParams)
    description: Optional[str] = ""


class CalculateAction(BaseModel):
    action: Literal["calculate"] = "calculate"
    id: str
    operation: Literal["average", "sum", "count", "min", "max"]
    source: str
    field: Literal["metacritic", "rating", "ratings_count"]
    description: Optional[str] = ""


class CompareGroup(BaseModel):
    name: str
    source: str
    field: Literal["metacritic", "rating", "count"]


class CompareAction(BaseModel):
    action: Literal["compare"] = "compare"
    id: str
    groups: List[CompareGroup]
    description: Optional[str] = ""


Action = Annotated[Union[FetchAction, CalculateAction, CompareAction], Field(discriminator="action")]


class Plan(BaseModel):
    """An ordered list of actions plus the model's rationale. Never mutated once built."""
    reasoning: Optional[str] = ""
    actions: List[Action]

    model_config = {"frozen": True}

    @property
    def fetch_ids(self) -> List[str]:
        return [a.id for a in self.actions if isinstance(a, FetchAction)]


class GameRecord(BaseModel):
    """The subset of a RAWG game payload the engine reads."""
    id: Optional[int] = None
    name: str = ""
    released: Optional[str] = None
    metacritic: Optional[Union[int, float]] = None
    rating: Optional[Union[int, float]] = None
    ratings_count: Optional[int] = None
    platforms: List[str] = Field(default_factory=list)
    genres: List[str] = Field(default_factory=list)

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "GameRecord":
        return cls(
            id=payload.get("id"),
            name=payload.get("name") or "",
            released=payload.get("released"),
            metacritic=payload.get("metacritic"),
            rating=payload.get("rating"),
            ratings_count=payload.get("ratings_count"),
            platforms=[
                (p.get("platform") or {}).get("name", "")
                for p in payload.get("platforms") or []
            ],
            genres=[g.get("name", "") for g in payload.get("genres") or []],
        )

    def display_fields(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "metacritic": self.metacritic,
            "rating": self.rating,
            "ratings_count": self.ratings_count,
            "released": self.released,
        }


class FetchResponse(BaseModel):
    """What the data-source collaborator hands back for one query."""
    total_count: int
    records: List[GameRecord] = Field(default_factory=list)
    echoed_params: Dict[str, str] = Field(default_factory=dict)


class FetchResult(BaseModel):
    """Result-store entry for a fetch action."""
    records: List[GameRecord]
    total_count: int
    returned_count: int
    echoed_params: Dict[str, str] = Field(default_factory=dict)


class ReviewResult(BaseModel):
    satisfactory: bool = True
    reasoning: Optional[str] = ""
    # Untyped; validated by the replanner.
    new_plan: Optional[Any] = None

    @field_validator("reasoning", mode="before")
    @classmethod
    def _null_reasoning(cls, value: Any) -> Any:
        return "" if value is None else value


StepKind = Literal["thinking", "plan", "tool_call", "tool_result", "review",
                   "generating_answer", "answer", "error"]


class Step(BaseModel):
    """A progress event for the observer."""
    id: str
    kind: StepKind
    name: str
    summary: str
    details: Dict[str, Any] = Field(default_factory=dict)
    timestamp: int


class AgentResponse(BaseModel):
    answer: str
    steps: List[Step] = Field(default_factory=list)
    widgets: List[Dict[str, Any]] = Field(default_factory=list)


class QueryState(TypedDict, total=False):
    """Per-query graph state. Each run owns its own copy; nothing is shared between queries."""

    query: str

    # Planning
    plan: Optional[Plan]                    # original, validated plan
    raw_plan: Optional[Dict[str, Any]]      # parsed but not yet validated candidate
    revised_plan: Optional[Plan]            # reviewer-supplied replacement, if accepted
    replanned: bool

    # Execution
    results: Dict[str, Any]                 # action id -> result payload
    widgets: Dict[str, Dict[str, Any]]      # action id -> display snapshot

    # Review / answer
    review: Optional[ReviewResult]
    answer: Optional[str]
    outcome: Literal["running", "answered", "plan_parse_failed", "plan_invalid"]
    errors: List[str]


def active_plan(state: QueryState) -> Optional[Plan]:
    """The plan currently in force: the accepted revision, else the original."""
    return state.get("revised_plan") or state.get("plan")

