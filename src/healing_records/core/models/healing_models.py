"""Data models for the healing record service."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Any, Tuple
from enum import Enum


class ResultState(Enum):
    """Feedback state of a persisted healing result."""
    UNKNOWN = "unknown"
    SUCCESSFUL = "successful"
    UNSUCCESSFUL = "unsuccessful"


class MetricsBucket(Enum):
    """Partitions of the external metrics store."""
    SUCCESSFUL = "successful-healing"
    UNSUCCESSFUL = "unsuccessful-healing"

    @classmethod
    def for_outcome(cls, is_success: bool) -> 'MetricsBucket':
        return cls.SUCCESSFUL if is_success else cls.UNSUCCESSFUL

    @property
    def opposite(self) -> 'MetricsBucket':
        return MetricsBucket.UNSUCCESSFUL if self is MetricsBucket.SUCCESSFUL else MetricsBucket.SUCCESSFUL


@dataclass(frozen=True)
class Locator:
    """Locator descriptor: strategy plus value."""
    value: str
    type: str = "css"

    def to_dict(self) -> Dict[str, str]:
        return {"type": self.type, "value": self.value}


@dataclass(frozen=True)
class Selector:
    """Stable identity of a locator used in a specific test method."""
    uid: str
    class_name: str
    method_name: str
    locator: Locator
    command: str = "findElement"
    url: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now, compare=False)


@dataclass
class CandidateResult:
    """An alternative locator proposed by the client, not yet persisted."""
    locator: Locator
    score: float


@dataclass
class HealingResult:
    """One persisted candidate of a healing attempt."""
    id: int
    healing_id: str
    locator: Locator
    score: float
    success_healing: Optional[bool] = None
    superseded: bool = False
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def state(self) -> ResultState:
        """Feedback state derived from the success flag."""
        if self.success_healing is None:
            return ResultState.UNKNOWN
        return ResultState.SUCCESSFUL if self.success_healing else ResultState.UNSUCCESSFUL

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to dictionary for API responses and metrics payloads."""
        return {
            "id": self.id,
            "healing_id": self.healing_id,
            "locator": self.locator.to_dict(),
            "score": self.score,
            "success_healing": self.success_healing,
            "state": self.state.value,
            "created_at": self.created_at.isoformat()
        }


@dataclass
class Healing:
    """One self-healing attempt for a selector against a specific page state.

    A successful attempt owns at least one HealingResult. The identifier is
    derived from the selector id and the page content, so the same page seen
    twice resolves to the same record.
    """
    uid: str
    selector: Selector
    page_content: str
    results: List[HealingResult] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def active_results(self) -> List[HealingResult]:
        return [result for result in self.results if not result.superseded]


@dataclass(frozen=True)
class RankedResult:
    """Read-side view of one retained candidate."""
    locator: str
    score: float


@dataclass(frozen=True)
class HealingView:
    """Read-side aggregate of the best candidates known for one selector."""
    class_name: str
    method_name: str
    locator: str
    results: Tuple[RankedResult, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "class_name": self.class_name,
            "method_name": self.method_name,
            "locator": self.locator,
            "results": [{"locator": r.locator, "score": r.score} for r in self.results]
        }


@dataclass
class HealingQuery:
    """Filter criteria over selector attributes."""
    class_name: Optional[str] = None
    method_name: Optional[str] = None
    locator: Optional[str] = None
    url: Optional[str] = None


@dataclass
class HealingRequest:
    """A healing attempt reported by the automation client."""
    locator: Locator
    url: str
    command: str
    page_content: str
    results: List[CandidateResult]
    used_result: CandidateResult
    screenshot: Optional[str] = None
    metrics: Optional[str] = None


@dataclass
class ReportRecord:
    """Report entry pointing at the result that was used for a session."""
    id: int
    session_key: Optional[str]
    healing_result_id: int
    healing_id: str
    selector_id: str
    screenshot: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "session_key": self.session_key,
            "healing_result_id": self.healing_result_id,
            "healing_id": self.healing_id,
            "selector_id": self.selector_id,
            "screenshot": self.screenshot,
            "created_at": self.created_at.isoformat()
        }


@dataclass
class RecordConfiguration:
    """Record-keeping policy of the healing record service."""
    url_for_key: bool = False
    allow_metrics: bool = True
    default_project: str = "no-project"
    replace_previous_results: bool = False
    metrics_max_workers: int = 2
