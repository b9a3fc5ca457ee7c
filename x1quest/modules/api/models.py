"""
x1quest shared data models.

These models define the structure of all data passed between
components in the x1quest system.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .errors import ErrorKind

# Enums


class ApiRoot(str, Enum):
    """Remote service roots a request can target."""

    PRIMARY = "primary"
    FAUCET = "faucet"


class BatchStatus(str, Enum):
    """Outcome of one quest inside a batch."""

    SKIPPED = "skipped"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


# Session models


class Credential(BaseModel):
    """Persisted session credential. Replaced wholesale, never mutated."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    token: str = Field(..., alias="x1_auth_token", min_length=1)
    identity: str = Field(..., alias="wallet_address", min_length=1)
    issued_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC), alias="generated_at"
    )

    def to_record(self) -> Dict[str, Any]:
        """Serialize to the on-disk JSON record."""
        return self.model_dump(by_alias=True, mode="json")


@dataclass
class AuthSession:
    """In-memory session owned by the request executor."""

    private_key: str = field(repr=False)
    identity: Optional[str] = None
    token: Optional[str] = field(default=None, repr=False)


# Remote service models


class Quest(BaseModel):
    """Quest as listed by the remote service."""

    model_config = ConfigDict(extra="allow")

    id: Union[int, str]
    title: str = ""
    reward: float = 0
    category: Optional[str] = None
    periodicity: Optional[str] = None
    type: Optional[str] = None
    is_active: bool = False
    is_completed: bool = False
    is_completed_today: bool = False

    @property
    def already_completed(self) -> bool:
        """Whether the service already counts this quest as done."""
        if self.periodicity == "daily":
            return self.is_completed_today
        return self.is_completed


class BatchResult(BaseModel):
    """Per-quest outcome of a batch completion."""

    quest_id: Union[int, str]
    title: str
    reward: float = 0
    status: BatchStatus
    error: Optional[str] = None
    data: Optional[Any] = None

    @classmethod
    def skipped(cls, quest: Quest) -> "BatchResult":
        return cls(quest_id=quest.id, title=quest.title, reward=quest.reward,
                   status=BatchStatus.SKIPPED)

    @classmethod
    def succeeded(cls, quest: Quest, data: Any = None) -> "BatchResult":
        return cls(quest_id=quest.id, title=quest.title, reward=quest.reward,
                   status=BatchStatus.SUCCEEDED, data=data)

    @classmethod
    def failed(cls, quest: Quest, error: str) -> "BatchResult":
        return cls(quest_id=quest.id, title=quest.title, reward=quest.reward,
                   status=BatchStatus.FAILED, error=error)


class BatchSummary(BaseModel):
    """Aggregate counts over a batch."""

    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    total_reward: float = 0

    @classmethod
    def from_results(cls, results: List[BatchResult]) -> "BatchSummary":
        summary = cls()
        for result in results:
            if result.status == BatchStatus.SUCCEEDED:
                summary.succeeded += 1
                summary.total_reward += result.reward
            elif result.status == BatchStatus.FAILED:
                summary.failed += 1
            else:
                summary.skipped += 1
        return summary


# Request/Result models


@dataclass
class RequestSpec:
    """Description of one outbound call."""

    method: Literal["GET", "POST"]
    path: str
    api: ApiRoot = ApiRoot.PRIMARY
    params: Optional[Dict[str, Any]] = None
    json: Optional[Any] = None


@dataclass
class Result:
    """Standardized outcome of every caller-facing operation."""

    ok: bool
    data: Any = None
    error: Optional[str] = None
    kind: Optional[ErrorKind] = None
    message: Optional[str] = None

    @classmethod
    def success(cls, data: Any = None, message: Optional[str] = None) -> "Result":
        return cls(ok=True, data=data, message=message)

    @classmethod
    def failure(cls, error: str, kind: ErrorKind = ErrorKind.REQUEST_FAILED) -> "Result":
        return cls(ok=False, error=error, kind=kind)
