"""Denial pattern and appeal schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from .claim import Claim
from .common import AppealStatus


class DenialPattern(BaseModel):
    """Maps a denial phrase to a category and its appeal strategy."""

    model_config = ConfigDict(frozen=True)

    keywords: tuple[str, ...] = ()
    category: str
    success_rate: int
    key_arguments: tuple[str, ...] = ()
    suggested_actions: tuple[str, ...] = ()


class AppealResult(BaseModel):
    """Rendered appeal letter and the strategy behind it."""

    letter_text: str
    category: str
    success_probability: int
    suggested_actions: list[str] = []
    key_arguments: list[str] = []
    generated_at: datetime


class AppealRecord(BaseModel):
    """A generated appeal tied to one denial of a claim."""

    id: int | None = None
    claim_id: int
    category: str
    letter_text: str
    success_probability: int
    suggested_actions: list[str] = []
    key_arguments: list[str] = []
    generated_at: datetime
    status: AppealStatus = AppealStatus.PENDING
    status_changed_at: datetime | None = None


class DenialOutcome(BaseModel):
    """Result of denying a claim: the claim plus the best-effort appeal."""

    claim: Claim
    appeal_generated: bool = False
    appeal: AppealRecord | None = None


class AppealSummary(BaseModel):
    """Aggregate appeal metrics for a dashboard."""

    total: int = 0
    by_status: dict[str, int] = {}
    by_category: dict[str, int] = {}
    win_rate: float | None = None
    average_success_probability: float | None = None
