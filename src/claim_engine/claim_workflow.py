"""Denial and appeal workflow.

A 2-step pipeline that:
1. Applies the denial transition and stores the denied claim
2. Drafts and stores an appeal for it, reporting failure without undoing
   the denial

Progress is streamed as ``StatusEvent``s so a caller can show the denial as
soon as it is recorded while the appeal is still being drafted.
"""

import logging
from typing import Literal

from workflows import Context, Workflow, step
from workflows.events import Event, StartEvent, StopEvent

from .errors import ClaimEngineError
from .schemas.common import ClaimStatus
from .service import ClaimService

logger = logging.getLogger(__name__)


# --- Events ---


class DenyClaimStartEvent(StartEvent):
    """Start event naming the claim to deny."""

    claim_id: int
    denial_reason: str | None = None
    expected_status: ClaimStatus | None = None


class StatusEvent(Event):
    """Progress status update for the client."""

    message: str
    level: Literal["info", "warning", "error"] = "info"


class ClaimDeniedEvent(Event):
    """Emitted once the denial is stored."""

    claim_id: int


# --- Workflow ---


class DenialAppealWorkflow(Workflow):
    """Deny a claim, then draft its appeal as a separate step."""

    def __init__(self, service: ClaimService, **kwargs):
        super().__init__(**kwargs)
        self.service = service

    @step()
    async def deny_claim(
        self, event: DenyClaimStartEvent, ctx: Context
    ) -> ClaimDeniedEvent | StopEvent:
        """Record the denial. Lifecycle errors end the run with an error result."""
        ctx.write_event_to_stream(StatusEvent(message=f"Denying claim {event.claim_id}..."))

        try:
            outcome = self.service.deny(
                event.claim_id,
                event.denial_reason,
                expected_status=event.expected_status,
                draft_appeal=False,
            )
        except ClaimEngineError as exc:
            ctx.write_event_to_stream(StatusEvent(message=str(exc), level="error"))
            return StopEvent(
                result={
                    "claim": None,
                    "appeal_generated": False,
                    "appeal": None,
                    "error": str(exc),
                }
            )

        ctx.write_event_to_stream(
            StatusEvent(message=f"Claim {event.claim_id} denied: {outcome.claim.denial_reason}")
        )
        return ClaimDeniedEvent(claim_id=event.claim_id)

    @step()
    async def draft_appeal(self, event: ClaimDeniedEvent, ctx: Context) -> StopEvent:
        """Draft and store the appeal for the denied claim."""
        ctx.write_event_to_stream(StatusEvent(message="Drafting appeal letter..."))

        appeal = None
        try:
            appeal = self.service.regenerate_appeal(event.claim_id)
        except Exception:
            logger.exception("Appeal drafting failed for claim %s", event.claim_id)
            ctx.write_event_to_stream(
                StatusEvent(
                    message="Appeal could not be generated; the claim remains denied",
                    level="warning",
                )
            )
        else:
            ctx.write_event_to_stream(
                StatusEvent(
                    message=f"Appeal drafted ({appeal.category}, "
                    f"{appeal.success_probability}% success probability)"
                )
            )

        claim = self.service.repository.get_claim(event.claim_id)
        return StopEvent(
            result={
                "claim": claim.model_dump(mode="json"),
                "appeal_generated": appeal is not None,
                "appeal": appeal.model_dump(mode="json") if appeal else None,
            }
        )
