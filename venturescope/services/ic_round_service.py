"""Investment-committee voting rounds.

Votes stay sealed until a round is revealed (or closed): each caller sees only
their own ballot. The summary maps ballots onto a -2..2 scale and labels the
outcome with a simple consensus rule.
"""

from __future__ import annotations

import logging
import math
from datetime import timezone
from typing import Any, Iterable

from venturescope.auth.rbac import is_admin_role
from venturescope.auth.tenant_context import OrgContext, enforce_org_match
from venturescope.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from venturescope.models import (
    Assessment,
    Company,
    ICRoundParticipant,
    ICVote,
    ICVotingRound,
    OrgMembership,
    RoundStatus,
    User,
    VoteChoice,
)
from venturescope.models.base import utcnow
from venturescope.services.base_service import BaseService

logger = logging.getLogger(__name__)

VOTE_VALUES = {
    VoteChoice.STRONG_YES: 2,
    VoteChoice.YES: 1,
    VoteChoice.NEUTRAL: 0,
    VoteChoice.NO: -1,
    VoteChoice.STRONG_NO: -2,
}

VOTE_LABELS = {
    VoteChoice.STRONG_YES: "Strong Yes",
    VoteChoice.YES: "Yes",
    VoteChoice.NEUTRAL: "Neutral",
    VoteChoice.NO: "No",
    VoteChoice.STRONG_NO: "Strong No",
}

_UPDATABLE_FIELDS = ("title", "description", "deadline", "quorum_percentage", "status")


def quorum_required(total_participants: int, quorum_percentage: int) -> int:
    return math.ceil(total_participants * quorum_percentage / 100)


def determine_consensus(distribution: dict[VoteChoice, int]) -> str:
    total = sum(distribution.values())
    if total == 0:
        return "mixed"
    positive = distribution.get(VoteChoice.STRONG_YES, 0) + distribution.get(VoteChoice.YES, 0)
    negative = distribution.get(VoteChoice.STRONG_NO, 0) + distribution.get(VoteChoice.NO, 0)
    if positive / total >= 0.7:
        return "positive"
    if negative / total >= 0.7:
        return "negative"
    if distribution.get(VoteChoice.NEUTRAL, 0) / total >= 0.5:
        return "neutral"
    return "mixed"


def summarize_votes(choices: Iterable[VoteChoice | str]) -> dict[str, Any]:
    """Distribution, rounded percentages, and the mean score for a set of ballots."""
    distribution = {choice: 0 for choice in VoteChoice}
    for choice in choices:
        distribution[VoteChoice(choice)] += 1
    total = sum(distribution.values())
    score = sum(VOTE_VALUES[choice] * count for choice, count in distribution.items())
    return {
        "vote_distribution": [
            {
                "vote": choice,
                "label": VOTE_LABELS[choice],
                "count": count,
                "percentage": round(count / total * 100) if total else 0,
            }
            for choice, count in distribution.items()
        ],
        "average_score": round(score / total, 2) if total else 0.0,
        "consensus": determine_consensus(distribution),
    }


def is_revealed(round_: ICVotingRound) -> bool:
    return round_.revealed_at is not None or round_.status == RoundStatus.CLOSED


class ICRoundService(BaseService):
    def _round(self, context: OrgContext, round_id: int) -> ICVotingRound:
        round_ = self.db.get(ICVotingRound, round_id)
        if round_ is None:
            raise NotFoundError("Voting round not found")
        enforce_org_match(round_.org_id, context, label="Voting round")
        return round_

    def _require_admin(self, context: OrgContext, action: str) -> None:
        if not is_admin_role(context.role):
            raise AuthorizationError(f"Only admins can {action}")

    def serialize_round(self, context: OrgContext, round_: ICVotingRound) -> dict[str, Any]:
        """Round view for ``context.user_id``; other members' ballots are blanked until reveal."""
        revealed = is_revealed(round_)
        participant_ids = [participant.user_id for participant in round_.participants]
        votes = []
        for vote in round_.votes:
            own = vote.user_id == context.user_id
            votes.append(
                {
                    "id": vote.id,
                    "round_id": vote.round_id,
                    "user_id": vote.user_id,
                    "vote": vote.vote if revealed or own else None,
                    "comment": vote.comment if revealed or own else None,
                    "created_at": vote.created_at,
                }
            )
        company = round_.assessment.company if round_.assessment is not None else None
        return {
            "id": round_.id,
            "org_id": round_.org_id,
            "assessment_id": round_.assessment_id,
            "company_name": company.name if company is not None else None,
            "created_by": round_.created_by,
            "title": round_.title,
            "description": round_.description,
            "deadline": round_.deadline,
            "quorum_percentage": round_.quorum_percentage,
            "status": round_.status,
            "revealed_at": round_.revealed_at,
            "is_revealed": revealed,
            "is_participant": context.user_id in participant_ids,
            "user_has_voted": any(vote.user_id == context.user_id for vote in round_.votes),
            "participant_ids": participant_ids,
            "total_participants": len(participant_ids),
            "votes_submitted": len(round_.votes),
            "votes": votes,
            "created_at": round_.created_at,
        }

    def list_rounds(
        self,
        context: OrgContext,
        assessment_id: int | None = None,
        status: str | None = None,
    ) -> list[ICVotingRound]:
        query = self.db.query(ICVotingRound).filter(ICVotingRound.org_id == context.org_id)
        if assessment_id is not None:
            query = query.filter(ICVotingRound.assessment_id == assessment_id)
        if status and status != "all":
            try:
                query = query.filter(ICVotingRound.status == RoundStatus(status))
            except ValueError as exc:
                raise ValidationError(f"Unknown round status: {status}") from exc
        return query.order_by(ICVotingRound.created_at.desc(), ICVotingRound.id.desc()).all()

    def get_round(self, context: OrgContext, round_id: int) -> ICVotingRound:
        return self._round(context, round_id)

    def create_round(self, context: OrgContext, fields: dict[str, Any]) -> ICVotingRound:
        self._require_admin(context, "create voting rounds")
        assessment = (
            self.db.query(Assessment)
            .join(Company, Company.id == Assessment.company_id)
            .filter(Assessment.id == fields["assessment_id"], Company.org_id == context.org_id)
            .first()
        )
        if assessment is None:
            raise NotFoundError("Assessment not found")

        participant_ids = list(dict.fromkeys(fields["participant_ids"]))
        member_ids = {
            user_id
            for (user_id,) in self.db.query(OrgMembership.user_id).filter(
                OrgMembership.org_id == context.org_id,
                OrgMembership.user_id.in_(participant_ids),
            )
        }
        if any(user_id not in member_ids for user_id in participant_ids):
            raise ValidationError("Some participants are not organization members")

        round_ = ICVotingRound(
            org_id=context.org_id,
            assessment_id=assessment.id,
            created_by=context.user_id,
            title=fields.get("title") or f"IC vote: {assessment.company.name}",
            description=fields.get("description"),
            deadline=_naive_utc(fields.get("deadline")),
            quorum_percentage=fields.get("quorum_percentage") or 50,
            status=RoundStatus.OPEN,
        )
        round_.participants = [ICRoundParticipant(user_id=user_id) for user_id in participant_ids]
        self.db.add(round_)
        self.commit()
        self.db.refresh(round_)
        logger.info(
            "ic_round.created",
            extra={
                "event": "ic_round.created",
                "org_id": context.org_id,
                "round_id": round_.id,
                "participants": len(participant_ids),
            },
        )
        return round_

    def update_round(self, context: OrgContext, round_id: int, fields: dict[str, Any]) -> ICVotingRound:
        self._require_admin(context, "update voting rounds")
        round_ = self._round(context, round_id)
        updates = {key: value for key, value in fields.items() if key in _UPDATABLE_FIELDS and value is not None}
        if not updates:
            raise ValidationError("No valid fields to update")
        if "deadline" in updates:
            updates["deadline"] = _naive_utc(updates["deadline"])
        for key, value in updates.items():
            setattr(round_, key, value)
        self.commit()
        self.db.refresh(round_)
        return round_

    def delete_round(self, context: OrgContext, round_id: int) -> None:
        self._require_admin(context, "delete voting rounds")
        round_ = self._round(context, round_id)
        self.db.delete(round_)
        self.commit()

    def cast_vote(self, context: OrgContext, round_id: int, vote: str, comment: str | None = None) -> tuple[ICVote, bool]:
        """Insert or replace the caller's ballot; returns ``(vote, created)``."""
        round_ = self._round(context, round_id)
        if round_.status != RoundStatus.OPEN:
            raise ValidationError("Voting round is not open")
        if round_.deadline is not None and round_.deadline < utcnow():
            raise ValidationError("Voting deadline has passed")
        if not any(participant.user_id == context.user_id for participant in round_.participants):
            raise AuthorizationError("You are not a participant in this voting round")

        existing = (
            self.db.query(ICVote)
            .filter(ICVote.round_id == round_.id, ICVote.user_id == context.user_id)
            .first()
        )
        if existing is not None:
            existing.vote = VoteChoice(vote)
            existing.comment = comment or None
            ballot, created = existing, False
        else:
            ballot = ICVote(user_id=context.user_id, vote=VoteChoice(vote), comment=comment or None)
            round_.votes.append(ballot)
            created = True
        self.commit()
        self.db.refresh(ballot)
        logger.info(
            "ic_round.vote.recorded",
            extra={"event": "ic_round.vote.recorded", "org_id": context.org_id, "round_id": round_.id},
        )
        return ballot, created

    def reveal(self, context: OrgContext, round_id: int) -> ICVotingRound:
        self._require_admin(context, "reveal votes")
        round_ = self._round(context, round_id)
        if round_.revealed_at is not None:
            raise ValidationError("Votes have already been revealed")
        round_.revealed_at = utcnow()
        round_.status = RoundStatus.CLOSED
        self.commit()
        self.db.refresh(round_)
        logger.info(
            "ic_round.revealed",
            extra={"event": "ic_round.revealed", "org_id": context.org_id, "round_id": round_.id},
        )
        return round_

    def summary(self, context: OrgContext, round_id: int) -> dict[str, Any]:
        round_ = self._round(context, round_id)
        total_participants = len(round_.participants)
        votes_submitted = len(round_.votes)
        required = quorum_required(total_participants, round_.quorum_percentage)
        payload: dict[str, Any] = {
            "round_id": round_.id,
            "title": round_.title,
            "status": round_.status,
            "deadline": round_.deadline,
            "revealed_at": round_.revealed_at,
            "is_revealed": is_revealed(round_),
            "total_participants": total_participants,
            "votes_submitted": votes_submitted,
            "quorum_percentage": round_.quorum_percentage,
            "quorum_required": required,
            "quorum_met": votes_submitted >= required,
        }
        if not payload["is_revealed"]:
            payload["message"] = "Votes have not been revealed yet"
            return payload

        payload.update(summarize_votes(vote.vote for vote in round_.votes))
        voter_names = self._user_names([vote.user_id for vote in round_.votes])
        payload["comments"] = [
            {
                "user": voter_names.get(vote.user_id) or "Unknown",
                "vote": VOTE_LABELS[vote.vote],
                "comment": vote.comment,
            }
            for vote in round_.votes
            if vote.comment
        ]
        return payload

    def _user_names(self, user_ids: list[int]) -> dict[int, str | None]:
        if not user_ids:
            return {}
        return {user.id: user.name for user in self.db.query(User).filter(User.id.in_(user_ids))}


def _naive_utc(value):
    """Store deadlines as naive UTC to match every other timestamp column."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
