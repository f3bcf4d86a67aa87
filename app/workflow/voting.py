"""
Recording approval votes

Shared by forms and documents. Checks run in a fixed order so callers get
a predictable error: Unauthorized, then DuplicateVote, then CommentRequired.
Nothing here mutates its inputs; callers apply the returned votes only
after every check has passed.
"""

from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from app.utils.exceptions import CommentRequired, DuplicateVote, Unauthorized, ValidationError
from app.workflow.aggregator import derive_status
from app.workflow.authority import can_approve, required_roles, roles_awaiting
from app.workflow.types import ActorContext, ApprovalTarget, ApprovalVote, Decision, Role


def coerce_decision(decision) -> Decision:
    try:
        decision = Decision(decision)
    except ValueError:
        raise ValidationError("Decision must be 'approved' or 'rejected'")
    if decision is Decision.PENDING:
        raise ValidationError("Decision must be 'approved' or 'rejected'")
    return decision


def _decided(votes: Sequence[ApprovalVote], role: Role) -> bool:
    return any(v.required_role is role and v.decision is not Decision.PENDING for v in votes)


def resolve_role(actor: ActorContext, target: ApprovalTarget, votes: Sequence[ApprovalVote],
                 role: Optional[Role] = None) -> Role:
    """
    Pick the vote slot an actor is about to fill

    Args:
        actor: Who is voting
        target: Item being decided
        votes: Current votes on the item
        role: Role the actor asked to vote as, or None to pick the first open one

    Returns:
        The role to record the vote under

    Raises:
        Unauthorized: Actor may not vote, or the role is not offered yet
        DuplicateVote: The role has already voted
    """
    awaiting = roles_awaiting(target.item_type, votes)

    if role is not None:
        try:
            role = Role(role)
        except ValueError:
            raise Unauthorized(f"Unknown approval role '{role}'")
        if not can_approve(actor, target, role):
            raise Unauthorized(f"Not authorized to approve {target.item_type.value} as {role.value}")
        if _decided(votes, role):
            raise DuplicateVote(f"{role.value} has already voted on {target.item_type.value}")
        if role not in awaiting:
            raise Unauthorized(f"{role.value} approval is not open yet for {target.item_type.value}")
        return role

    qualified = [r for r in required_roles(target.item_type) if can_approve(actor, target, r)]
    if not qualified:
        raise Unauthorized(f"Not authorized to approve {target.item_type.value}")
    for candidate in qualified:
        if candidate in awaiting:
            return candidate
    if any(_decided(votes, candidate) for candidate in qualified):
        raise DuplicateVote(f"You have already voted on {target.item_type.value}")
    raise Unauthorized(f"Your approval is not open yet for {target.item_type.value}")


def cast_vote(votes: Sequence[ApprovalVote], required: Sequence[Role], role: Role,
              actor_id: str, decision: Decision, comments: str,
              now: datetime) -> Tuple[List[ApprovalVote], Decision]:
    """
    Record one vote and recompute the aggregate

    Returns:
        Tuple of (new vote list, aggregate decision)

    Raises:
        DuplicateVote: The role has already voted
        CommentRequired: A rejection without comments
    """
    if _decided(votes, role):
        raise DuplicateVote(f"{role.value} has already voted")
    comments = (comments or '').strip()
    if decision is Decision.REJECTED and not comments:
        raise CommentRequired("Comments are required when rejecting")

    cast = ApprovalVote(
        required_role=role,
        decision=decision,
        actor_id=actor_id,
        comments=comments,
        decided_at=now,
    )
    new_votes = []
    for vote in votes:
        new_votes.append(cast if vote.required_role is role else vote)
    if not any(vote.required_role is role for vote in votes):
        new_votes.append(cast)
    return new_votes, derive_status(required, new_votes)
