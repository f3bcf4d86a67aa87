"""
Approval aggregator: folds the votes on one item into a single verdict
"""

from typing import Iterable, Sequence

from app.workflow.types import ApprovalVote, Decision, Role


def derive_status(required_roles: Iterable[Role], votes: Sequence[ApprovalVote]) -> Decision:
    """
    Combine votes into a pending/approved/rejected verdict

    Any rejection fails the whole item, whatever the other votes say. The
    item is approved only once every required role has an approving vote.

    Args:
        required_roles: Roles that must each approve
        votes: Votes recorded so far

    Returns:
        Aggregate decision
    """
    approved = set()
    for vote in votes:
        if vote.decision is Decision.REJECTED:
            return Decision.REJECTED
        if vote.decision is Decision.APPROVED:
            approved.add(vote.required_role)

    required = set(required_roles)
    if required and required <= approved:
        return Decision.APPROVED
    return Decision.PENDING
