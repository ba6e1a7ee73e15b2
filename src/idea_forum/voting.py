from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Optional

from idea_forum.models import VoteType

VoteAction = Literal["created", "removed", "updated"]


@dataclass(frozen=True)
class VotePlan:
    """What to do with a user's vote row and by how much the counters move."""

    action: VoteAction
    deltas: dict[VoteType, int] = field(default_factory=dict)

    @property
    def upvotes_delta(self) -> int:
        return self.deltas.get(VoteType.UP, 0)

    @property
    def downvotes_delta(self) -> int:
        return self.deltas.get(VoteType.DOWN, 0)


def plan_vote(existing: Optional[VoteType], requested: VoteType) -> VotePlan:
    # same type again toggles the vote off
    if existing is None:
        return VotePlan("created", {requested: 1})
    if existing == requested:
        return VotePlan("removed", {requested: -1})
    return VotePlan("updated", {existing: -1, requested: 1})
