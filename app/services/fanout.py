"""Who gets notified when a comment is posted.

The rules are a table rather than nested conditionals so the dedup
behaviour can be read and tested on its own:

==============  =====================================  ==================
rule            fires when                             notifies
==============  =====================================  ==================
article owner   no parent, or parent author is not     article author,
                the article author; and article        ARTICLE_COMMENT
                author is not the commenter
reply           has parent and parent author is not    parent author,
                the commenter                          COMMENT_REPLY
==============  =====================================  ==================

When the parent comment belongs to the article author only the reply rule
fires, so nobody is notified twice for one comment.
"""
from collections.abc import Callable
from dataclasses import dataclass
from uuid import UUID

from app.models.notification import NotificationType


@dataclass(frozen=True)
class CommentEvent:
    actor_id: UUID
    article_author_id: UUID | None
    has_parent: bool = False
    parent_author_id: UUID | None = None


@dataclass(frozen=True)
class PlannedNotification:
    recipient_id: UUID
    type: str


@dataclass(frozen=True)
class FanoutRule:
    name: str
    applies: Callable[[CommentEvent], bool]
    recipient: Callable[[CommentEvent], UUID | None]
    type: str


COMMENT_FANOUT_RULES: tuple[FanoutRule, ...] = (
    FanoutRule(
        name="article_owner",
        applies=lambda e: (
            e.article_author_id is not None
            and e.article_author_id != e.actor_id
            and (not e.has_parent or e.parent_author_id != e.article_author_id)
        ),
        recipient=lambda e: e.article_author_id,
        type=NotificationType.ARTICLE_COMMENT,
    ),
    FanoutRule(
        name="reply",
        applies=lambda e: (
            e.has_parent
            and e.parent_author_id is not None
            and e.parent_author_id != e.actor_id
        ),
        recipient=lambda e: e.parent_author_id,
        type=NotificationType.COMMENT_REPLY,
    ),
)


def plan_comment_notifications(
    event: CommentEvent,
    rules: tuple[FanoutRule, ...] = COMMENT_FANOUT_RULES,
) -> list[PlannedNotification]:
    """Evaluate every rule once; at most one notification per recipient."""
    planned: list[PlannedNotification] = []
    seen: set[UUID] = set()
    for rule in rules:
        if not rule.applies(event):
            continue
        recipient = rule.recipient(event)
        if recipient is None or recipient == event.actor_id or recipient in seen:
            continue
        seen.add(recipient)
        planned.append(PlannedNotification(recipient_id=recipient, type=rule.type))
    return planned
