"""Engagement error taxonomy.

Every error carries a human-readable message and a stable machine code.
The API layer maps each class to an HTTP status in ``app.main``.
"""


class EngagementError(Exception):
    """Base error for comment, like, notification and moderation operations."""

    code = "engagement_error"
    default_message = "Request could not be completed."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(EngagementError):
    """Malformed input shape."""

    code = "validation_error"
    default_message = "Invalid input."

    def __init__(self, message: str | None = None, field: str | None = None):
        super().__init__(message)
        self.field = field


class ForbiddenTermError(EngagementError):
    """Text contains a phrase from the moderation filter."""

    code = "forbidden_term"

    def __init__(self, phrase: str):
        super().__init__(f'Comment contains a forbidden phrase: "{phrase}".')
        self.phrase = phrase


class EmptyCommentError(EngagementError):
    code = "empty_comment"
    default_message = "Comment cannot be empty."


class TargetUnavailableError(EngagementError):
    """Referenced article or comment is missing or not published."""

    code = "target_unavailable"
    default_message = "This content is not available."


class InvalidParentError(EngagementError):
    """Reply target is not a published top-level comment on the same article."""

    code = "invalid_parent"
    default_message = "You can only reply to a top-level comment on this article."


class CommentsDisabledError(EngagementError):
    code = "comments_disabled"
    default_message = "Comments are currently disabled by the administrator."


class RateLimitedError(EngagementError):
    code = "rate_limited"
    default_message = "Too many comments in a short time. Please try again shortly."


class LikesUnavailableError(EngagementError):
    """Like tables have not been provisioned yet."""

    code = "likes_unavailable"
    default_message = "Likes are temporarily unavailable."


class DuplicateForbiddenTermError(EngagementError):
    code = "duplicate_forbidden_term"

    def __init__(self, existing_phrase: str):
        super().__init__(f'The term "{existing_phrase}" is already in the filter list.')
        self.phrase = existing_phrase


class ForbiddenTermNotFoundError(EngagementError):
    code = "forbidden_term_not_found"
    default_message = "The term may have already been removed."
