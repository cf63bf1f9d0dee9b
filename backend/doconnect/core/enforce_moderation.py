"""Moderation Rules — status transitions and author notices for questions and answers.

Invariants:
    - New and edited content is PENDING
    - Moderators may only move content to APPROVED or REJECTED
    - Re-applying the current status is rejected; APPROVED <-> REJECTED is allowed
    - build_moderation_notice is pure: returns what to send, the shell sends it
"""

from doconnect.core.domain_types import ContentKind, ContentStatus, NotificationType
from doconnect.core.errors import InvalidArgumentError, InvalidOperationError


MODERATION_TARGETS = frozenset({ContentStatus.APPROVED, ContentStatus.REJECTED})

_NOTICE_TYPES = {
    (ContentKind.QUESTION, ContentStatus.APPROVED): NotificationType.QUESTION_APPROVED,
    (ContentKind.QUESTION, ContentStatus.REJECTED): NotificationType.QUESTION_REJECTED,
    (ContentKind.ANSWER, ContentStatus.APPROVED): NotificationType.ANSWER_APPROVED,
    (ContentKind.ANSWER, ContentStatus.REJECTED): NotificationType.ANSWER_REJECTED,
}


def validate_status_change(
    kind: ContentKind, current: ContentStatus, target: ContentStatus,
) -> None:
    """Raise if a moderator may not move content from current to target."""
    if target not in MODERATION_TARGETS:
        raise InvalidArgumentError(
            f"{kind.value.capitalize()} status can only be set to approved or rejected",
            "status",
        )
    if current == target:
        raise InvalidOperationError(
            f"{kind.value.capitalize()} is already {target.value}",
        )


def status_after_edit() -> ContentStatus:
    """Any author edit sends content back to the moderation queue."""
    return ContentStatus.PENDING


def build_moderation_notice(
    kind: ContentKind, title: str, status: ContentStatus,
) -> tuple[NotificationType, str, str]:
    """Return (type, title, message) for the author of moderated content."""
    notice_type = _NOTICE_TYPES[(kind, status)]
    label = kind.value.capitalize()
    if status == ContentStatus.APPROVED:
        return (
            notice_type,
            f"{label} Approved",
            f"Your {kind.value} '{title}' has been approved and is now visible to everyone.",
        )
    return (
        notice_type,
        f"{label} Rejected",
        f"Your {kind.value} '{title}' has been rejected by the admin.",
    )


def status_message(kind: ContentKind, status: ContentStatus) -> str:
    return f"{kind.value.capitalize()} {status.value} successfully"


def excerpt(text: str, limit: int = 50) -> str:
    """Short label for answers, which have no title of their own."""
    text = " ".join(text.split())
    if len(text) <= limit:
        return text
    return text[: limit - 3].rstrip() + "..."
