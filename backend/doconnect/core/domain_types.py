"""Domain Types — enums shared by models, schemas and services.

Invariants:
    - All valid states encoded as Enums — no raw string matching in services
    - VoteType values are the signed weight of the vote (+1 / -1)

Design Decisions:
    - str Enums for statuses and notification types: serialize to JSON as-is
    - VoteType is an int Enum so net score is a plain sum
"""

from enum import Enum


class ContentStatus(str, Enum):
    """Moderation state shared by questions and answers."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class VoteType(int, Enum):
    UPVOTE = 1
    DOWNVOTE = -1


class VoteAction(str, Enum):
    """What casting a vote does to the (user, target) vote row."""
    INSERT = "insert"
    FLIP = "flip"
    REMOVE = "remove"


class ContentKind(str, Enum):
    QUESTION = "question"
    ANSWER = "answer"


class NotificationType(str, Enum):
    QUESTION_ANSWER = "question_answer"
    QUESTION_VOTE = "question_vote"
    ANSWER_VOTE = "answer_vote"
    QUESTION_APPROVED = "question_approved"
    ANSWER_APPROVED = "answer_approved"
    QUESTION_REJECTED = "question_rejected"
    ANSWER_REJECTED = "answer_rejected"
    CONTENT_PENDING = "content_pending"


class RoleName(str, Enum):
    ADMIN = "Admin"
    USER = "User"
