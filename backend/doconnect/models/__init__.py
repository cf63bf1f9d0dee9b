"""ORM Models — SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - User is the owner of every piece of content; Question owns its Answers

Design Decisions:
    - One file per entity
    - All models imported here so string-based relationship() references and
      Question.answer_count resolve before any query runs
"""

from doconnect.models.user import Role, User, user_roles  # noqa: F401
from doconnect.models.user_profile import UserProfile  # noqa: F401
from doconnect.models.question import Question  # noqa: F401
from doconnect.models.answer import Answer  # noqa: F401
from doconnect.models.image import Image  # noqa: F401
from doconnect.models.vote import Vote  # noqa: F401
from doconnect.models.notification import Notification  # noqa: F401
