"""User session record."""
from datetime import datetime, timedelta
from typing import Dict
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from bharatrewards.core.config import settings
from bharatrewards.models.question import Question
from bharatrewards.models.user import User


class UserSession(BaseModel):
    """Snapshot of the logged-in user, owned by whoever holds the session id.

    The snapshot is only refreshed when the user is saved through this
    session; edits made elsewhere leave it stale until the next login.
    `issued_questions` holds the questions of the quiz currently being
    played, answers included, so answers are checked server-side.
    """

    id: str
    user: User
    created_at: datetime = Field(default_factory=datetime.utcnow)
    issued_questions: Dict[str, Question] = Field(default_factory=dict)

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    def is_expired(self, now: datetime = None) -> bool:
        lifetime = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        return (now or datetime.utcnow()) - self.created_at > lifetime
