from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, DateTime

from .base import Base


class UserInteraction(Base):
    """Append-only interaction log; rows are never updated in place."""
    __tablename__ = "user_interactions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, index=True, nullable=False)
    action = Column(String, nullable=False)  # view/save/apply/search
    program_id = Column(String)
    search_query = Column(Text)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
