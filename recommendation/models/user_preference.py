from sqlalchemy import Column, Integer, String, Text, Float, Boolean, DateTime, JSON

from .base import Base


class UserPreferenceRecord(Base):
    __tablename__ = "user_preferences"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, unique=True, index=True, nullable=False)

    # Budget
    budget_min = Column(Float)
    budget_max = Column(Float)

    # Multi-valued preferences
    countries = Column(JSON)
    degree_type = Column(JSON)
    specialization = Column(JSON)
    duration = Column(JSON)
    preferred_cities = Column(JSON)

    # Single-valued preferences
    study_level = Column(String)
    language_preference = Column(String)
    scholarship_needed = Column(Boolean, default=False)
    goals = Column(Text)

    updated_at = Column(DateTime)
