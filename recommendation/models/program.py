from sqlalchemy import Column, String, Text, Float, Boolean, DateTime

from .base import Base


class StudyProgram(Base):
    __tablename__ = "programs"

    id = Column(String, primary_key=True)
    university = Column(String)
    name = Column(String)
    degree_type = Column(String)
    country = Column(String)
    city = Column(String)
    tuition_fee = Column(Float)
    tuition_fee_currency = Column(String)
    specialization = Column(Text)  # comma-separated tags
    duration = Column(String)
    study_level = Column(String)
    language_requirements = Column(String)
    scholarship_available = Column(Boolean, default=False)
    created_at = Column(DateTime)
