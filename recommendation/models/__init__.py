# Export all recommendation models for easy imports
from .base import Base
from .program import StudyProgram
from .user_preference import UserPreferenceRecord
from .interaction import UserInteraction

__all__ = [
    "Base",
    "StudyProgram",
    "UserPreferenceRecord",
    "UserInteraction",
]
