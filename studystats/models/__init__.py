from studystats.models.base import Base
from studystats.models.session import Session
from studystats.models.task import Task
from studystats.models.user import User

__all__ = [
    "Base",
    "Session",
    "Task",
    "User",
]
