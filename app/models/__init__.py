from .classroom import Classroom
from .child import Child
from .behavior_log import BehaviorLog
from .classroom_log import ClassroomLog

__all__ = [
    "Classroom",
    "Child",
    "BehaviorLog",
    "ClassroomLog",
]
