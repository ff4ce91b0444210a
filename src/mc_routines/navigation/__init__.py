"""Navigation goals and supervised movement."""

from .goals import Goal, GoalFollow, GoalInvert, GoalLookAtBlock, GoalNear, GoalXZ
from .navigator import ApproachOptions, Navigator

__all__ = [
    "ApproachOptions",
    "Goal",
    "GoalFollow",
    "GoalInvert",
    "GoalLookAtBlock",
    "GoalNear",
    "GoalXZ",
    "Navigator",
]
