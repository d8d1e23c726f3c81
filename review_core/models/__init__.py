from .core import Idea, PortalRole, PortalSetting, TimeStampedModel
from .workflow import ReviewStage, ReviewWorkflow
from .stage_state import IdeaStageState
from .stage_event import ReviewStageEvent

__all__ = [
    "TimeStampedModel",
    "Idea",
    "PortalRole",
    "PortalSetting",
    "ReviewWorkflow",
    "ReviewStage",
    "IdeaStageState",
    "ReviewStageEvent",
]
