"""Media control: cooldown, command execution and notifications."""
from .action_executor import ActionExecutor
from .cooldown import CooldownClock
from .feedback_manager import FeedbackManager
from .media_target import SimulatedMediaTarget

__all__ = ["ActionExecutor", "CooldownClock", "FeedbackManager", "SimulatedMediaTarget"]
