from .hooks import ScenarioHooks, launch_app
from .planity_steps import PlanitySteps
from .registry import StepNotFound, StepRegistry
from .runner import StepRunner

__all__ = [
    "ScenarioHooks",
    "launch_app",
    "PlanitySteps",
    "StepNotFound",
    "StepRegistry",
    "StepRunner",
]
