from .api import build_plan, configure_logging, detect, is_cue_sheet, plan_launch, resolve_launch

__all__ = [
    "build_plan",
    "configure_logging",
    "detect",
    "is_cue_sheet",
    "plan_launch",
    "resolve_launch",
]
