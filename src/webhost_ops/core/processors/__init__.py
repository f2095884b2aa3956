"""Core processors for stack operations."""

from .plan_builder import build_plan, summarize_plan
from .report_generator import CSVReportGenerator
from .stack_inspector import StackInspector
from .step_processor import ProcessingResult, StepProcessor

__all__ = [
    "build_plan",
    "summarize_plan",
    "CSVReportGenerator",
    "StackInspector",
    "ProcessingResult",
    "StepProcessor",
]
