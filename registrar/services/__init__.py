"""
Services module coordinating stores with the grading core.
"""

from .grading_service import GradingService, AssessmentInput, PercentageReport
from .prerequisite_service import PrerequisiteChecker

__all__ = [
    "GradingService",
    "AssessmentInput",
    "PercentageReport",
    "PrerequisiteChecker",
]
