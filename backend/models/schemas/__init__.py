"""Pydantic records passed between the scoring and generation services."""

from models.schemas.analysis import (
    AnalysisResult,
    AnalysisVariant,
    ATSAnalysis,
    GeneralAnalysis,
    JDMatchAnalysis,
    SectionScores,
)
from models.schemas.generation import GenerationResult
from models.schemas.relevance import RelevanceMetadata, RelevanceResult
from models.schemas.safety import SafetyReport
from models.schemas.sections import ContactInfo, SectionBundle

__all__ = [
    "AnalysisResult",
    "AnalysisVariant",
    "ATSAnalysis",
    "GeneralAnalysis",
    "JDMatchAnalysis",
    "SectionScores",
    "GenerationResult",
    "RelevanceMetadata",
    "RelevanceResult",
    "SafetyReport",
    "ContactInfo",
    "SectionBundle",
]
