"""Shared domain models for the carelink platform."""
from .analysis import (
    IntentCategory,
    EntityType,
    Sentiment,
    Intent,
    Entity,
    AnalysisResult,
    KnowledgeItem,
    AnalysisContext,
)

__all__ = [
    "IntentCategory",
    "EntityType",
    "Sentiment",
    "Intent",
    "Entity",
    "AnalysisResult",
    "KnowledgeItem",
    "AnalysisContext",
]
