"""
Mapping strategies for schema to graph conversion.

This package contains different strategies for creating graph models:
- DeterministicStrategy: Rule-based deterministic modeling
- LLMStrategy: AI-powered modeling using language models
"""

from .base import BaseMappingStrategy, GraphMappingError, MappingRequest
from .deterministic import DeterministicStrategy
from .llm import LLMStrategy

__all__ = [
    "BaseMappingStrategy",
    "GraphMappingError",
    "MappingRequest",
    "DeterministicStrategy",
    "LLMStrategy",
]
