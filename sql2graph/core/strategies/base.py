"""
Base strategy interface for schema to graph mapping.

This module defines the interface that all mapping strategies must
implement, along with the request they receive.
"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from ...database.models import SampleDataset, SchemaSnapshot
from ..models import AnalysisResult


class GraphMappingError(RuntimeError):
    """Raised when a strategy cannot produce a complete analysis result."""


@dataclass
class MappingRequest:
    """Schema snapshot plus optional sample rows to be mapped to a graph."""

    schema: SchemaSnapshot
    sample_data: Optional[SampleDataset] = None

    @property
    def has_sample_data(self) -> bool:
        return bool(self.sample_data)

    def to_prompt(self) -> str:
        """Render the request as the text block sent to the mapping collaborator."""
        schema_json = json.dumps(
            self.schema.to_payload(), indent=2, ensure_ascii=False, default=str
        )
        prompt = (
            "Analyze this SQL schema and generate a graph model:\n\n"
            f"## Schema\n{schema_json}"
        )

        if self.has_sample_data:
            sample_json = json.dumps(
                self.sample_data, indent=2, ensure_ascii=False, default=str
            )
            prompt += (
                "\n\n## Sample Data (use this to infer hidden relationships)\n"
                f"{sample_json}"
            )

        return prompt


class BaseMappingStrategy(ABC):
    """Base class for all mapping strategies."""

    @abstractmethod
    def create_result(self, request: MappingRequest) -> AnalysisResult:
        """
        Create a graph model and migration scripts from a schema.

        Args:
            request: Schema snapshot and optional sample data

        Returns:
            AnalysisResult: Graph model, reasoning and Cypher scripts

        Raises:
            GraphMappingError: If no complete result can be produced
        """
        pass

    @abstractmethod
    def get_strategy_name(self) -> str:
        """Return the name of this strategy."""
        pass
