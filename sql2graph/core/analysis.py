"""
Schema analysis orchestration.

Turns a schema snapshot (and optional sample rows) into an AnalysisResult
by delegating to a mapping strategy, then lays out the resulting nodes.
"""

import logging
from typing import Optional

from ..database.models import SampleDataset, SchemaSnapshot
from ..utils.config import AnalysisConfig
from ..utils.environment import create_llm_client
from .layout import assign_node_layout
from .models import AnalysisResult
from .strategies import (
    BaseMappingStrategy,
    DeterministicStrategy,
    LLMStrategy,
    MappingRequest,
)

logger = logging.getLogger(__name__)


def build_strategy(config: AnalysisConfig) -> BaseMappingStrategy:
    """
    Create the mapping strategy named in the configuration.

    Raises:
        ConfigurationError: If the LLM strategy is selected without credentials
    """
    if config.strategy == "deterministic":
        return DeterministicStrategy()
    return LLMStrategy(
        llm_client=create_llm_client(config),
        response_language=config.response_language,
    )


class SchemaAnalysisService:
    """Requests a graph mapping for a schema from the configured strategy."""

    def __init__(self, strategy: BaseMappingStrategy):
        self.strategy = strategy

    def analyze(
        self,
        schema: SchemaSnapshot,
        sample_data: Optional[SampleDataset] = None,
    ) -> AnalysisResult:
        """
        Analyze a schema and generate a graph model recommendation.

        Args:
            schema: Extracted schema snapshot
            sample_data: Optional sampled rows keyed by table full name

        Returns:
            AnalysisResult with positioned nodes

        Raises:
            GraphMappingError: If the strategy cannot produce a result
        """
        logger.info(
            "Analyzing %d tables with %s strategy",
            len(schema.tables),
            self.strategy.get_strategy_name(),
        )

        request = MappingRequest(schema=schema, sample_data=sample_data)
        result = self.strategy.create_result(request)
        assign_node_layout(result.graph_model)
        return result
