"""
LLM-powered mapping strategy.

This strategy sends the serialized schema (and optional sample rows) to a
chat model and parses the single JSON object it returns into an
AnalysisResult. The chat model is passed in explicitly, so any LangChain
BaseChatModel can be used, including fakes in tests.
"""

import json
import logging
import re
from typing import Any, List, Optional

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage
from pydantic import ValidationError

from ...utils.config import DEFAULT_RESPONSE_LANGUAGE
from ..models import AnalysisResult
from .base import BaseMappingStrategy, GraphMappingError, MappingRequest

logger = logging.getLogger(__name__)

_CODE_FENCE = re.compile(r"^```[a-zA-Z]*\s*|\s*```$")

SAMPLE_DATA_RULES = """
## Sample Data Analysis Rules:
6. Examine sample data to find potential relationships NOT defined by FK constraints
7. If column values in one table match values in another table's column, infer a relationship
8. Look for patterns like "user_id", "product_code" that suggest foreign key-like relationships
9. Note any inferred relationships in the reasoning, explaining how you discovered them
"""

RESPONSE_FORMAT = """
## Response Format:
Return a JSON object with this structure:
{
    "graphModel": {
        "nodes": [
            {
                "label": "Person",
                "sourceTable": "shop.users",
                "description": "A user of the system",
                "properties": [
                    {"sqlColumn": "id", "graphProperty": "id", "dataType": "int", "isKey": true},
                    {"sqlColumn": "user_name", "graphProperty": "name", "dataType": "string", "isKey": false}
                ]
            }
        ],
        "relationships": [
            {
                "type": "PURCHASED",
                "fromNode": "Person",
                "toNode": "Product",
                "sourceTable": "shop.orders",
                "description": "A user purchased a product",
                "properties": [
                    {"sqlColumn": "quantity", "graphProperty": "quantity", "dataType": "int", "isKey": false}
                ],
                "isJoinTable": true
            }
        ]
    },
    "reasoning": "Explanation of your design decisions...",
    "cypherDDL": "CREATE CONSTRAINT ON (n:Person) ASSERT n.id IS UNIQUE; ...",
    "cypherETL": "LOAD CSV FROM \\"shop_users.csv\\" WITH HEADER AS row CREATE (n:Person {...}); ..."
}

Data files are named <schema>_<table>.csv and have a header row.
Be thorough and professional. Generate production-ready Cypher scripts.
"""


class LLMStrategy(BaseMappingStrategy):
    """
    LLM-powered mapping strategy.

    Uses LangChain's BaseChatModel interface to support multiple providers.
    Results are not deterministic; two calls with the same request may
    return different graph models.
    """

    def __init__(
        self,
        llm_client: Optional[BaseChatModel] = None,
        response_language: str = DEFAULT_RESPONSE_LANGUAGE,
    ):
        """
        Initialize LLM strategy.

        Args:
            llm_client: LangChain chat model configured for JSON output
            response_language: Natural language for descriptions and reasoning
        """
        self.llm_client = llm_client
        self.response_language = response_language

    def get_strategy_name(self) -> str:
        """Return the name of this strategy."""
        return "llm"

    def build_system_prompt(self, has_sample_data: bool = False) -> str:
        """Build the fixed system instruction for graph modeling."""
        prompt_parts = [
            "You are an expert database architect specializing in graph database modeling.",
            "Your task is to analyze SQL schemas and convert them to Memgraph graph models.",
            "",
            f"**IMPORTANT: All descriptions and reasoning MUST be in "
            f"{self.response_language}.**",
            "",
            "## Analysis Rules:",
            "1. Tables with business meaning become Nodes (labels)",
            "2. Foreign Keys become Relationships",
            "3. Junction/Join tables (tables with mainly 2 FKs) become "
            "Relationships with properties",
            "4. Use semantic naming:",
            '   - Node labels should be singular PascalCase (e.g., "Person", "Product")',
            "   - Relationship types should be SCREAMING_SNAKE_CASE verbs "
            '(e.g., "PURCHASED", "BELONGS_TO")',
            '5. Infer meaning from table/column names (e.g., "tbl_usr" -> "User", '
            '"created_at" -> "createdAt")',
        ]

        if has_sample_data:
            prompt_parts.append(SAMPLE_DATA_RULES)

        prompt_parts.append(RESPONSE_FORMAT)
        return "\n".join(prompt_parts)

    def create_result(self, request: MappingRequest) -> AnalysisResult:
        """
        Ask the chat model for a graph model.

        Raises:
            GraphMappingError: If no client is configured, the call fails, or
                the response cannot be parsed
        """
        if not self.llm_client:
            raise GraphMappingError(
                "No LLM client provided for LLM-powered mapping. "
                "Please configure an API key or use the deterministic strategy."
            )

        if request.has_sample_data:
            logger.info(
                "Including sample data from %d tables", len(request.sample_data)
            )

        messages = [
            SystemMessage(content=self.build_system_prompt(request.has_sample_data)),
            HumanMessage(content=request.to_prompt()),
        ]

        logger.info("Sending schema to LLM for analysis...")
        try:
            response = self.llm_client.invoke(messages)
        except Exception as e:
            error_msg = f"LLM request failed: {e}"
            logger.error(error_msg)
            raise GraphMappingError(error_msg) from e

        logger.info("Received LLM response")

        result = self.parse_response(_message_text(response.content))
        logger.info(
            "LLM generated %d nodes and %d relationships",
            len(result.graph_model.nodes),
            len(result.graph_model.relationships),
        )
        return result

    @staticmethod
    def parse_response(text: str) -> AnalysisResult:
        """
        Parse the JSON object returned by the model.

        Markdown code fences are stripped and keys are matched
        case-insensitively.

        Raises:
            GraphMappingError: If the payload is empty or not a valid result
        """
        payload = _CODE_FENCE.sub("", (text or "").strip())
        if not payload:
            raise GraphMappingError("Failed to parse LLM response: empty response")

        try:
            data = json.loads(payload)
        except json.JSONDecodeError as e:
            raise GraphMappingError(f"Failed to parse LLM response: {e}") from e

        if not isinstance(data, dict):
            raise GraphMappingError(
                "Failed to parse LLM response: expected a JSON object, "
                f"got {type(data).__name__}"
            )

        try:
            return AnalysisResult.model_validate(data)
        except ValidationError as e:
            raise GraphMappingError(f"Failed to parse LLM response: {e}") from e


def _message_text(content: Any) -> str:
    """Flatten message content that may be a list of content blocks."""
    if isinstance(content, str):
        return content

    parts: List[str] = []
    for block in content or []:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)
