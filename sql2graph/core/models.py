"""
Graph model definitions.

These models describe the inferred graph schema returned by a mapping
strategy. Field aliases follow the camelCase JSON contract of the mapping
response, and keys are matched case-insensitively when parsing.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

DEFAULT_NODE_COLOR = "#3b82f6"


class MappingModel(BaseModel):
    """Base model that parses keys case-insensitively and ignores nulls."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _normalize_keys(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data

        lookup: Dict[str, str] = {}
        for name, field_info in cls.model_fields.items():
            key = field_info.alias or name
            lookup[name.lower()] = key
            lookup[key.lower()] = key

        # null falls back to the field default
        return {
            lookup.get(str(key).lower(), key): value
            for key, value in data.items()
            if value is not None
        }


class PropertyMapping(MappingModel):
    """Mapping of a SQL column to a graph property."""

    sql_column: str = Field(default="", alias="sqlColumn")
    graph_property: str = Field(default="", alias="graphProperty")
    data_type: str = Field(default="", alias="dataType")
    is_key: bool = Field(default=False, alias="isKey")


class NodeType(MappingModel):
    """Node label inferred from a source table."""

    label: str = ""
    source_table: str = Field(default="", alias="sourceTable")
    description: str = ""
    properties: List[PropertyMapping] = Field(default_factory=list)

    # Visualization only, assigned after the model is received
    x: float = 0.0
    y: float = 0.0
    color: str = DEFAULT_NODE_COLOR


class RelationshipType(MappingModel):
    """Relationship type inferred from a foreign key or join table."""

    type: str = ""
    from_node: str = Field(default="", alias="fromNode")
    to_node: str = Field(default="", alias="toNode")
    source_table: str = Field(default="", alias="sourceTable")
    description: str = ""
    properties: List[PropertyMapping] = Field(default_factory=list)
    is_join_table: bool = Field(default=False, alias="isJoinTable")


class GraphModel(MappingModel):
    """Graph schema with node and relationship types."""

    nodes: List[NodeType] = Field(default_factory=list)
    relationships: List[RelationshipType] = Field(default_factory=list)

    def get_node(self, label: str) -> Optional[NodeType]:
        for node in self.nodes:
            if node.label == label:
                return node
        return None


class AnalysisResult(MappingModel):
    """Graph model plus reasoning and generated Cypher scripts."""

    graph_model: GraphModel = Field(default_factory=GraphModel, alias="graphModel")
    reasoning: str = ""
    cypher_ddl: str = Field(default="", alias="cypherDDL")
    cypher_etl: str = Field(default="", alias="cypherETL")

    def to_payload(self) -> Dict[str, Any]:
        """Serialize with the camelCase field names of the JSON contract."""
        return self.model_dump(by_alias=True)
