"""
Deterministic mapping strategy.

This strategy creates graph models using rule-based approaches without AI:
entity tables become nodes, foreign keys become relationships and join
tables become relationships carrying their remaining columns.
"""

import logging
from collections import Counter
from typing import Dict, List

from ...database.models import ForeignKeyInfo, SchemaSnapshot, TableInfo
from ...query_generation.cypher_generator import CypherGenerator
from ...query_generation.schema_utilities import SchemaUtilities
from ..models import (
    AnalysisResult,
    GraphModel,
    NodeType,
    PropertyMapping,
    RelationshipType,
)
from .base import BaseMappingStrategy, MappingRequest

logger = logging.getLogger(__name__)


def is_join_table(table: TableInfo, foreign_keys: List[ForeignKeyInfo]) -> bool:
    """
    Determine if a table is a join table (many-to-many).

    A join table has at least two foreign keys and either more than half
    of its columns are foreign keys or every other column is metadata.
    """
    if len(foreign_keys) < 2 or not table.columns:
        return False

    fk_column_names = {fk.from_column for fk in foreign_keys}
    non_fk_columns = [
        col.name
        for col in table.columns
        if col.name not in fk_column_names
        and not SchemaUtilities.is_metadata_column(col.name)
    ]

    fk_ratio = len(fk_column_names) / len(table.columns)
    return fk_ratio > 0.5 or len(non_fk_columns) == 0


class DeterministicStrategy(BaseMappingStrategy):
    """Deterministic mapping strategy using rule-based approaches."""

    def __init__(self, cypher_generator: CypherGenerator | None = None):
        self.cypher_generator = cypher_generator or CypherGenerator()

    def get_strategy_name(self) -> str:
        """Return the name of this strategy."""
        return "deterministic"

    def create_result(self, request: MappingRequest) -> AnalysisResult:
        """Create a graph model deterministically from the schema snapshot."""
        logger.info("Creating deterministic graph model...")

        snapshot = request.schema
        fks_by_table: Dict[str, List[ForeignKeyInfo]] = {}
        for fk in snapshot.foreign_keys:
            fks_by_table.setdefault(fk.from_table, []).append(fk)

        join_tables = [
            table
            for table in snapshot.tables
            if is_join_table(table, fks_by_table.get(table.full_name, []))
        ]
        join_names = {table.full_name for table in join_tables}

        nodes: List[NodeType] = []
        labels: Dict[str, str] = {}
        for table in snapshot.tables:
            if table.full_name in join_names:
                continue
            node = self._table_to_node(table)
            nodes.append(node)
            labels[table.full_name] = node.label

        relationships: List[RelationshipType] = []
        for table in snapshot.tables:
            table_fks = fks_by_table.get(table.full_name, [])
            if table.full_name in join_names:
                relationship = self._join_table_to_relationship(table, table_fks, labels)
                if relationship:
                    relationships.append(relationship)
                continue

            target_counts = Counter(fk.to_table for fk in table_fks)
            for fk in table_fks:
                to_label = labels.get(fk.to_table)
                if to_label is None:
                    logger.debug(
                        "Skipping %s: target %s is not a node",
                        fk.constraint_name,
                        fk.to_table,
                    )
                    continue
                relationships.append(
                    RelationshipType(
                        type=self._foreign_key_relationship_name(
                            fk, repeated_target=target_counts[fk.to_table] > 1
                        ),
                        from_node=labels[table.full_name],
                        to_node=to_label,
                        source_table=table.full_name,
                        description=(
                            f"{table.full_name}.{fk.from_column} references "
                            f"{fk.to_table}.{fk.to_column}"
                        ),
                    )
                )

        model = GraphModel(nodes=nodes, relationships=relationships)

        logger.info(
            "Deterministic model: %d nodes, %d relationships (%d join tables)",
            len(nodes),
            len(relationships),
            len(join_tables),
        )

        return AnalysisResult(
            graph_model=model,
            reasoning=self._build_reasoning(snapshot, join_tables, model),
            cypher_ddl=self.cypher_generator.generate_ddl(model),
            cypher_etl=self.cypher_generator.generate_etl(model, snapshot),
        )

    @staticmethod
    def _foreign_key_relationship_name(
        fk: ForeignKeyInfo, repeated_target: bool
    ) -> str:
        # Two FKs to one table need distinct types, so name them by column
        if repeated_target:
            return SchemaUtilities.column_to_relationship_name(fk.from_column)
        return SchemaUtilities.generate_relationship_name(fk.to_table.split(".")[-1])

    @staticmethod
    def _table_to_node(table: TableInfo) -> NodeType:
        return NodeType(
            label=SchemaUtilities.table_name_to_label(table.table_name),
            source_table=table.full_name,
            description=f"Rows of table {table.full_name}",
            properties=[
                PropertyMapping(
                    sql_column=col.name,
                    graph_property=SchemaUtilities.column_name_to_property(col.name),
                    data_type=col.data_type,
                    is_key=col.is_primary_key,
                )
                for col in table.columns
            ],
        )

    @staticmethod
    def _join_table_to_relationship(
        table: TableInfo,
        foreign_keys: List[ForeignKeyInfo],
        labels: Dict[str, str],
    ) -> RelationshipType | None:
        fk1, fk2 = foreign_keys[0], foreign_keys[1]
        from_label = labels.get(fk1.to_table)
        to_label = labels.get(fk2.to_table)
        if from_label is None or to_label is None:
            logger.warning(
                "Join table %s links tables that are not nodes; skipping",
                table.full_name,
            )
            return None

        fk_columns = {fk.from_column for fk in foreign_keys}
        properties = [
            PropertyMapping(
                sql_column=col.name,
                graph_property=SchemaUtilities.column_name_to_property(col.name),
                data_type=col.data_type,
            )
            for col in table.columns
            if col.name not in fk_columns
            and not SchemaUtilities.is_metadata_column(col.name)
        ]

        return RelationshipType(
            type=SchemaUtilities.generate_relationship_name(
                fk2.to_table, join_table=table.table_name
            ),
            from_node=from_label,
            to_node=to_label,
            source_table=table.full_name,
            description=f"Many-to-many link stored in {table.full_name}",
            properties=properties,
            is_join_table=True,
        )

    @staticmethod
    def _build_reasoning(
        snapshot: SchemaSnapshot, join_tables: List[TableInfo], model: GraphModel
    ) -> str:
        lines = [
            f"Mapped {len(snapshot.tables)} tables of {snapshot.database_name} "
            f"to {len(model.nodes)} node labels and "
            f"{len(model.relationships)} relationship types.",
            "Each entity table becomes a node and each foreign key a relationship "
            "pointing at the referenced table.",
        ]
        if join_tables:
            names = ", ".join(table.full_name for table in join_tables)
            lines.append(f"Join tables mapped to relationships: {names}.")
        return "\n".join(lines)
