"""
Cypher query generation for SQL to graph migration.

Builds the Memgraph schema-definition script (constraints and indexes) and
the data-load script that reads the CSV files written by the exporter.
"""

import logging
from typing import Dict, List, Optional, Set

from ..core.models import GraphModel, NodeType, PropertyMapping, RelationshipType
from ..database.models import ForeignKeyInfo, SchemaSnapshot, TableInfo

logger = logging.getLogger(__name__)

INTEGER_TYPES = {"int", "integer", "bigint", "smallint", "tinyint", "long", "serial"}
FLOAT_TYPES = {"float", "double", "decimal", "numeric", "real", "money", "number"}
BOOLEAN_TYPES = {"bool", "boolean", "bit"}


def csv_file_name(table: TableInfo) -> str:
    """Archive entry name for a table's exported rows."""
    return f"{table.schema_name}_{table.table_name}.csv"


def _key_property(node: NodeType) -> Optional[PropertyMapping]:
    for prop in node.properties:
        if prop.is_key:
            return prop
    return None


class CypherGenerator:
    """Generates Cypher scripts for a graph model."""

    def generate_ddl(self, model: GraphModel) -> str:
        """Generate constraint and index creation queries for key properties."""
        queries: List[str] = []

        for node in model.nodes:
            for prop in node.properties:
                if not prop.is_key:
                    continue
                queries.append(
                    f"CREATE CONSTRAINT ON (n:{node.label}) "
                    f"ASSERT n.{prop.graph_property} IS UNIQUE;"
                )
                queries.append(f"CREATE INDEX ON :{node.label}({prop.graph_property});")

        return "\n".join(queries)

    def generate_etl(self, model: GraphModel, snapshot: SchemaSnapshot) -> str:
        """Generate LOAD CSV statements creating nodes, then relationships."""
        statements: List[str] = []

        for node in model.nodes:
            statement = self._node_statement(node, snapshot)
            if statement:
                statements.append(statement)

        # FKs consumed per source table, so repeated targets map to distinct columns
        used_by_source: Dict[str, Set[str]] = {}
        for relationship in model.relationships:
            statement = self._relationship_statement(
                relationship, model, snapshot, used_by_source
            )
            if statement:
                statements.append(statement)

        return "\n\n".join(statements)

    def _node_statement(self, node: NodeType, snapshot: SchemaSnapshot) -> Optional[str]:
        table = snapshot.find_table(node.source_table)
        if table is None:
            logger.warning(
                "Skipping load statement for %s: table %s not found",
                node.label,
                node.source_table,
            )
            return None

        assignments = ", ".join(
            f"{prop.graph_property}: {self._value_expression(prop, prop.sql_column)}"
            for prop in node.properties
        )
        return (
            f'LOAD CSV FROM "{csv_file_name(table)}" WITH HEADER AS row\n'
            f"CREATE (n:{node.label} {{{assignments}}});"
        )

    def _relationship_statement(
        self,
        relationship: RelationshipType,
        model: GraphModel,
        snapshot: SchemaSnapshot,
        used_by_source: Dict[str, Set[str]],
    ) -> Optional[str]:
        source = snapshot.find_table(relationship.source_table)
        from_node = model.get_node(relationship.from_node)
        to_node = model.get_node(relationship.to_node)
        if source is None or from_node is None or to_node is None:
            logger.warning(
                "Skipping load statement for relationship %s: missing table or node",
                relationship.type,
            )
            return None

        used = used_by_source.setdefault(source.full_name, set())
        from_match = self._endpoint_match(
            source, from_node, snapshot, used, prefer_own_key=not relationship.is_join_table
        )
        to_match = self._endpoint_match(
            source, to_node, snapshot, used, prefer_own_key=False
        )
        if from_match is None or to_match is None:
            logger.warning(
                "Skipping load statement for relationship %s: cannot resolve endpoints",
                relationship.type,
            )
            return None

        rel_props = ""
        if relationship.properties:
            rel_props = " {" + ", ".join(
                f"{prop.graph_property}: {self._value_expression(prop, prop.sql_column)}"
                for prop in relationship.properties
            ) + "}"

        return (
            f'LOAD CSV FROM "{csv_file_name(source)}" WITH HEADER AS row\n'
            f"MATCH (a:{from_node.label} {{{from_match}}}), "
            f"(b:{to_node.label} {{{to_match}}})\n"
            f"CREATE (a)-[:{relationship.type}{rel_props}]->(b);"
        )

    def _endpoint_match(
        self,
        source: TableInfo,
        node: NodeType,
        snapshot: SchemaSnapshot,
        used: Set[str],
        prefer_own_key: bool,
    ) -> Optional[str]:
        """Build the `{key: row.column}` pattern locating one relationship end."""
        key = _key_property(node)
        node_table = snapshot.find_table(node.source_table)
        if key is None or node_table is None:
            return None

        if prefer_own_key and node_table.full_name == source.full_name:
            column = key.sql_column
        else:
            fk = self._find_foreign_key(snapshot, source, node_table, used)
            if fk is None:
                return None
            used.add(fk.constraint_name + "." + fk.from_column)
            column = fk.from_column

        return f"{key.graph_property}: {self._value_expression(key, column)}"

    @staticmethod
    def _find_foreign_key(
        snapshot: SchemaSnapshot,
        source: TableInfo,
        target: TableInfo,
        used: Set[str],
    ) -> Optional[ForeignKeyInfo]:
        for fk in snapshot.foreign_keys:
            if fk.constraint_name + "." + fk.from_column in used:
                continue
            if fk.from_table == source.full_name and fk.to_table == target.full_name:
                return fk
        return None

    @staticmethod
    def _value_expression(prop: PropertyMapping, column: str) -> str:
        base_type = prop.data_type.lower().split("(")[0].strip()
        value = f"row.{column}"
        if base_type in INTEGER_TYPES:
            return f"toInteger({value})"
        if base_type in FLOAT_TYPES:
            return f"toFloat({value})"
        if base_type in BOOLEAN_TYPES:
            return f"toBoolean({value})"
        return value
