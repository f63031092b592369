"""
Database data models.

This module contains the data structures used to represent extracted
relational schema metadata in a standardized way.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Any, Optional

# Table full name -> ordered rows (column name -> value or None)
SampleDataset = Dict[str, List[Dict[str, Any]]]


@dataclass
class ColumnInfo:
    """Standardized column information across different database systems."""

    name: str
    data_type: str
    is_nullable: bool
    is_primary_key: bool = False
    is_foreign_key: bool = False
    max_length: Optional[int] = None
    ordinal_position: int = 0

    def to_payload(self) -> Dict[str, Any]:
        """Convert to the camelCase payload sent to mapping strategies."""
        return {
            "columnName": self.name,
            "dataType": self.data_type,
            "isNullable": self.is_nullable,
            "isPrimaryKey": self.is_primary_key,
            "isForeignKey": self.is_foreign_key,
            "maxLength": self.max_length,
        }


@dataclass
class ForeignKeyInfo:
    """Single-column foreign key, tables are schema-qualified."""

    constraint_name: str
    from_table: str
    from_column: str
    to_table: str
    to_column: str

    def to_payload(self) -> Dict[str, Any]:
        """Convert to the camelCase payload sent to mapping strategies."""
        return {
            "constraintName": self.constraint_name,
            "fromTable": self.from_table,
            "fromColumn": self.from_column,
            "toTable": self.to_table,
            "toColumn": self.to_column,
        }


@dataclass
class TableInfo:
    """Standardized table information."""

    schema_name: str
    table_name: str
    columns: List[ColumnInfo] = field(default_factory=list)
    primary_key_column: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.schema_name}.{self.table_name}"

    def get_column(self, column_name: str) -> Optional[ColumnInfo]:
        for column in self.columns:
            if column.name == column_name:
                return column
        return None

    def to_payload(self) -> Dict[str, Any]:
        """Convert to the camelCase payload sent to mapping strategies."""
        return {
            "schemaName": self.schema_name,
            "tableName": self.table_name,
            "fullName": self.full_name,
            "columns": [col.to_payload() for col in self.columns],
            "primaryKeyColumn": self.primary_key_column,
        }


@dataclass
class SchemaSnapshot:
    """
    Point-in-time copy of a source database schema.

    Built fresh for every analysis request and discarded once the mapping
    strategy has consumed it.
    """

    database_name: str
    tables: List[TableInfo] = field(default_factory=list)
    foreign_keys: List[ForeignKeyInfo] = field(default_factory=list)

    def find_table(self, name: str) -> Optional[TableInfo]:
        """
        Look up a table by fully-qualified name, falling back to the bare
        table name.

        Args:
            name: "schema.table" or "table"

        Returns:
            The first matching TableInfo or None
        """
        for table in self.tables:
            if table.full_name == name or table.table_name == name:
                return table
        return None

    def to_payload(self) -> Dict[str, Any]:
        """
        Convert to the camelCase payload sent to mapping strategies.

        Returns:
            Dictionary with databaseName, tables and foreignKeys
        """
        return {
            "databaseName": self.database_name,
            "tables": [table.to_payload() for table in self.tables],
            "foreignKeys": [fk.to_payload() for fk in self.foreign_keys],
        }
