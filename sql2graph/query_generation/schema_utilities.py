"""
Schema transformation utilities for SQL to graph mapping.
Provides naming conventions for transforming SQL schema elements to graph
equivalents.
"""

import logging
import re

logger = logging.getLogger(__name__)

METADATA_COLUMNS = {
    "id",
    "created_at",
    "updated_at",
    "created_on",
    "updated_on",
    "timestamp",
}

_WORD_SPLIT = re.compile(r"[^0-9a-zA-Z]+")


class SchemaUtilities:
    """Utilities for schema transformation and naming conventions."""

    @staticmethod
    def singularize(word: str) -> str:
        """Naive English singular form (e.g., 'categories' -> 'category')."""
        lower = word.lower()
        if lower.endswith("ies") and len(word) > 3:
            return word[:-3] + ("Y" if word[-1].isupper() else "y")
        if lower.endswith(("sses", "xes", "ches", "shes")):
            return word[:-2]
        if lower.endswith("s") and not lower.endswith("ss") and len(word) > 1:
            return word[:-1]
        return word

    @staticmethod
    def split_words(name: str) -> list[str]:
        return [word for word in _WORD_SPLIT.split(name) if word]

    @staticmethod
    def table_name_to_label(table_name: str) -> str:
        """Convert table name to Cypher node label.

        Args:
            table_name: SQL table name (e.g., 'user_profiles')

        Returns:
            Singular PascalCase label (e.g., 'UserProfile')
        """
        words = SchemaUtilities.split_words(table_name)
        if not words:
            return table_name
        words[-1] = SchemaUtilities.singularize(words[-1])
        return "".join(word[:1].upper() + word[1:] for word in words)

    @staticmethod
    def column_name_to_property(column_name: str) -> str:
        """Convert column name to camelCase property name ('created_at' -> 'createdAt')."""
        words = SchemaUtilities.split_words(column_name)
        if not words:
            return column_name
        first, rest = words[0], words[1:]
        return first[:1].lower() + first[1:] + "".join(
            word[:1].upper() + word[1:] for word in rest
        )

    @staticmethod
    def generate_relationship_name(to_table: str, join_table: str | None = None) -> str:
        """Generate relationship name.

        Args:
            to_table: Target table name
            join_table: Join table name for many-to-many relationships

        Returns:
            Relationship name in SCREAMING_SNAKE_CASE
        """
        if join_table:
            return "_".join(SchemaUtilities.split_words(join_table)).upper()
        to_label = SchemaUtilities.table_name_to_label(to_table)
        to_words = re.findall(r"[A-Z]+[a-z0-9]*|[a-z0-9]+", to_label)
        return "HAS_" + "_".join(to_words).upper()

    @staticmethod
    def column_to_relationship_name(column_name: str) -> str:
        """Relationship name from a foreign key column ('billing_address_id' -> 'HAS_BILLING_ADDRESS')."""
        words = SchemaUtilities.split_words(column_name)
        if len(words) > 1 and words[-1].lower() == "id":
            words = words[:-1]
        return "HAS_" + "_".join(words).upper()

    @staticmethod
    def is_metadata_column(column_name: str) -> bool:
        """Check if a column is a metadata/system column."""
        return column_name.lower() in METADATA_COLUMNS
