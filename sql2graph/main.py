"""
SQL to Graph Schema Analyzer - Main Entry Point

Reads relational schema metadata, asks a mapping strategy for a graph
model with Cypher scripts, and exports table data for the load script.

Run with: sql2graph analyze
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from .core.analysis import SchemaAnalysisService, build_strategy
from .core.models import AnalysisResult
from .core.strategies import GraphMappingError
from .database import DatabaseAnalyzerFactory, TableInfo
from .export import CsvExportService
from .utils import (
    AnalysisConfig,
    ConfigurationError,
    DatabaseConnectionError,
    load_environment,
    print_config_summary,
    print_environment_help,
    probe_source_connection,
)

logger = logging.getLogger(__name__)

LOG_LEVEL_CHOICES = ["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET"]


def parse_cli_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    env_log_level = os.getenv("SQL2GRAPH_LOG_LEVEL")

    parser = argparse.ArgumentParser(
        prog="sql2graph",
        description="Relational schema to graph model analyzer",
    )
    parser.add_argument(
        "--url",
        help="Source database URL. Overrides SOURCE_DATABASE_URL.",
    )
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVEL_CHOICES,
        default=env_log_level.upper() if env_log_level else None,
        type=str.upper,
        help="Logging level. Overrides SQL2GRAPH_LOG_LEVEL.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("test-connection", help="Check the source connection")

    analyze = subparsers.add_parser("analyze", help="Generate a graph model")
    analyze.add_argument(
        "--strategy",
        choices=["llm", "deterministic"],
        type=str.lower,
        help="Mapping strategy. Overrides SQL2GRAPH_STRATEGY.",
    )
    analyze.add_argument(
        "--sample-size",
        type=int,
        help="Rows sampled per table, 0 disables. Overrides SQL2GRAPH_SAMPLE_SIZE.",
    )
    analyze.add_argument(
        "--output",
        type=Path,
        default=Path("graph_model.json"),
        help="Where to write the analysis result JSON",
    )
    analyze.add_argument("--ddl-file", type=Path, help="Write the schema script here")
    analyze.add_argument("--etl-file", type=Path, help="Write the load script here")

    export = subparsers.add_parser("export", help="Export tables to a CSV zip")
    export.add_argument(
        "--output",
        type=Path,
        default=Path("export.zip"),
        help="Archive path",
    )
    export.add_argument(
        "--tables",
        nargs="*",
        help="Tables to export (schema.table or table); default all",
    )

    return parser.parse_args(argv)


def _configure_log_level(level_name: Optional[str]) -> None:
    """Configure global logging level if provided."""

    if not level_name:
        return

    numeric_level = getattr(logging, level_name.upper(), None)
    if not isinstance(numeric_level, int):
        logger.warning("Unknown log level '%s'; falling back to INFO", level_name)
        numeric_level = logging.INFO

    logging.getLogger().setLevel(numeric_level)
    for handler in logging.getLogger().handlers:
        handler.setLevel(numeric_level)


def _build_config(args: argparse.Namespace) -> AnalysisConfig:
    config = AnalysisConfig.from_environment()
    if args.url:
        config.source_database_url = args.url
    if getattr(args, "strategy", None):
        config.strategy = args.strategy
    if getattr(args, "sample_size", None) is not None:
        config.sample_size = args.sample_size
    return config


def _select_tables(tables: List[TableInfo], names: Optional[List[str]]) -> List[TableInfo]:
    if not names:
        return tables
    wanted = set(names)
    selected = [
        table
        for table in tables
        if table.full_name in wanted or table.table_name in wanted
    ]
    missing = wanted - {t.full_name for t in selected} - {t.table_name for t in selected}
    for name in sorted(missing):
        logger.warning("Table %s not found; skipping", name)
    return selected


def run_analysis(config: AnalysisConfig) -> AnalysisResult:
    """
    Extract the schema, optionally sample rows, and request a graph model.

    Args:
        config: Analysis configuration

    Returns:
        AnalysisResult from the configured strategy
    """
    strategy = build_strategy(config)
    analyzer = DatabaseAnalyzerFactory.from_url(config.source_database_url)

    print("🔍 Reading source schema...")
    snapshot = analyzer.read_schema()
    print(
        f"   {len(snapshot.tables)} tables, {len(snapshot.foreign_keys)} foreign keys"
    )

    sample_data = None
    if config.strategy == "llm" and config.sample_size > 0:
        print(f"🧪 Sampling up to {config.sample_size} rows per table...")
        sample_data = analyzer.read_sample_data(snapshot.tables, config.sample_size)

    print(f"🎯 Generating graph model with {strategy.get_strategy_name()} strategy...")
    return SchemaAnalysisService(strategy).analyze(snapshot, sample_data)


def run_export(
    config: AnalysisConfig, output: Path, table_names: Optional[List[str]] = None
) -> int:
    """
    Export tables to a CSV zip archive.

    Returns:
        Number of tables written to the archive
    """
    analyzer = DatabaseAnalyzerFactory.from_url(config.source_database_url)
    tables = _select_tables(analyzer.read_schema().tables, table_names)

    print(f"📦 Exporting {len(tables)} tables to {output}...")
    # The archive only replaces an existing output once it is complete
    partial = output.with_name(output.name + ".partial")
    try:
        with open(partial, "wb") as stream:
            CsvExportService(analyzer).export_tables(tables, stream)
    except Exception:
        partial.unlink(missing_ok=True)
        raise
    partial.replace(output)
    return len(tables)


def print_analysis_results(result: AnalysisResult) -> None:
    """Print a short summary of an analysis result."""
    print("\n" + "=" * 60)
    print("📊 GRAPH MODEL")
    print("=" * 60)
    for node in result.graph_model.nodes:
        print(f"  (:{node.label})  <- {node.source_table}")
    for rel in result.graph_model.relationships:
        marker = " [join table]" if rel.is_join_table else ""
        print(f"  (:{rel.from_node})-[:{rel.type}]->(:{rel.to_node}){marker}")
    if result.reasoning:
        print("\n💡 Reasoning:")
        print(result.reasoning)
    print()


def _write_analysis_outputs(result: AnalysisResult, args: argparse.Namespace) -> None:
    args.output.write_text(
        json.dumps(result.to_payload(), indent=2, ensure_ascii=False),
        encoding="utf-8",
    )
    print(f"✅ Analysis written to {args.output}")

    if args.ddl_file:
        args.ddl_file.write_text(result.cypher_ddl, encoding="utf-8")
        print(f"✅ Schema script written to {args.ddl_file}")
    if args.etl_file:
        args.etl_file.write_text(result.cypher_etl, encoding="utf-8")
        print(f"✅ Load script written to {args.etl_file}")


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    load_environment()

    args = parse_cli_args(argv)
    _configure_log_level(args.log_level)

    try:
        config = _build_config(args)

        if not config.source_database_url:
            print("❌ No source database configured")
            print_environment_help()
            return 1

        if args.command == "test-connection":
            success, message = probe_source_connection(config.source_database_url)
            print(f"{'✅' if success else '❌'} {message}")
            return 0 if success else 1

        if args.command == "analyze":
            is_valid, errors = config.validate()
            if not is_valid:
                print("❌ Configuration errors:")
                for error in errors:
                    print(f"  - {error}")
                print_environment_help()
                return 1

            print_config_summary(config)
            result = run_analysis(config)
            print_analysis_results(result)
            _write_analysis_outputs(result, args)
            return 0

        run_export(config, args.output, args.tables)
        print(f"✅ Archive written to {args.output}")
        return 0

    except ConfigurationError as e:
        print(f"❌ Configuration Error: {e}")
        print_environment_help()
        return 1
    except DatabaseConnectionError as e:
        print(f"❌ Database Connection Error: {e}")
        return 1
    except GraphMappingError as e:
        print(f"❌ Graph Mapping Error: {e}")
        return 1
    except ValueError as e:
        print(f"❌ Invalid input: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
