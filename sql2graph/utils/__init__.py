"""
Utilities package for the SQL to graph schema analyzer.

This package contains reusable utility modules for environment management,
connection probing and configuration management.
"""

from .environment import (
    ConfigurationError,
    DatabaseConnectionError,
    load_environment,
    get_llm_provider,
    get_required_environment_variables,
    get_optional_environment_variables,
    create_llm_client,
    probe_source_connection,
    print_environment_help,
)

from .config import (
    AnalysisConfig,
    print_config_summary,
)

__all__ = [
    # Environment utilities
    "ConfigurationError",
    "DatabaseConnectionError",
    "load_environment",
    "get_llm_provider",
    "get_required_environment_variables",
    "get_optional_environment_variables",
    "create_llm_client",
    "probe_source_connection",
    "print_environment_help",
    # Configuration utilities
    "AnalysisConfig",
    "print_config_summary",
]
