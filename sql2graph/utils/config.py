"""
Configuration management utilities for the schema analyzer.

This module handles configuration parsing, validation, and default settings.
"""

import os
from dataclasses import dataclass
from typing import Optional

from .environment import get_llm_provider

DEFAULT_RESPONSE_LANGUAGE = "Traditional Chinese (繁體中文)"
VALID_STRATEGIES = ["llm", "deterministic"]


@dataclass
class AnalysisConfig:
    """Configuration class for analysis and export settings."""

    # Source database settings
    source_database_url: str

    # LLM settings
    llm_provider: str = "openai"
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    azure_endpoint: str = ""
    azure_api_key: str = ""
    azure_deployment: str = "gpt-4o"
    azure_api_version: Optional[str] = None
    temperature: float = 0.1

    # Analysis settings
    strategy: str = "llm"
    sample_size: int = 5
    response_language: str = DEFAULT_RESPONSE_LANGUAGE

    @classmethod
    def from_environment(cls) -> "AnalysisConfig":
        """Create configuration from environment variables."""
        return cls(
            source_database_url=os.getenv("SOURCE_DATABASE_URL", ""),
            llm_provider=get_llm_provider(),
            openai_api_key=os.getenv("OPENAI_API_KEY", ""),
            openai_model=os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
            azure_endpoint=os.getenv("AZURE_OPENAI_ENDPOINT", ""),
            azure_api_key=os.getenv("AZURE_OPENAI_API_KEY", ""),
            azure_deployment=os.getenv("AZURE_OPENAI_DEPLOYMENT", "gpt-4o"),
            azure_api_version=os.getenv("AZURE_OPENAI_API_VERSION"),
            temperature=float(os.getenv("SQL2GRAPH_TEMPERATURE", "0.1")),
            strategy=os.getenv("SQL2GRAPH_STRATEGY", "llm").strip().lower(),
            sample_size=int(os.getenv("SQL2GRAPH_SAMPLE_SIZE", "5")),
            response_language=os.getenv(
                "SQL2GRAPH_RESPONSE_LANGUAGE", DEFAULT_RESPONSE_LANGUAGE
            ),
        )

    def validate(self) -> tuple[bool, list[str]]:
        """
        Validate the configuration.

        Returns:
            Tuple of (is_valid, validation_errors)
        """
        errors: list[str] = []

        if not self.source_database_url:
            errors.append("SOURCE_DATABASE_URL is required")

        if self.strategy not in VALID_STRATEGIES:
            errors.append(
                f"Invalid strategy: {self.strategy}. Must be one of: "
                f"{VALID_STRATEGIES}"
            )

        if self.strategy == "llm":
            if self.llm_provider == "azure":
                if not self.azure_endpoint or not self.azure_api_key:
                    errors.append(
                        "AZURE_OPENAI_ENDPOINT and AZURE_OPENAI_API_KEY are required"
                    )
            elif not self.openai_api_key:
                errors.append("OPENAI_API_KEY is required")

        if self.sample_size < 0:
            errors.append(f"Invalid sample size: {self.sample_size}")

        return len(errors) == 0, errors


def print_config_summary(config: AnalysisConfig) -> None:
    """Print a summary of the configuration."""
    from ..database.factory import mask_url_password

    print("🔧 Configuration Summary:")
    print("-" * 30)
    print(f"Source DB: {mask_url_password(config.source_database_url)}")
    print(f"Strategy: {config.strategy}")
    if config.strategy == "llm":
        model = (
            config.azure_deployment
            if config.llm_provider == "azure"
            else config.openai_model
        )
        print(f"LLM: {config.llm_provider} ({model})")
        print(f"Response language: {config.response_language}")
    print(f"Sample size: {config.sample_size}")
    print()
