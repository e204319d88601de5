"""
Configuration management for migration analysis and validation.
"""

import os
import shlex
from dataclasses import dataclass
from typing import Optional, List
from pathlib import Path
import logging


DEFAULT_SYNTH_COMMAND = ["npx", "cdk", "synth", "{stack_name}", "--json"]
DEFAULT_PLAN_COMMAND = ["svc", "plan"]
DEFAULT_MIGRATED_SYNTH_COMMAND = ["svc", "plan", "--output-format", "json", "--output-file", "{output_file}"]
DEFAULT_DIFF_COMMAND = ["diff", "-u"]


@dataclass
class MigrationConfig:
    """Configuration settings for a migration analysis or validation run"""

    # AWS Configuration (deployed stack templates)
    region: Optional[str] = None
    profile: Optional[str] = None

    # External Commands
    synth_command: List[str] = None
    migrated_synth_command: List[str] = None
    plan_command: Optional[List[str]] = None
    diff_command: List[str] = None
    diff_mode: str = "builtin"
    command_timeout: float = 300.0
    output_dir_name: str = "cdk.out"
    migrated_template_name: str = "migrated-template.json"

    # Change Classification
    patterns_file: Optional[str] = None

    # Output Settings
    output_formats: List[str] = None
    output_dir: Optional[str] = None

    # Neo4j Configuration
    update_graph: bool = False
    reset_graph: bool = False
    graph_db_url: str = "localhost:7687"
    graph_db_user: str = "neo4j"
    graph_db_password: str = "neo4j"

    # Logging Configuration
    log_level: str = "INFO"
    console_log_level: str = "INFO"
    file_log_level: str = "DEBUG"

    def __post_init__(self):
        """Initialize default values and validate configuration"""
        if self.synth_command is None:
            self.synth_command = list(DEFAULT_SYNTH_COMMAND)
        if self.migrated_synth_command is None:
            self.migrated_synth_command = list(DEFAULT_MIGRATED_SYNTH_COMMAND)
        if self.diff_command is None:
            self.diff_command = list(DEFAULT_DIFF_COMMAND)
        if self.output_formats is None:
            self.output_formats = ["json"]

        # Load environment variables if they exist
        self._load_from_env()

        # Validate configuration
        self._validate()

    def _load_from_env(self):
        """Load configuration from environment variables"""
        # AWS credentials are loaded automatically by boto3

        # Neo4j settings from environment
        if os.getenv('NEO4J_URL'):
            self.graph_db_url = os.getenv('NEO4J_URL')
        if os.getenv('NEO4J_USER'):
            self.graph_db_user = os.getenv('NEO4J_USER')
        if os.getenv('NEO4J_PASSWORD'):
            self.graph_db_password = os.getenv('NEO4J_PASSWORD')

        # Command overrides
        if os.getenv('MIGRATION_SYNTH_COMMAND'):
            self.synth_command = shlex.split(os.getenv('MIGRATION_SYNTH_COMMAND'))
        if os.getenv('MIGRATION_COMMAND_TIMEOUT'):
            try:
                self.command_timeout = float(os.getenv('MIGRATION_COMMAND_TIMEOUT'))
            except ValueError:
                raise ValueError(f"Invalid MIGRATION_COMMAND_TIMEOUT: {os.getenv('MIGRATION_COMMAND_TIMEOUT')}")

        # Logging level from environment
        if os.getenv('LOG_LEVEL'):
            self.log_level = os.getenv('LOG_LEVEL').upper()

    def _validate(self):
        """Validate configuration settings"""
        valid_formats = {'json'}
        for fmt in self.output_formats:
            if fmt not in valid_formats:
                raise ValueError(f"Invalid output format: {fmt}. Valid formats: {valid_formats}")

        valid_log_levels = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
        for level in (self.log_level, self.console_log_level, self.file_log_level):
            if level not in valid_log_levels:
                raise ValueError(f"Invalid log level: {level}. Valid levels: {valid_log_levels}")

        valid_diff_modes = {'builtin', 'command'}
        if self.diff_mode not in valid_diff_modes:
            raise ValueError(f"Invalid diff mode: {self.diff_mode}. Valid modes: {valid_diff_modes}")

        if self.command_timeout <= 0:
            raise ValueError(f"Command timeout must be positive, got {self.command_timeout}")

        if not self.synth_command:
            raise ValueError("Synth command cannot be empty")
        if not self.migrated_synth_command:
            raise ValueError("Migrated synth command cannot be empty")

    def get_log_level(self) -> int:
        """Get numeric log level for logging module"""
        return getattr(logging, self.log_level)

    def should_export_format(self, format_name: str) -> bool:
        """Check if a specific format should be exported"""
        return format_name in self.output_formats

    def get_output_path(self) -> Path:
        """Get the output directory path"""
        if self.output_dir:
            return Path(self.output_dir)

        from datetime import datetime
        return Path(f"migration-analysis-{datetime.now().strftime('%Y%m%d-%H%M%S')}")

    def is_neo4j_enabled(self) -> bool:
        """Check if Neo4j integration is enabled"""
        return self.update_graph

    def get_neo4j_uri(self) -> str:
        """Get Neo4j connection URI"""
        if not self.graph_db_url.startswith(('bolt://', 'neo4j://')):
            return f"bolt://{self.graph_db_url}"
        return self.graph_db_url
