"""
Non-functional change pattern configuration.

Loads the allow-list of regular expressions used to decide whether a template
difference is cosmetic (metadata, descriptions, build-tool metadata,
timestamps) from a configuration file, with a built-in fallback list.
"""

import json
import re
from pathlib import Path
from typing import List, Optional, Pattern
import logging

logger = logging.getLogger('migration_analysis.patterns')


DEFAULT_NON_FUNCTIONAL_PATTERNS = [
    r'^\s*"Metadata":',
    r'^Metadata[.\s]',
    r'^\s*"Description":',
    r'(^|\.)Description[.\s]',
    r'CDKMetadata',
    r'aws:cdk:',
    r'timestamp',
    r'^\s*//.*$',
    r'^\s*$',
]


class NonFunctionalPatternConfig:
    """Manages the allow-list of non-functional change patterns"""

    def __init__(self, config_path: Optional[str] = None, patterns: Optional[List[str]] = None):
        """
        Initialize pattern configuration

        Args:
            config_path: Path to the configuration file. If None, uses default location.
            patterns: Explicit pattern list; takes precedence over any file.
        """
        self._patterns: List[str] = []
        self._compiled: List[Pattern] = []
        self._loaded_from_file = False

        if config_path is None:
            # Default to config/non_functional_patterns.json relative to project root
            project_root = Path(__file__).parent.parent
            config_path = project_root / "config" / "non_functional_patterns.json"

        self._config_path = Path(config_path)

        if patterns is not None:
            self._set_patterns(patterns)
        else:
            self._load_configuration()

    def _load_configuration(self):
        """Load patterns from configuration file"""
        if not self._config_path.exists():
            logger.warning(f"Pattern configuration not found: {self._config_path}")
            logger.warning("Using built-in non-functional patterns")
            self._set_patterns(DEFAULT_NON_FUNCTIONAL_PATTERNS)
            return

        try:
            with open(self._config_path, 'r', encoding='utf-8') as f:
                config_data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to load patterns from {self._config_path}: {e}")
            logger.warning("Using built-in non-functional patterns")
            self._set_patterns(DEFAULT_NON_FUNCTIONAL_PATTERNS)
            return

        if not isinstance(config_data, dict) or 'non_functional_patterns' not in config_data:
            raise ValueError("Pattern configuration must contain 'non_functional_patterns' key")

        self._set_patterns(config_data['non_functional_patterns'])
        self._loaded_from_file = True
        logger.debug(f"Loaded {len(self._patterns)} non-functional patterns from {self._config_path}")

    def _set_patterns(self, patterns: List[str]):
        compiled = []
        for pattern in patterns:
            try:
                compiled.append(re.compile(pattern))
            except re.error as e:
                raise ValueError(f"Invalid non-functional pattern {pattern!r}: {e}")

        self._patterns = list(patterns)
        self._compiled = compiled

    def get_patterns(self) -> List[str]:
        """Get the raw pattern strings"""
        return self._patterns.copy()

    def get_compiled_patterns(self) -> List[Pattern]:
        """Get compiled regular expressions"""
        return self._compiled.copy()

    def is_loaded_from_file(self) -> bool:
        return self._loaded_from_file

    def get_config_path(self) -> Path:
        """Get the path to the configuration file"""
        return self._config_path
