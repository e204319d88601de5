"""Tests for run configuration and pattern configuration."""

import json
import logging
from pathlib import Path

import pytest

from core.config import DEFAULT_SYNTH_COMMAND, MigrationConfig
from core.pattern_config import DEFAULT_NON_FUNCTIONAL_PATTERNS, NonFunctionalPatternConfig


class TestMigrationConfig:
    """Tests for MigrationConfig"""

    def test_defaults(self):
        config = MigrationConfig()

        assert config.synth_command == DEFAULT_SYNTH_COMMAND
        assert config.synth_command is not DEFAULT_SYNTH_COMMAND
        assert config.diff_command == ['diff', '-u']
        assert config.output_formats == ['json']
        assert config.diff_mode == 'builtin'
        assert config.plan_command is None
        assert not config.is_neo4j_enabled()
        assert config.get_log_level() == logging.INFO

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv('NEO4J_URL', 'neo4j://graph:7687')
        monkeypatch.setenv('NEO4J_USER', 'analyst')
        monkeypatch.setenv('MIGRATION_SYNTH_COMMAND', 'yarn cdk synth "{stack_name}"')
        monkeypatch.setenv('MIGRATION_COMMAND_TIMEOUT', '60')
        monkeypatch.setenv('LOG_LEVEL', 'debug')

        config = MigrationConfig()

        assert config.graph_db_url == 'neo4j://graph:7687'
        assert config.graph_db_user == 'analyst'
        assert config.synth_command == ['yarn', 'cdk', 'synth', '{stack_name}']
        assert config.command_timeout == 60.0
        assert config.log_level == 'DEBUG'

    def test_invalid_timeout_environment(self, monkeypatch):
        monkeypatch.setenv('MIGRATION_COMMAND_TIMEOUT', 'soon')
        with pytest.raises(ValueError, match='MIGRATION_COMMAND_TIMEOUT'):
            MigrationConfig()

    @pytest.mark.parametrize('options,message', [
        ({'output_formats': ['xml']}, 'Invalid output format'),
        ({'log_level': 'LOUD'}, 'Invalid log level'),
        ({'diff_mode': 'visual'}, 'Invalid diff mode'),
        ({'command_timeout': 0}, 'must be positive'),
        ({'synth_command': []}, 'Synth command cannot be empty'),
    ])
    def test_validation(self, options, message):
        with pytest.raises(ValueError, match=message):
            MigrationConfig(**options)

    def test_output_path(self, tmp_path):
        assert MigrationConfig(output_dir=str(tmp_path)).get_output_path() == tmp_path
        assert MigrationConfig().get_output_path().name.startswith('migration-analysis-')

    def test_neo4j_uri(self):
        assert MigrationConfig().get_neo4j_uri() == 'bolt://localhost:7687'
        assert MigrationConfig(graph_db_url='neo4j://db:7687').get_neo4j_uri() == 'neo4j://db:7687'
        assert MigrationConfig(update_graph=True).is_neo4j_enabled()


class TestNonFunctionalPatternConfig:
    """Tests for the pattern allow-list"""

    def test_default_file_is_loaded(self):
        config = NonFunctionalPatternConfig()

        assert config.is_loaded_from_file()
        assert config.get_config_path() == Path(__file__).parent.parent / 'config' / 'non_functional_patterns.json'
        assert config.get_patterns() == DEFAULT_NON_FUNCTIONAL_PATTERNS

    def test_custom_file(self, tmp_path):
        path = tmp_path / 'patterns.json'
        path.write_text(json.dumps({'non_functional_patterns': ['^Tags', 'Comment']}), encoding='utf-8')

        config = NonFunctionalPatternConfig(str(path))

        assert config.get_patterns() == ['^Tags', 'Comment']
        assert [p.pattern for p in config.get_compiled_patterns()] == ['^Tags', 'Comment']

    def test_missing_file_falls_back_to_defaults(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING, logger='migration_analysis.patterns'):
            config = NonFunctionalPatternConfig(str(tmp_path / 'absent.json'))

        assert not config.is_loaded_from_file()
        assert config.get_patterns() == DEFAULT_NON_FUNCTIONAL_PATTERNS
        assert any('not found' in r.getMessage() for r in caplog.records)

    def test_malformed_file_falls_back_to_defaults(self, tmp_path):
        path = tmp_path / 'patterns.json'
        path.write_text('{not json', encoding='utf-8')

        assert NonFunctionalPatternConfig(str(path)).get_patterns() == DEFAULT_NON_FUNCTIONAL_PATTERNS

    def test_missing_key_raises(self, tmp_path):
        path = tmp_path / 'patterns.json'
        path.write_text(json.dumps({'patterns': []}), encoding='utf-8')

        with pytest.raises(ValueError, match='non_functional_patterns'):
            NonFunctionalPatternConfig(str(path))

    def test_invalid_regex_raises(self):
        with pytest.raises(ValueError, match='Invalid non-functional pattern'):
            NonFunctionalPatternConfig(patterns=['(unclosed'])

    def test_explicit_patterns_take_precedence(self):
        config = NonFunctionalPatternConfig(patterns=['x'])
        assert config.get_patterns() == ['x']
        assert not config.is_loaded_from_file()

    def test_instances_are_independent(self):
        first = NonFunctionalPatternConfig(patterns=['a'])
        second = NonFunctionalPatternConfig(patterns=['b'])
        assert first.get_patterns() == ['a']
        assert second.get_patterns() == ['b']
