"""Tests for the end-to-end migration validation flow."""

import json
from unittest.mock import MagicMock

from core.command_runner import CommandResult
from core.config import MigrationConfig
from core.errors import SynthesisError
from core.models import DiffStatus
from core.synthesizer import CommandSynthesizer, TemplateSynthesizer
from validation.migration_validator import CHANGES_WARNING, PLAN_FAILURE_ERROR, MigrationValidator
from validation.text_diff import CommandTextDiffer, UnifiedTextDiffer


def _fake_synthesizer(path=None, error=None):
    synthesizer = MagicMock(spec=TemplateSynthesizer)
    if error is not None:
        synthesizer.synthesize.side_effect = error
    else:
        synthesizer.synthesize.return_value = path
    return synthesizer


class TestValidateMigration:
    """Tests for validate_migration"""

    def test_identical_templates(self, tmp_path, app_template, write_template):
        original = write_template(app_template, 'original.json')
        migrated = write_template(app_template, 'migrated.json')
        synthesizer = _fake_synthesizer(migrated)

        result = MigrationValidator(synthesizer).validate_migration(tmp_path, original, 'AppStack')

        synthesizer.synthesize.assert_called_once_with(tmp_path, 'AppStack')
        assert result.success is True
        assert result.diff_status == DiffStatus.NO_CHANGES
        assert result.validation_errors == []
        assert result.warnings == []
        assert result.comparison.is_identical()
        assert result.diff_output == ''

    def test_bucket_scenario(self, tmp_path, bucket_template, clone, write_template):
        changed = clone(bucket_template)
        changed['Resources']['BucketA']['Properties']['Encrypted'] = False
        changed['Resources']['BucketAPolicy'] = {'Type': 'Storage::BucketPolicy', 'Properties': {}}

        original = write_template(bucket_template, 'original.json')
        migrated = write_template(changed, 'migrated.json')

        result = MigrationValidator(_fake_synthesizer(migrated)).validate_migration(tmp_path, original, 'Stack')

        assert result.success is True
        assert result.diff_status == DiffStatus.HAS_CHANGES
        assert result.has_changes()
        assert result.warnings == [CHANGES_WARNING]
        assert result.comparison.extra_resources == ['BucketAPolicy']
        assert result.comparison.missing_resources == []
        assert result.comparison.get_modified('BucketA').differences == [
            'Properties.Encrypted value changed: true -> false'
        ]
        assert '"Encrypted": false' in result.diff_output

    def test_synthesis_failure(self, tmp_path, app_template, write_template):
        original = write_template(app_template, 'original.json')
        error = SynthesisError(
            "Failed to synthesize stack 'Stack': ERROR missing handler",
            errors=['ERROR missing handler', 'FAILED to build']
        )

        result = MigrationValidator(_fake_synthesizer(error=error)).validate_migration(tmp_path, original, 'Stack')

        assert result.success is False
        assert result.diff_status == DiffStatus.HAS_CHANGES
        assert result.validation_errors == [
            "Validation failed: Failed to synthesize stack 'Stack': ERROR missing handler",
            'FAILED to build',
        ]
        assert result.comparison.is_identical()
        assert result.comparison.original_count == 0

    def test_unknown_stack_keeps_every_error_line(self, tmp_path, app_template, write_template):
        original = write_template(app_template, 'original.json')
        error = SynthesisError(
            "Stack 'Missing' not found in /work/service",
            errors=['No stacks match the name(s) Missing', 'ERROR exiting']
        )

        result = MigrationValidator(_fake_synthesizer(error=error)).validate_migration(tmp_path, original, 'Missing')

        assert result.validation_errors == [
            "Validation failed: Stack 'Missing' not found in /work/service",
            'No stacks match the name(s) Missing',
            'ERROR exiting',
        ]

    def test_missing_original_template(self, tmp_path, app_template, write_template):
        migrated = write_template(app_template, 'migrated.json')

        result = MigrationValidator(_fake_synthesizer(migrated)).validate_migration(
            tmp_path, tmp_path / 'absent.json', 'Stack'
        )

        assert result.success is False
        assert result.diff_status == DiffStatus.HAS_CHANGES
        assert result.validation_errors[0].startswith('Validation failed: Template file does not exist')

    def test_plan_failure_is_reported_but_comparison_continues(self, tmp_path, app_template, write_template):
        original = write_template(app_template, 'original.json')
        migrated = write_template(app_template, 'migrated.json')

        runner = MagicMock()
        runner.run.return_value = CommandResult(
            args=['svc', 'plan'], returncode=1, stdout='ERROR: unknown component', stderr=''
        )

        validator = MigrationValidator(_fake_synthesizer(migrated), runner=runner, plan_command=['svc', 'plan'])
        result = validator.validate_migration(tmp_path, original, 'Stack')

        runner.run.assert_called_once_with(['svc', 'plan'], cwd=tmp_path)
        assert result.success is False
        assert result.validation_errors == [PLAN_FAILURE_ERROR, 'ERROR: unknown component']
        assert result.diff_status == DiffStatus.NO_CHANGES
        assert result.plan_output == 'ERROR: unknown component'

    def test_plan_success(self, tmp_path, app_template, write_template):
        original = write_template(app_template, 'original.json')
        migrated = write_template(app_template, 'migrated.json')

        runner = MagicMock()
        runner.run.return_value = CommandResult(args=['svc', 'plan'], returncode=0, stdout='plan ok')

        validator = MigrationValidator(_fake_synthesizer(migrated), runner=runner, plan_command=['svc', 'plan'])
        result = validator.validate_migration(tmp_path, original, 'Stack')

        assert result.success is True
        assert result.plan_output == 'plan ok'

    def test_with_command_synthesizer(self, tmp_path, bucket_template, write_template):
        project = tmp_path / 'service'
        project.mkdir()
        original = write_template(bucket_template, 'original.json')

        def run(args, cwd=None, timeout=None):
            output_file = args[args.index('--output-file') + 1]
            with open(output_file, 'w', encoding='utf-8') as f:
                json.dump(bucket_template, f)
            return CommandResult(args=args, returncode=0)

        runner = MagicMock()
        runner.run.side_effect = run

        validator = MigrationValidator.from_config(MigrationConfig(), runner)
        result = validator.validate_migration(project, original, 'Stack')

        assert result.success is True
        assert result.diff_status == DiffStatus.NO_CHANGES
        assert (project / 'migrated-template.json').exists()


class TestValidateTemplates:
    """Tests for comparing two existing files"""

    def test_compare_files(self, bucket_template, clone, write_template):
        changed = clone(bucket_template)
        changed['Resources']['BucketA']['Properties']['Encrypted'] = False

        result = MigrationValidator(_fake_synthesizer()).validate_templates(
            write_template(bucket_template, 'a.json'),
            write_template(changed, 'b.json')
        )

        assert result.success is True
        assert result.diff_status == DiffStatus.HAS_CHANGES

    def test_malformed_file(self, tmp_path, bucket_template, write_template):
        broken = tmp_path / 'broken.json'
        broken.write_text('{"Resources": ', encoding='utf-8')

        result = MigrationValidator(_fake_synthesizer()).validate_templates(
            write_template(bucket_template), broken
        )

        assert result.success is False
        assert 'Malformed JSON' in result.validation_errors[0]


class TestFromConfig:
    """Tests for configuration-driven construction"""

    def test_builtin_diff(self):
        validator = MigrationValidator.from_config(MigrationConfig(), MagicMock())
        assert isinstance(validator.differ, UnifiedTextDiffer)
        assert isinstance(validator.synthesizer, CommandSynthesizer)
        assert validator.plan_command is None

    def test_command_diff_and_patterns_file(self, tmp_path):
        patterns_file = tmp_path / 'patterns.json'
        patterns_file.write_text(json.dumps({'non_functional_patterns': ['Tags']}), encoding='utf-8')

        config = MigrationConfig(diff_mode='command', patterns_file=str(patterns_file), plan_command=['svc', 'plan'])
        validator = MigrationValidator.from_config(config, MagicMock())

        assert isinstance(validator.differ, CommandTextDiffer)
        assert validator.differ.command == ['diff', '-u']
        assert validator.classifier.pattern_config.get_patterns() == ['Tags']
        assert validator.plan_command == ['svc', 'plan']
