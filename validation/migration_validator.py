"""
Migration validation: re-synthesize, compare and classify.

Proves that a migrated service definition synthesizes to a template that is
state-equivalent to the original, modulo non-functional differences.
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

from core.command_runner import CommandRunner
from core.config import MigrationConfig
from core.errors import SynthesisError
from core.models import DiffStatus, TemplateComparisonResult, ValidationResult
from core.pattern_config import NonFunctionalPatternConfig
from core.synthesizer import TemplateSynthesizer, create_migrated_synthesizer, run_plan_check
from core.template_loader import load_template
from validation.classifier import ChangeClassifier
from validation.template_diff import TemplateDiffEngine
from validation.text_diff import CommandTextDiffer, TextDiffer, UnifiedTextDiffer

CHANGES_WARNING = "Templates have differences - manual review required"
PLAN_FAILURE_ERROR = "Migrated service failed platform validation"


class MigrationValidator:
    """Validates the migration by comparing templates and running platform validation"""

    def __init__(self, synthesizer: TemplateSynthesizer,
                 differ: Optional[TextDiffer] = None,
                 classifier: Optional[ChangeClassifier] = None,
                 diff_engine: Optional[TemplateDiffEngine] = None,
                 runner: Optional[CommandRunner] = None,
                 plan_command: Optional[List[str]] = None):
        self.synthesizer = synthesizer
        self.differ = differ or UnifiedTextDiffer()
        self.classifier = classifier or ChangeClassifier()
        self.diff_engine = diff_engine or TemplateDiffEngine()
        self.runner = runner
        self.plan_command = plan_command
        self.logger = logging.getLogger('migration_analysis.validator')

    @classmethod
    def from_config(cls, config: MigrationConfig,
                    runner: Optional[CommandRunner] = None) -> 'MigrationValidator':
        """Build a validator whose commands and patterns come from configuration"""
        runner = runner or CommandRunner(timeout=config.command_timeout)

        if config.diff_mode == 'command':
            differ = CommandTextDiffer(runner, config.diff_command)
        else:
            differ = UnifiedTextDiffer()

        return cls(
            synthesizer=create_migrated_synthesizer(config, runner),
            differ=differ,
            classifier=ChangeClassifier(NonFunctionalPatternConfig(config.patterns_file)),
            runner=runner,
            plan_command=config.plan_command
        )

    def validate_migration(self, migrated_project_path: Union[str, Path],
                           original_template_path: Union[str, Path],
                           stack_name: str) -> ValidationResult:
        """
        Run the full validation flow.

        Never raises: any failure is reported through validation_errors with
        success=False and a HAS_CHANGES verdict.
        """
        self.logger.debug('Starting migration validation')

        validation_errors: List[str] = []
        plan_output = ""

        try:
            # Step 1: Validate the migrated service can be planned
            if self.plan_command and self.runner:
                self.logger.debug('Running platform plan on migrated service')
                plan_result = run_plan_check(self.runner, self.plan_command, migrated_project_path)
                plan_output = plan_result.output

                if not plan_result.success:
                    validation_errors.append(PLAN_FAILURE_ERROR)
                    validation_errors.extend(plan_result.errors)

            # Step 2: Generate template from migrated service
            migrated_template_path = self.synthesizer.synthesize(migrated_project_path, stack_name)

            # Steps 3-5: Compare, diff and classify
            return self._compare_and_classify(
                original_template_path,
                migrated_template_path,
                validation_errors,
                plan_output
            )

        except Exception as e:
            self.logger.error(f"✗ Migration validation failed: {e}")
            return self._failed_result(validation_errors, e, plan_output)

    def validate_templates(self, original_template_path: Union[str, Path],
                           migrated_template_path: Union[str, Path]) -> ValidationResult:
        """Validate two existing template files without re-synthesis"""
        try:
            return self._compare_and_classify(original_template_path, migrated_template_path, [], "")
        except Exception as e:
            self.logger.error(f"✗ Template validation failed: {e}")
            return self._failed_result([], e, "")

    def _compare_and_classify(self, original_template_path, migrated_template_path,
                              validation_errors: List[str], plan_output: str) -> ValidationResult:
        warnings: List[str] = []

        self.logger.debug('Comparing original and migrated templates')
        original = load_template(original_template_path)
        migrated = load_template(migrated_template_path)
        comparison = self.diff_engine.compare_templates(original, migrated)

        diff_output = self.differ.diff(original_template_path, migrated_template_path)

        diff_status = self.classifier.classify(comparison, diff_output)
        if diff_status != DiffStatus.NO_CHANGES:
            warnings.append(CHANGES_WARNING)

        self.logger.debug(f"Validation complete. Diff result: {diff_status.value}")

        return ValidationResult(
            success=not validation_errors,
            diff_status=diff_status,
            validation_errors=list(validation_errors),
            warnings=warnings,
            comparison=comparison,
            plan_output=plan_output,
            diff_output=diff_output
        )

    def _failed_result(self, validation_errors: List[str], error: Exception, plan_output: str) -> ValidationResult:
        errors = list(validation_errors) + [f"Validation failed: {error}"]

        # Extracted lines already quoted in the synthesis error message are not repeated
        if isinstance(error, SynthesisError):
            message = str(error)
            errors.extend(line for line in error.errors if line not in message)

        return ValidationResult(
            success=False,
            diff_status=DiffStatus.HAS_CHANGES,
            validation_errors=errors,
            warnings=[],
            comparison=TemplateComparisonResult(),
            plan_output=plan_output,
            diff_output=""
        )
