"""
Re-synthesis of templates through external build tools.
"""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from .command_runner import CommandRunner, expand_placeholders
from .config import MigrationConfig
from .errors import CommandError, SynthesisError

ERROR_MARKERS = ('ERROR', 'FAILED', 'Invalid')


def extract_error_lines(stdout: str = "", stderr: str = "") -> List[str]:
    """Summarize a failed command: stderr text plus stdout lines carrying error markers"""
    errors = []

    if stderr and stderr.strip():
        errors.append(stderr.strip())

    if stdout:
        for line in stdout.split('\n'):
            if any(marker in line for marker in ERROR_MARKERS):
                errors.append(line.strip())

    return errors


class TemplateSynthesizer(ABC):
    """Produces a template document for a project and stack"""

    @abstractmethod
    def synthesize(self, project_path: Union[str, Path], stack_name: str) -> Path:
        """Return the path of the synthesized template; raise SynthesisError on failure"""
        pass


class CommandSynthesizer(TemplateSynthesizer):
    """Synthesizes templates by running a build tool command in the project directory"""

    def __init__(self, command: List[str], runner: CommandRunner, output_path: str,
                 required_files: Optional[List[str]] = None, name: str = "synth"):
        """
        Args:
            command: Command template; {stack_name} and {output_file} are substituted
            runner: Command runner used for the blocking call
            output_path: Template location relative to the project, may contain {stack_name}
            required_files: Project is valid if at least one of these files exists
            name: Label used in logs and error messages
        """
        self.command = list(command)
        self.runner = runner
        self.output_path = output_path
        self.required_files = list(required_files or [])
        self.name = name
        self.logger = logging.getLogger(f'migration_analysis.synth.{name}')

    def validate_project(self, project_path: Path):
        """Check that the project directory exists and looks like a buildable project"""
        if not project_path.exists():
            raise SynthesisError(f"Project path does not exist: {project_path}")

        if self.required_files and not any((project_path / f).exists() for f in self.required_files):
            raise SynthesisError(
                f"Not a valid project: missing {' or '.join(self.required_files)} in {project_path}"
            )

    def get_output_file(self, project_path: Path, stack_name: str) -> Path:
        return project_path / self.output_path.replace('{stack_name}', stack_name)

    def synthesize(self, project_path: Union[str, Path], stack_name: str) -> Path:
        project_path = Path(project_path)
        self.validate_project(project_path)

        output_file = self.get_output_file(project_path, stack_name)
        args = expand_placeholders(self.command, stack_name=stack_name, output_file=output_file)

        self.logger.debug(f"Synthesizing stack {stack_name} in {project_path}")

        # A stale template from an earlier run must not pass for fresh output
        if output_file.exists():
            output_file.unlink()

        try:
            result = self.runner.run(args, cwd=project_path)
        except CommandError as e:
            raise SynthesisError(f"Failed to synthesize stack '{stack_name}': {e}") from e

        if not result.succeeded:
            combined = f"{result.stdout}\n{result.stderr}"
            if 'No stacks match' in combined:
                raise SynthesisError(
                    f"Stack '{stack_name}' not found in {project_path}",
                    errors=extract_error_lines(result.stdout, result.stderr),
                    output=result.stdout
                )

            errors = extract_error_lines(result.stdout, result.stderr)
            summary = errors[0] if errors else f"exit status {result.returncode}"
            raise SynthesisError(
                f"Failed to synthesize stack '{stack_name}': {summary}",
                errors=errors,
                output=result.stdout
            )

        if not output_file.exists():
            self._save_stdout_template(result.stdout, output_file, stack_name)

        self.logger.debug(f"✓ Synthesized template: {output_file}")
        return output_file

    def _save_stdout_template(self, stdout: str, output_file: Path, stack_name: str):
        """Some tools print the template instead of writing it; persist it at the expected path"""
        try:
            template = json.loads(stdout)
        except json.JSONDecodeError as e:
            raise SynthesisError(f"Template not found after synthesis: {output_file}") from e

        output_file.parent.mkdir(parents=True, exist_ok=True)
        with open(output_file, 'w', encoding='utf-8') as f:
            json.dump(template, f, indent=2)

        self.logger.debug(f"Saved synthesized template for {stack_name} from command output")


@dataclass(frozen=True)
class PlanResult:
    """Outcome of the platform plan check"""
    success: bool
    output: str = ""
    errors: List[str] = field(default_factory=list)


def run_plan_check(runner: CommandRunner, command: List[str], project_path: Union[str, Path]) -> PlanResult:
    """Run the platform plan command; failures are reported, not raised"""
    try:
        result = runner.run(command, cwd=project_path)
    except CommandError as e:
        return PlanResult(success=False, output=e.stdout, errors=[str(e)])

    if result.succeeded:
        return PlanResult(success=True, output=result.stdout)

    return PlanResult(
        success=False,
        output=result.stdout,
        errors=extract_error_lines(result.stdout, result.stderr)
    )


def create_original_synthesizer(config: MigrationConfig, runner: CommandRunner) -> CommandSynthesizer:
    """Synthesizer for the legacy CDK project holding the original stack"""
    return CommandSynthesizer(
        command=config.synth_command,
        runner=runner,
        output_path=f"{config.output_dir_name}/{{stack_name}}.template.json",
        required_files=['cdk.json', 'package.json'],
        name='original'
    )


def create_migrated_synthesizer(config: MigrationConfig, runner: CommandRunner) -> CommandSynthesizer:
    """Synthesizer for the migrated service definition"""
    return CommandSynthesizer(
        command=config.migrated_synth_command,
        runner=runner,
        output_path=config.migrated_template_name,
        name='migrated'
    )
