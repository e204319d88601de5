"""
Line-oriented textual diff of two template documents.
"""

import difflib
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Union

from core.command_runner import CommandRunner
from core.errors import CommandError


def render_template(template: Dict[str, Any]) -> List[str]:
    """Canonical text form: sorted keys, two-space indent"""
    return json.dumps(template, indent=2, sort_keys=True, default=str).splitlines()


class TextDiffer(ABC):
    """Produces a unified diff of two template files"""

    @abstractmethod
    def diff(self, original_path: Union[str, Path], migrated_path: Union[str, Path]) -> str:
        """Return the diff text; empty means the documents are identical"""
        pass


class UnifiedTextDiffer(TextDiffer):
    """In-process unified diff of the canonical JSON renderings"""

    def __init__(self, context_lines: int = 3):
        self.context_lines = context_lines
        self.logger = logging.getLogger('migration_analysis.diff.text')

    def diff(self, original_path: Union[str, Path], migrated_path: Union[str, Path]) -> str:
        original = self._read(original_path)
        migrated = self._read(migrated_path)
        return self.diff_documents(original, migrated, str(original_path), str(migrated_path))

    def diff_documents(self, original: Dict[str, Any], migrated: Dict[str, Any],
                       original_label: str = "original", migrated_label: str = "migrated") -> str:
        lines = difflib.unified_diff(
            render_template(original),
            render_template(migrated),
            fromfile=original_label,
            tofile=migrated_label,
            n=self.context_lines,
            lineterm=''
        )
        return '\n'.join(lines)

    def _read(self, path: Union[str, Path]) -> Dict[str, Any]:
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)


class CommandTextDiffer(TextDiffer):
    """Unified diff through an external diff tool"""

    def __init__(self, runner: CommandRunner, command: List[str] = None):
        self.runner = runner
        self.command = list(command or ['diff', '-u'])
        self.logger = logging.getLogger('migration_analysis.diff.text')

    def diff(self, original_path: Union[str, Path], migrated_path: Union[str, Path]) -> str:
        result = self.runner.run(self.command + [str(original_path), str(migrated_path)])

        # diff exits 0 when identical, 1 when files differ, anything else is trouble
        if result.returncode == 0:
            return ""
        if result.returncode == 1:
            return result.stdout

        raise CommandError(
            f"Diff tool failed with status {result.returncode}: {result.stderr.strip()}",
            args=result.args,
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr
        )
