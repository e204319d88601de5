"""
Classification of template differences as functional or cosmetic.
"""

import logging
from typing import List, Optional, Pattern

from core.models import DiffStatus, TemplateComparisonResult
from core.pattern_config import NonFunctionalPatternConfig

DIFF_HEADER_PREFIXES = ('---', '+++', '@@')


class ChangeClassifier:
    """Decides NO_CHANGES / HAS_CHANGES from a comparison and a raw diff"""

    def __init__(self, pattern_config: Optional[NonFunctionalPatternConfig] = None):
        self.pattern_config = pattern_config or NonFunctionalPatternConfig()
        self.patterns: List[Pattern] = self.pattern_config.get_compiled_patterns()
        self.logger = logging.getLogger('migration_analysis.classifier')

    def classify(self, comparison: TemplateComparisonResult, diff_text: str) -> DiffStatus:
        """
        Identical comparison and empty diff give NO_CHANGES. Otherwise the
        result is still NO_CHANGES when every changed line and every
        difference statement matches a non-functional pattern.
        """
        if comparison.is_identical() and not diff_text.strip():
            return DiffStatus.NO_CHANGES

        functional = self.functional_changes(comparison, diff_text)
        if not functional:
            self.logger.info("All differences are non-functional")
            return DiffStatus.NO_CHANGES

        self.logger.info(f"Found {len(functional)} functional changes")
        for change in functional[:5]:
            self.logger.debug(f"   functional: {change}")

        return DiffStatus.HAS_CHANGES

    def is_non_functional(self, text: str) -> bool:
        return any(pattern.search(text) for pattern in self.patterns)

    def functional_changes(self, comparison: TemplateComparisonResult, diff_text: str) -> List[str]:
        """Changes that no allow-listed pattern explains"""
        functional = []

        for line in self.changed_lines(diff_text):
            if not self.is_non_functional(line):
                functional.append(line)

        for modified in comparison.modified_resources:
            for difference in modified.differences:
                if not self.is_non_functional(difference):
                    functional.append(f"{modified.logical_id}: {difference}")

        for logical_id in comparison.missing_resources:
            if not self.is_non_functional(logical_id):
                functional.append(f"{logical_id} removed")

        for logical_id in comparison.extra_resources:
            if not self.is_non_functional(logical_id):
                functional.append(f"{logical_id} added")

        return functional

    def changed_lines(self, diff_text: str) -> List[str]:
        """
        Content of added and removed lines, without the +/- marker.

        File headers and hunk markers are skipped. Within one contiguous block
        of changed lines, a removed line and an added line that differ only by
        a trailing comma are JSON punctuation churn from a neighbouring
        insertion or deletion and cancel each other out. Lines in different
        blocks never cancel.
        """
        changes = []
        block = []

        for line in diff_text.split('\n'):
            if line.startswith(DIFF_HEADER_PREFIXES) or not line.startswith(('-', '+')):
                changes.extend(_uncancelled(block))
                block = []
                continue
            block.append(line)

        changes.extend(_uncancelled(block))
        return changes


def _uncancelled(block: List[str]) -> List[str]:
    """Lines of one change block left after comma-only pairs are removed"""
    removed = [line[1:] for line in block if line.startswith('-')]
    added = [line[1:] for line in block if line.startswith('+')]

    matched_added = set()
    kept_removed = []
    for line in removed:
        for i, candidate in enumerate(added):
            if i not in matched_added and _differs_by_trailing_comma(line, candidate):
                matched_added.add(i)
                break
        else:
            kept_removed.append(line)

    return kept_removed + [line for i, line in enumerate(added) if i not in matched_added]


def _differs_by_trailing_comma(first: str, second: str) -> bool:
    first = first.rstrip()
    second = second.rstrip()
    return first != second and first.rstrip(',') == second.rstrip(',')
