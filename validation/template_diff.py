"""
Structural comparison of two templates' resources.
"""

import json
import logging
from typing import Any, Dict, List

from core.models import ModifiedResource, TemplateComparisonResult


def value_kind(value: Any) -> str:
    """Runtime kind of a JSON value"""
    if value is None:
        return 'null'
    if isinstance(value, bool):
        return 'boolean'
    if isinstance(value, (int, float)):
        return 'number'
    if isinstance(value, str):
        return 'string'
    if isinstance(value, list):
        return 'array'
    if isinstance(value, dict):
        return 'object'
    return type(value).__name__


def format_value(value: Any) -> str:
    return json.dumps(value, default=str)


class TemplateDiffEngine:
    """Compares resources by type, properties and metadata"""

    def __init__(self):
        self.logger = logging.getLogger('migration_analysis.diff')

    def compare_templates(self, original: Dict[str, Any], migrated: Dict[str, Any]) -> TemplateComparisonResult:
        """Compare the Resources sections of two template documents"""
        return self.compare(original.get('Resources') or {}, migrated.get('Resources') or {})

    def compare(self, original_resources: Dict[str, Any],
                migrated_resources: Dict[str, Any]) -> TemplateComparisonResult:
        """
        Compare two resource maps keyed by logical id.

        Any difference at any depth marks a shared resource as modified; there
        is no tolerance here, cosmetic changes are filtered by the classifier.
        """
        missing = [rid for rid in original_resources if rid not in migrated_resources]
        extra = [rid for rid in migrated_resources if rid not in original_resources]

        modified: List[ModifiedResource] = []
        matching = 0

        for logical_id, original in original_resources.items():
            if logical_id not in migrated_resources:
                continue

            differences = self.compare_resources(original, migrated_resources[logical_id])
            if differences:
                modified.append(ModifiedResource(logical_id=logical_id, differences=differences))
            else:
                matching += 1

        result = TemplateComparisonResult(
            original_count=len(original_resources),
            migrated_count=len(migrated_resources),
            matching_count=matching,
            missing_resources=missing,
            extra_resources=extra,
            modified_resources=modified
        )

        self.logger.info(
            f"📊 Compared {result.original_count} original / {result.migrated_count} migrated resources: "
            f"{matching} matching, {len(modified)} modified, {len(missing)} missing, {len(extra)} extra"
        )
        return result

    def compare_resources(self, original: Dict[str, Any], migrated: Dict[str, Any]) -> List[str]:
        """List the differences between two resource definitions"""
        differences = []

        if original.get('Type') != migrated.get('Type'):
            differences.append(f"Type changed: {original.get('Type')} -> {migrated.get('Type')}")

        differences.extend(self.compare_objects(
            original.get('Properties') or {},
            migrated.get('Properties') or {},
            'Properties'
        ))

        if original.get('Metadata') is not None or migrated.get('Metadata') is not None:
            differences.extend(self.compare_objects(
                original.get('Metadata') or {},
                migrated.get('Metadata') or {},
                'Metadata'
            ))

        return differences

    def compare_objects(self, obj1: Any, obj2: Any, path: str) -> List[str]:
        """
        Recursively compare two composite values.

        Arrays are walked by index, so reordered elements are reported as
        changes at each position.
        """
        differences = []

        entries1 = self._entries(obj1)
        entries2 = self._entries(obj2)

        for key in entries1:
            if key not in entries2:
                differences.append(f"{path}.{key} removed")

        for key in entries2:
            if key not in entries1:
                differences.append(f"{path}.{key} added")

        for key, val1 in entries1.items():
            if key not in entries2:
                continue

            val2 = entries2[key]
            kind1 = value_kind(val1)
            kind2 = value_kind(val2)

            if kind1 != kind2:
                differences.append(f"{path}.{key} type changed: {kind1} -> {kind2}")
            elif kind1 in ('object', 'array'):
                differences.extend(self.compare_objects(val1, val2, f"{path}.{key}"))
            elif val1 != val2:
                differences.append(f"{path}.{key} value changed: {format_value(val1)} -> {format_value(val2)}")

        return differences

    def _entries(self, value: Any) -> Dict[str, Any]:
        if isinstance(value, list):
            return {str(i): item for i, item in enumerate(value)}
        return value
