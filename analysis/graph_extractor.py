"""
Resource graph extraction.

Turns a template's Resources map into ResourceRecords sorted so that every
resource follows the resources it declares a dependency on.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Set

from core.errors import TemplateLoadError
from core.models import DependencyCycle, ResourceRecord


@dataclass(frozen=True)
class ExtractionResult:
    """Dependency-ordered resources plus the edges that closed cycles"""
    resources: List[ResourceRecord]
    cycles: List[DependencyCycle] = field(default_factory=list)


def normalize_depends_on(value: Any) -> List[str]:
    """DependsOn may be a single id or a list of ids"""
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [str(v) for v in value]
    raise TemplateLoadError(f"DependsOn must be a string or list, got {type(value).__name__}")


class ResourceGraphExtractor:
    """Builds ResourceRecords and orders them by declared dependencies"""

    def __init__(self):
        self.logger = logging.getLogger('migration_analysis.extractor')

    def build_records(self, resources_map: Dict[str, Any]) -> List[ResourceRecord]:
        """Convert raw resource definitions to records in template order"""
        records = []

        for logical_id, definition in resources_map.items():
            if not isinstance(definition, dict):
                raise TemplateLoadError(f"Resource {logical_id} must be an object")
            if not definition.get('Type'):
                raise TemplateLoadError(f"Resource {logical_id} has no Type")

            try:
                depends_on = normalize_depends_on(definition.get('DependsOn'))
            except TemplateLoadError as e:
                raise TemplateLoadError(f"Resource {logical_id}: {e}") from e

            records.append(ResourceRecord(
                logical_id=logical_id,
                type=definition['Type'],
                properties=definition.get('Properties') or {},
                metadata=definition.get('Metadata'),
                depends_on=depends_on
            ))

        return records

    def extract(self, resources_map: Dict[str, Any]) -> ExtractionResult:
        """Extract records from a Resources map, sorted by dependency order"""
        records = self.build_records(resources_map)
        return self.sort_by_dependency(records)

    def sort_by_dependency(self, records: List[ResourceRecord]) -> ExtractionResult:
        """
        Depth-first topological sort.

        Dependencies that are not in the template are ignored. An edge into a
        resource that is still being visited closes a cycle: it is logged,
        recorded and skipped, and the sort carries on.
        """
        record_map: Dict[str, ResourceRecord] = {r.logical_id: r for r in records}
        visited: Set[str] = set()
        visiting: Set[str] = set()
        sorted_records: List[ResourceRecord] = []
        cycles: List[DependencyCycle] = []

        def visit(logical_id: str, parent: str = None):
            if logical_id in visited:
                return
            if logical_id in visiting:
                self.logger.warning(f"⚠️  Circular dependency detected involving {logical_id}")
                cycles.append(DependencyCycle(source=parent, target=logical_id))
                return

            record = record_map[logical_id]
            visiting.add(logical_id)

            for dep_id in record.depends_on:
                if dep_id in record_map:
                    visit(dep_id, logical_id)

            visiting.discard(logical_id)
            visited.add(logical_id)
            sorted_records.append(record)

        for record in records:
            visit(record.logical_id)

        self.logger.debug(f"Sorted {len(sorted_records)} resources ({len(cycles)} cycle edges)")
        return ExtractionResult(resources=sorted_records, cycles=cycles)
