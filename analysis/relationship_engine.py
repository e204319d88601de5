"""
Relationship inference across a template's resources.
"""

import logging
from collections import Counter
from typing import Dict, List, Optional

from core.models import RelationshipRecord, ResourceRecord
from analysis.passes import RelationshipPass, get_registry


class RelationshipInferenceEngine:
    """Runs every relationship pass on every resource and concatenates the results"""

    def __init__(self, passes: Optional[List[RelationshipPass]] = None):
        self.passes = passes if passes is not None else get_registry().create_all_passes()
        self.logger = logging.getLogger('migration_analysis.relationships')

    def infer(self, resources: List[ResourceRecord]) -> List[RelationshipRecord]:
        """
        Derive implicit relationships.

        For each resource the passes run in order (permission grants, network
        access, data references). Relationships are derived, not authoritative,
        and the same source/target/kind may appear more than once.
        """
        relationships: List[RelationshipRecord] = []

        for resource in resources:
            for relationship_pass in self.passes:
                relationships.extend(relationship_pass.analyze(resource))

        counts = Counter(r.kind.value for r in relationships)
        self.logger.info(
            f"🔗 Inferred {len(relationships)} relationships across {len(resources)} resources"
            + (f" ({', '.join(f'{k}: {c}' for k, c in sorted(counts.items()))})" if counts else "")
        )
        return relationships

    def get_statistics(self) -> Dict[str, Dict[str, int]]:
        return {p.get_pass_name(): p.stats.copy() for p in self.passes}
