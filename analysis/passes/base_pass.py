"""
Base class for relationship inference passes.
"""

from abc import ABC, abstractmethod
from typing import List
import logging

from core.models import RelationshipRecord, ResourceRecord


class RelationshipPass(ABC):
    """Abstract base class for one kind of relationship detection"""

    name: str = ""

    # Lower runs first; results of all passes are concatenated in this order
    order: int = 100

    def __init__(self):
        self.logger = logging.getLogger(f'migration_analysis.relationships.{self.get_pass_name()}')

        # Pass statistics
        self.stats = {
            'resources_examined': 0,
            'relationships_found': 0
        }

    def get_pass_name(self) -> str:
        """Return the pass name (e.g., 'iam', 'network')"""
        return self.name

    @abstractmethod
    def applies_to(self, resource: ResourceRecord) -> bool:
        """Check if this pass inspects the given resource"""
        pass

    @abstractmethod
    def find_relationships(self, resource: ResourceRecord) -> List[RelationshipRecord]:
        """Return relationships originating at the resource"""
        pass

    def analyze(self, resource: ResourceRecord) -> List[RelationshipRecord]:
        """Run the pass on one resource and track statistics"""
        if not self.applies_to(resource):
            return []

        self.stats['resources_examined'] += 1
        relationships = self.find_relationships(resource)
        self.stats['relationships_found'] += len(relationships)

        for relationship in relationships:
            self.logger.debug(f"{relationship.source} -[{relationship.kind.value}]-> {relationship.target}")

        return relationships

    def get_statistics(self):
        return {'pass': self.get_pass_name(), 'stats': self.stats.copy()}
