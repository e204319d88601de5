"""
Generic data-reference relationships.

Fallback detector that runs on every resource: each Ref or Fn::GetAtt found in
the property tree links the resource to the referenced logical id.
"""

from typing import List

from core.models import RelationshipKind, RelationshipRecord, ResourceRecord
from analysis.references import AttributeReference, is_pseudo_parameter, iter_references
from .base_pass import RelationshipPass
from .pass_registry import register_pass


@register_pass
class DataReferencePass(RelationshipPass):
    """Links a resource to every resource its properties reference"""

    name = "data"
    order = 30

    def applies_to(self, resource: ResourceRecord) -> bool:
        return True

    def find_relationships(self, resource: ResourceRecord) -> List[RelationshipRecord]:
        relationships = []

        for path, reference in iter_references(resource.properties):
            target = reference.logical_id
            if target == resource.logical_id or is_pseudo_parameter(target):
                continue

            evidence = {'type': reference.shape, 'path': path}
            if isinstance(reference, AttributeReference):
                evidence['attribute'] = reference.attribute

            relationships.append(RelationshipRecord(
                source=resource.logical_id,
                target=target,
                kind=RelationshipKind.DATA_REFERENCE,
                evidence=evidence
            ))

        return relationships
