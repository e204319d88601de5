"""
Permission-grant relationships from IAM policy documents.
"""

from typing import Any, Dict, Iterator, List

from core.models import RelationshipKind, RelationshipRecord, ResourceRecord
from analysis.references import is_structured_reference, parse_reference
from .base_pass import RelationshipPass
from .pass_registry import register_pass


POLICY_RESOURCE_TYPES = {
    "AWS::IAM::Policy",
    "AWS::IAM::ManagedPolicy",
    "AWS::IAM::Role",
    "AWS::IAM::RolePolicy",
    "AWS::IAM::UserPolicy",
    "AWS::IAM::GroupPolicy",
}

POLICY_DOCUMENT_FIELDS = ['PolicyDocument', 'AssumeRolePolicyDocument']


@register_pass
class IAMPermissionPass(RelationshipPass):
    """Links policies and roles to the resources their Allow statements target"""

    name = "iam"
    order = 10

    def applies_to(self, resource: ResourceRecord) -> bool:
        return resource.type in POLICY_RESOURCE_TYPES

    def find_relationships(self, resource: ResourceRecord) -> List[RelationshipRecord]:
        relationships = []

        for document in self._iter_policy_documents(resource.properties):
            for statement in self._iter_statements(document):
                if statement.get('Effect') != 'Allow' or not statement.get('Resource'):
                    continue

                targets = statement['Resource']
                if not isinstance(targets, list):
                    targets = [targets]

                # Only structural references are traceable; literal ARNs are skipped
                for target in targets:
                    reference = parse_reference(target)
                    if not is_structured_reference(reference):
                        continue

                    relationships.append(RelationshipRecord(
                        source=resource.logical_id,
                        target=reference.logical_id,
                        kind=RelationshipKind.PERMISSION_GRANT,
                        evidence={
                            'actions': statement.get('Action'),
                            'resource': target
                        }
                    ))

        return relationships

    def _iter_policy_documents(self, properties: Dict[str, Any]) -> Iterator[Dict[str, Any]]:
        for field_name in POLICY_DOCUMENT_FIELDS:
            document = properties.get(field_name)
            if isinstance(document, dict):
                yield document

        # Inline policies of a role
        inline_policies = properties.get('Policies')
        if isinstance(inline_policies, list):
            for policy in inline_policies:
                if isinstance(policy, dict) and isinstance(policy.get('PolicyDocument'), dict):
                    yield policy['PolicyDocument']

    def _iter_statements(self, document: Dict[str, Any]) -> Iterator[Dict[str, Any]]:
        statements = document.get('Statement')
        if isinstance(statements, dict):
            statements = [statements]
        if not isinstance(statements, list):
            return

        for statement in statements:
            if isinstance(statement, dict):
                yield statement
