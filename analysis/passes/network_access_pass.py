"""
Network-access relationships from security group rules.
"""

from typing import Any, Dict, List

from core.models import RelationshipKind, RelationshipRecord, ResourceRecord
from analysis.references import is_structured_reference, parse_reference
from .base_pass import RelationshipPass
from .pass_registry import register_pass


SECURITY_GROUP_TYPE = "AWS::EC2::SecurityGroup"
STANDALONE_RULE_TYPES = {"AWS::EC2::SecurityGroupIngress", "AWS::EC2::SecurityGroupEgress"}
PEER_FIELDS = ['SourceSecurityGroupId', 'DestinationSecurityGroupId']


@register_pass
class NetworkAccessPass(RelationshipPass):
    """Links security groups to the peer groups their rules reference"""

    name = "network"
    order = 20

    def applies_to(self, resource: ResourceRecord) -> bool:
        return resource.type == SECURITY_GROUP_TYPE or resource.type in STANDALONE_RULE_TYPES

    def find_relationships(self, resource: ResourceRecord) -> List[RelationshipRecord]:
        relationships = []

        for rule in self._get_rules(resource):
            for peer_field in PEER_FIELDS:
                if peer_field not in rule:
                    continue

                # Literal group ids and CIDRs cannot be traced to a logical id
                reference = parse_reference(rule[peer_field])
                if not is_structured_reference(reference):
                    continue

                relationships.append(RelationshipRecord(
                    source=resource.logical_id,
                    target=reference.logical_id,
                    kind=RelationshipKind.NETWORK_ACCESS,
                    evidence={
                        'port': rule.get('FromPort'),
                        'protocol': rule.get('IpProtocol')
                    }
                ))

        return relationships

    def _get_rules(self, resource: ResourceRecord) -> List[Dict[str, Any]]:
        properties = resource.properties

        if resource.type in STANDALONE_RULE_TYPES:
            return [properties]

        rules = []
        for field_name in ('SecurityGroupIngress', 'SecurityGroupEgress'):
            value = properties.get(field_name) or []
            if isinstance(value, list):
                rules.extend(rule for rule in value if isinstance(rule, dict))

        return rules
