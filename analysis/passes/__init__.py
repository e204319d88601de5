"""
Relationship inference passes.

Importing this package registers every pass implementation.
"""

from .iam_permission_pass import IAMPermissionPass
from .network_access_pass import NetworkAccessPass
from .data_reference_pass import DataReferencePass

from .base_pass import RelationshipPass
from .pass_registry import PassRegistry, get_registry, register_pass

__all__ = [
    'IAMPermissionPass',
    'NetworkAccessPass',
    'DataReferencePass',
    'RelationshipPass',
    'PassRegistry',
    'get_registry',
    'register_pass'
]
