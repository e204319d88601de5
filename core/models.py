"""
Data model for template analysis and migration validation results.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, List, Optional


class RelationshipKind(str, Enum):
    """Kinds of implicit relationships inferred between resources"""
    PERMISSION_GRANT = "permission-grant"
    NETWORK_ACCESS = "network-access"
    DATA_REFERENCE = "data-reference"


class DiffStatus(str, Enum):
    """Binary verdict of a template comparison"""
    NO_CHANGES = "NO_CHANGES"
    HAS_CHANGES = "HAS_CHANGES"


@dataclass(frozen=True)
class ResourceRecord:
    """Single resource extracted from a template's Resources section"""
    logical_id: str                 # Unique key within one template
    type: str                       # Resource type (e.g., "AWS::S3::Bucket")
    properties: Dict[str, Any] = field(default_factory=dict)
    metadata: Optional[Dict[str, Any]] = None
    depends_on: List[str] = field(default_factory=list)

    def get_service_name(self) -> str:
        """Get the service segment of the resource type (AWS::EC2::Instance -> ec2)"""
        parts = self.type.split("::")
        return parts[1].lower() if len(parts) >= 2 else ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert ResourceRecord to dictionary for serialization"""
        return {
            'logical_id': self.logical_id,
            'type': self.type,
            'properties': self.properties,
            'metadata': self.metadata,
            'depends_on': list(self.depends_on)
        }


@dataclass(frozen=True)
class RelationshipRecord:
    """Derived relationship between two resources; duplicates are allowed"""
    source: str
    target: str
    kind: RelationshipKind
    evidence: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'source': self.source,
            'target': self.target,
            'kind': self.kind.value,
            'evidence': self.evidence
        }


@dataclass(frozen=True)
class DependencyCycle:
    """Edge that closed a dependency cycle during extraction"""
    source: str     # Resource being visited
    target: str     # Dependency already on the visiting stack

    def to_dict(self) -> Dict[str, str]:
        return {'source': self.source, 'target': self.target}


@dataclass(frozen=True)
class StackAnalysisResult:
    """Outcome of analyzing one template"""
    stack_name: str
    raw_template: Dict[str, Any]
    resources: List[ResourceRecord]
    outputs: Dict[str, Any] = field(default_factory=dict)
    parameters: Dict[str, Any] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)
    template_path: Optional[str] = None
    dependency_cycles: List[DependencyCycle] = field(default_factory=list)

    def get_resource(self, logical_id: str) -> Optional[ResourceRecord]:
        """Look up a resource by logical ID"""
        for resource in self.resources:
            if resource.logical_id == logical_id:
                return resource
        return None

    def get_logical_ids(self) -> List[str]:
        """Logical IDs in dependency order"""
        return [r.logical_id for r in self.resources]

    def has_cycles(self) -> bool:
        return bool(self.dependency_cycles)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'stack_name': self.stack_name,
            'template_path': self.template_path,
            'resources': [r.to_dict() for r in self.resources],
            'outputs': self.outputs,
            'parameters': self.parameters,
            'metadata': self.metadata,
            'dependency_cycles': [c.to_dict() for c in self.dependency_cycles]
        }


@dataclass(frozen=True)
class ModifiedResource:
    """Resource present in both templates whose definition differs"""
    logical_id: str
    differences: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {'logical_id': self.logical_id, 'differences': list(self.differences)}


@dataclass(frozen=True)
class TemplateComparisonResult:
    """Structured comparison of two resource sets"""
    original_count: int = 0
    migrated_count: int = 0
    matching_count: int = 0
    missing_resources: List[str] = field(default_factory=list)   # Only in original
    extra_resources: List[str] = field(default_factory=list)     # Only in migrated
    modified_resources: List[ModifiedResource] = field(default_factory=list)

    def is_identical(self) -> bool:
        """Check if no resource was added, removed or modified"""
        return not (self.missing_resources or self.extra_resources or self.modified_resources)

    def get_modified(self, logical_id: str) -> Optional[ModifiedResource]:
        for modified in self.modified_resources:
            if modified.logical_id == logical_id:
                return modified
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'original_count': self.original_count,
            'migrated_count': self.migrated_count,
            'matching_count': self.matching_count,
            'missing_resources': list(self.missing_resources),
            'extra_resources': list(self.extra_resources),
            'modified_resources': [m.to_dict() for m in self.modified_resources]
        }


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of one migration validation run"""
    success: bool
    diff_status: DiffStatus
    validation_errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    comparison: TemplateComparisonResult = field(default_factory=TemplateComparisonResult)
    plan_output: str = ""
    diff_output: str = ""

    def has_changes(self) -> bool:
        return self.diff_status == DiffStatus.HAS_CHANGES

    def to_dict(self) -> Dict[str, Any]:
        return {
            'success': self.success,
            'diff_status': self.diff_status.value,
            'validation_errors': list(self.validation_errors),
            'warnings': list(self.warnings),
            'comparison': self.comparison.to_dict(),
            'plan_output': self.plan_output,
            'diff_output': self.diff_output
        }
