"""
Typed intrinsic references.

A property value is either a structured pointer to another resource
({"Ref": id} or {"Fn::GetAtt": [id, attribute]}) or a literal. References are
found by walking the parsed property tree, never its serialized text.
"""

from dataclasses import dataclass
from typing import Any, Iterator, Tuple, Union

PSEUDO_PARAMETER_PREFIX = "AWS::"


@dataclass(frozen=True)
class PlainReference:
    """{"Ref": logical_id}"""
    logical_id: str

    @property
    def shape(self) -> str:
        return "Ref"


@dataclass(frozen=True)
class AttributeReference:
    """{"Fn::GetAtt": [logical_id, attribute]}"""
    logical_id: str
    attribute: str

    @property
    def shape(self) -> str:
        return "GetAtt"


@dataclass(frozen=True)
class LiteralValue:
    """Anything that does not point at another resource"""
    value: Any


Reference = Union[PlainReference, AttributeReference, LiteralValue]


def parse_reference(node: Any) -> Reference:
    """Classify a single property value"""
    if not isinstance(node, dict) or len(node) != 1:
        return LiteralValue(node)

    if 'Ref' in node:
        target = node['Ref']
        if isinstance(target, str) and target:
            return PlainReference(target)
        return LiteralValue(node)

    if 'Fn::GetAtt' in node:
        target = node['Fn::GetAtt']

        # Long form: ["Resource", "Attribute"]
        if isinstance(target, list) and len(target) >= 2 and isinstance(target[0], str) and target[0]:
            attribute = target[1] if isinstance(target[1], str) else ""
            return AttributeReference(target[0], attribute)

        # Short form: "Resource.Attribute"
        if isinstance(target, str) and '.' in target:
            logical_id, attribute = target.split('.', 1)
            if logical_id:
                return AttributeReference(logical_id, attribute)

    return LiteralValue(node)


def is_structured_reference(reference: Reference) -> bool:
    return isinstance(reference, (PlainReference, AttributeReference))


def is_pseudo_parameter(logical_id: str) -> bool:
    """AWS::Region, AWS::AccountId and friends are not resources"""
    return logical_id.startswith(PSEUDO_PARAMETER_PREFIX)


def iter_references(tree: Any, path: str = "") -> Iterator[Tuple[str, Union[PlainReference, AttributeReference]]]:
    """
    Yield (path, reference) for every structured reference in a property tree.

    Each reference node is reported once; its own arguments are not searched
    again, but other intrinsic functions are walked into.
    """
    reference = parse_reference(tree)
    if is_structured_reference(reference):
        yield path, reference
        return

    if isinstance(tree, dict):
        for key, value in tree.items():
            child_path = f"{path}.{key}" if path else str(key)
            yield from iter_references(value, child_path)

    elif isinstance(tree, list):
        for i, item in enumerate(tree):
            yield from iter_references(item, f"{path}[{i}]" if path else f"[{i}]")
