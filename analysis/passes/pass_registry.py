"""
Registry of relationship inference passes.
"""

from typing import Dict, List, Type
import logging

from .base_pass import RelationshipPass


class PassRegistry:
    """Registry for relationship pass implementations"""

    def __init__(self):
        self._passes: Dict[str, Type[RelationshipPass]] = {}
        self.logger = logging.getLogger('migration_analysis.registry')

    def register_pass(self, pass_class: Type[RelationshipPass]):
        """Register a pass implementation"""
        pass_name = pass_class.name

        if pass_name in self._passes:
            self.logger.warning(f"Pass {pass_name} already registered, overwriting")

        self._passes[pass_name] = pass_class
        self.logger.debug(f"Registered relationship pass: {pass_name}")

    def create_all_passes(self) -> List[RelationshipPass]:
        """Fresh pass instances, ordered by their declared order"""
        pass_classes = sorted(self._passes.values(), key=lambda cls: cls.order)
        return [pass_class() for pass_class in pass_classes]

    def create_passes(self, names: List[str]) -> List[RelationshipPass]:
        """Fresh instances of the named passes, ordered by their declared order"""
        unknown = [n for n in names if n not in self._passes]
        if unknown:
            raise ValueError(f"Unknown relationship passes: {unknown}. Available: {sorted(self._passes)}")

        pass_classes = sorted((self._passes[n] for n in names), key=lambda cls: cls.order)
        return [pass_class() for pass_class in pass_classes]

    def list_registered_passes(self) -> List[str]:
        return [cls.name for cls in sorted(self._passes.values(), key=lambda cls: cls.order)]


# Global pass registry instance
_registry = PassRegistry()


def register_pass(pass_class: Type[RelationshipPass]):
    """Decorator to register a pass class"""
    _registry.register_pass(pass_class)
    return pass_class


def get_registry() -> PassRegistry:
    """Get the global pass registry"""
    return _registry
