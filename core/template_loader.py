"""
Template document loading.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Union

from .errors import TemplateLoadError

logger = logging.getLogger('migration_analysis.loader')


def load_template(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Read and validate a template document from disk.

    Raises:
        TemplateLoadError: file missing or unreadable, malformed JSON, or no Resources map
    """
    template_path = Path(path)

    if not template_path.exists():
        raise TemplateLoadError(f"Template file does not exist: {template_path}")
    if not template_path.is_file():
        raise TemplateLoadError(f"Template path is not a file: {template_path}")

    try:
        with open(template_path, 'r', encoding='utf-8') as f:
            content = f.read()
    except OSError as e:
        raise TemplateLoadError(f"Failed to read template {template_path}: {e}") from e

    template = parse_template(content, source=str(template_path))
    logger.debug(f"Loaded template {template_path} with {len(template['Resources'])} resources")
    return template


def parse_template(content: str, source: str = "<string>") -> Dict[str, Any]:
    """Parse a template document from JSON text"""
    try:
        template = json.loads(content)
    except json.JSONDecodeError as e:
        raise TemplateLoadError(f"Malformed JSON in template {source}: {e}") from e

    validate_template(template, source)
    return template


def validate_template(template: Any, source: str = "<template>"):
    """Check the top-level shape of a template document"""
    if not isinstance(template, dict):
        raise TemplateLoadError(f"Template {source} must be a JSON object, got {type(template).__name__}")

    resources = template.get('Resources')
    if resources is None:
        raise TemplateLoadError(f"Template {source} has no Resources section")
    if not isinstance(resources, dict):
        raise TemplateLoadError(f"Resources section of {source} must be an object")

    for section in ('Outputs', 'Parameters', 'Metadata'):
        value = template.get(section)
        if value is not None and not isinstance(value, dict):
            raise TemplateLoadError(f"{section} section of {source} must be an object")
