"""
Stack analysis: template loading, graph extraction and relationship inference.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from core.models import RelationshipRecord, StackAnalysisResult
from core.synthesizer import TemplateSynthesizer
from core.template_loader import load_template, validate_template
from analysis.graph_extractor import ResourceGraphExtractor
from analysis.relationship_engine import RelationshipInferenceEngine


class StackAnalyzer:
    """Builds StackAnalysisResults from templates, synthesized projects or deployed stacks"""

    def __init__(self, synthesizer: Optional[TemplateSynthesizer] = None,
                 extractor: Optional[ResourceGraphExtractor] = None,
                 relationship_engine: Optional[RelationshipInferenceEngine] = None,
                 template_client=None):
        self.synthesizer = synthesizer
        self.extractor = extractor or ResourceGraphExtractor()
        self.relationship_engine = relationship_engine or RelationshipInferenceEngine()
        self.template_client = template_client
        self.logger = logging.getLogger('migration_analysis.analyzer')

    def analyze_template(self, template: Dict[str, Any], stack_name: str,
                         template_path: Optional[str] = None) -> StackAnalysisResult:
        """Analyze an already parsed template document"""
        validate_template(template, source=template_path or stack_name)

        extraction = self.extractor.extract(template['Resources'])

        result = StackAnalysisResult(
            stack_name=stack_name,
            raw_template=template,
            resources=extraction.resources,
            outputs=template.get('Outputs') or {},
            parameters=template.get('Parameters') or {},
            metadata=template.get('Metadata') or {},
            template_path=template_path,
            dependency_cycles=extraction.cycles
        )

        self.logger.debug(f"Analysis complete: found {len(result.resources)} resources")
        if result.has_cycles():
            self.logger.info(f"{stack_name}: {len(result.dependency_cycles)} dependency cycle edges")

        return result

    def analyze_template_file(self, template_path: Union[str, Path],
                              stack_name: Optional[str] = None) -> StackAnalysisResult:
        """Analyze a template document on disk"""
        template_path = Path(template_path)
        template = load_template(template_path)
        stack_name = stack_name or template_path.name.split('.')[0]
        return self.analyze_template(template, stack_name, template_path=str(template_path))

    def analyze_stack(self, project_path: Union[str, Path], stack_name: str) -> StackAnalysisResult:
        """Synthesize a project's stack and analyze the resulting template"""
        if self.synthesizer is None:
            raise ValueError("No synthesizer configured for project analysis")

        self.logger.debug(f"Analyzing stack: {stack_name} at {project_path}")
        template_path = self.synthesizer.synthesize(project_path, stack_name)
        return self.analyze_template_file(template_path, stack_name)

    def analyze_deployed_stack(self, stack_name: str) -> StackAnalysisResult:
        """Analyze the template of a deployed stack"""
        if self.template_client is None:
            raise ValueError("No CloudFormation client configured for deployed stack analysis")

        template = self.template_client.get_template(stack_name)
        return self.analyze_template(template, stack_name)

    def analyze_relationships(self, result: StackAnalysisResult) -> List[RelationshipRecord]:
        """Infer implicit relationships between the analyzed resources"""
        return self.relationship_engine.infer(result.resources)
