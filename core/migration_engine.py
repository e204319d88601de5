"""
Main engine for migration analysis and validation runs.
"""

from datetime import datetime
from pathlib import Path
from typing import List, Dict, Any, Optional, Tuple, Union

from core.cloudformation_client import CloudFormationTemplateClient
from core.command_runner import CommandRunner
from core.config import MigrationConfig
from core.models import RelationshipRecord, StackAnalysisResult, ValidationResult
from core.synthesizer import create_original_synthesizer
from analysis.stack_analyzer import StackAnalyzer
from validation.migration_validator import MigrationValidator
from graph.neo4j_client import Neo4jClient
from exporters.json_exporter import JSONExporter
from utils.logging_setup import setup_logging, TimedLogger, log_system_info, log_configuration, configure_third_party_loggers


class MigrationEngine:
    """Runs analyses and validations, exports results and keeps run statistics"""

    def __init__(self, config: MigrationConfig, runner: Optional[CommandRunner] = None,
                 neo4j_client: Optional[Neo4jClient] = None):
        """Initialize engine with configuration"""
        self.config = config
        self.output_dir = config.get_output_path()
        self.output_dir.mkdir(parents=True, exist_ok=True)

        # Setup logging
        self.logger = setup_logging(
            log_level=config.log_level,
            console_level=config.console_log_level,
            file_level=config.file_log_level,
            log_file=self.output_dir / "migration-analysis.log"
        )

        configure_third_party_loggers()
        log_system_info(self.logger)
        log_configuration(self.logger, config)

        # Initialize components
        self.runner = runner or CommandRunner(timeout=config.command_timeout)
        self._template_client = None
        self.analyzer = StackAnalyzer(synthesizer=create_original_synthesizer(config, self.runner))
        self.validator = MigrationValidator.from_config(config, self.runner)
        self.exporter = JSONExporter(config, self.output_dir)

        self.neo4j_client = neo4j_client
        if self.neo4j_client is None and config.is_neo4j_enabled():
            self.neo4j_client = Neo4jClient(config)

        # Run statistics
        self.stats = {
            'start_time': None,
            'end_time': None,
            'stacks_analyzed': 0,
            'resources_analyzed': 0,
            'relationships_inferred': 0,
            'dependency_cycles': 0,
            'validations_run': 0,
            'validations_failed': 0,
            'validations_with_changes': 0,
            'exported_files': [],
            'errors': []
        }

    def get_template_client(self) -> CloudFormationTemplateClient:
        """Lazily create the AWS client; only deployed-stack analysis needs credentials"""
        if self._template_client is None:
            self._template_client = CloudFormationTemplateClient(self.config)
            self.analyzer.template_client = self._template_client
        return self._template_client

    def run_analysis(self, template_path: Optional[Union[str, Path]] = None,
                     project_path: Optional[Union[str, Path]] = None,
                     stack_name: Optional[str] = None,
                     deployed: bool = False) -> Tuple[StackAnalysisResult, List[RelationshipRecord]]:
        """
        Analyze one stack from a template file, a synthesized project or a deployed stack.

        Input errors propagate to the caller.
        """
        with TimedLogger(self.logger, "Stack Analysis") as timer:
            self.stats['start_time'] = datetime.now()

            if template_path:
                result = self.analyzer.analyze_template_file(template_path, stack_name)
            elif project_path and stack_name:
                result = self.analyzer.analyze_stack(project_path, stack_name)
            elif deployed and stack_name:
                self.get_template_client()
                result = self.analyzer.analyze_deployed_stack(stack_name)
            else:
                raise ValueError("Provide a template path, a project path and stack name, or a deployed stack name")

            timer.log_milestone(f"extracted {len(result.resources)} resources")

            relationships = self.analyzer.analyze_relationships(result)
            timer.log_milestone(f"inferred {len(relationships)} relationships")

            self.stats['stacks_analyzed'] += 1
            self.stats['resources_analyzed'] += len(result.resources)
            self.stats['relationships_inferred'] += len(relationships)
            self.stats['dependency_cycles'] += len(result.dependency_cycles)

            self._export(lambda: self.exporter.export_analysis(result, relationships), "analysis")

            if self.neo4j_client:
                self._update_neo4j_graph(result, relationships)

            self.stats['end_time'] = datetime.now()
            self._log_final_statistics()

            return result, relationships

    def run_validation(self, migrated_project_path: Union[str, Path],
                       original_template_path: Union[str, Path],
                       stack_name: str) -> ValidationResult:
        """Re-synthesize the migrated project and validate it against the original template"""
        with TimedLogger(self.logger, "Migration Validation"):
            self.stats['start_time'] = datetime.now()
            result = self.validator.validate_migration(migrated_project_path, original_template_path, stack_name)
            return self._finish_validation(result)

    def run_comparison(self, original_template_path: Union[str, Path],
                       migrated_template_path: Union[str, Path]) -> ValidationResult:
        """Validate two existing template files against each other"""
        with TimedLogger(self.logger, "Template Comparison"):
            self.stats['start_time'] = datetime.now()
            result = self.validator.validate_templates(original_template_path, migrated_template_path)
            return self._finish_validation(result)

    def _finish_validation(self, result: ValidationResult) -> ValidationResult:
        self.stats['validations_run'] += 1
        if not result.success:
            self.stats['validations_failed'] += 1
            self.stats['errors'].extend(result.validation_errors)
        if result.has_changes():
            self.stats['validations_with_changes'] += 1

        self._export(lambda: self.exporter.export_validation(result), "validation")

        self.stats['end_time'] = datetime.now()
        self._log_final_statistics()
        return result

    def _export(self, export_call, label: str):
        """Run an export; failures are recorded, not raised"""
        try:
            output_path = export_call()
            if output_path:
                self.stats['exported_files'].append(str(output_path))
        except OSError as e:
            self.logger.error(f"Export of {label} failed: {e}")
            self.stats['errors'].append(f"Export {label}: {e}")

    def _update_neo4j_graph(self, result: StackAnalysisResult, relationships: List[RelationshipRecord]):
        """Publish the analyzed stack to Neo4j"""
        try:
            with TimedLogger(self.logger, "Neo4j Graph Update"):
                if self.config.reset_graph:
                    self.neo4j_client.reset_graph()

                self.neo4j_client.publish_analysis(result, relationships)
                self.neo4j_client.log_statistics()

        except Exception as e:
            self.logger.error(f"Failed to update Neo4j graph: {e}")
            self.stats['errors'].append(f"Neo4j: {e}")

    def _log_final_statistics(self):
        """Log run statistics"""
        duration = (self.stats['end_time'] - self.stats['start_time']).total_seconds()

        self.logger.info("🎉 Run Complete!")
        self.logger.info("📊 Final Statistics:")
        self.logger.info(f"   Duration: {duration:.2f} seconds")

        if self.stats['stacks_analyzed']:
            self.logger.info(f"   Stacks Analyzed: {self.stats['stacks_analyzed']}")
            self.logger.info(f"   Resources: {self.stats['resources_analyzed']}")
            self.logger.info(f"   Relationships: {self.stats['relationships_inferred']}")

        if self.stats['dependency_cycles'] > 0:
            self.logger.info(f"   Dependency Cycle Edges: {self.stats['dependency_cycles']}")

        if self.stats['validations_run']:
            self.logger.info(f"   Validations: {self.stats['validations_run']}")
            if self.stats['validations_with_changes']:
                self.logger.warning(f"   With Changes: {self.stats['validations_with_changes']}")
            if self.stats['validations_failed']:
                self.logger.warning(f"   Failed: {self.stats['validations_failed']}")

        if self.stats['exported_files']:
            self.logger.info(f"   Exported Files: {len(self.stats['exported_files'])}")
            for file_path in self.stats['exported_files'][:5]:
                self.logger.info(f"     - {file_path}")

        if self.stats['errors']:
            self.logger.warning(f"   Errors Encountered: {len(self.stats['errors'])}")
            for error in self.stats['errors'][:3]:
                self.logger.warning(f"     - {error}")

    def cleanup(self):
        """Release external connections"""
        if self.neo4j_client:
            self.neo4j_client.close()
            self.neo4j_client = None

        self.logger.debug("✓ Cleanup completed successfully")

    def get_statistics(self) -> Dict[str, Any]:
        """Get run statistics"""
        return self.stats.copy()
