"""
Base exporter class for analysis and validation output formats.
"""

from abc import ABC, abstractmethod
from collections import Counter
from typing import List, Dict, Any, Optional
from pathlib import Path
import logging

from core.config import MigrationConfig
from core.models import RelationshipRecord, StackAnalysisResult, ValidationResult


class BaseExporter(ABC):
    """Abstract base class for result exporters"""

    def __init__(self, config: MigrationConfig, output_dir: Path):
        """Initialize exporter with configuration and output directory"""
        self.config = config
        self.output_dir = output_dir
        self.logger = logging.getLogger(f'migration_analysis.exporter.{self.get_format_name()}')

        # Ensure output directory exists
        self.output_dir.mkdir(parents=True, exist_ok=True)

    @abstractmethod
    def get_format_name(self) -> str:
        """Return the format name (e.g., 'json')"""
        pass

    @abstractmethod
    def get_file_extension(self) -> str:
        """Return the file extension (e.g., '.json')"""
        pass

    @abstractmethod
    def export_analysis(self, result: StackAnalysisResult, relationships: List[RelationshipRecord],
                        filename: str = None) -> Optional[Path]:
        """Export a stack analysis and its inferred relationships"""
        pass

    @abstractmethod
    def export_validation(self, result: ValidationResult, filename: str = None) -> Optional[Path]:
        """Export a validation result"""
        pass

    def should_export(self) -> bool:
        """Check if this format should be exported based on configuration"""
        return self.config.should_export_format(self.get_format_name())

    def get_output_filename(self, base_name: str) -> str:
        """Get the output filename with appropriate extension"""
        return f"{base_name}{self.get_file_extension()}"

    def get_output_path(self, filename: str) -> Path:
        """Get the full output path for a filename"""
        return self.output_dir / filename

    def get_analysis_statistics(self, result: StackAnalysisResult,
                                relationships: List[RelationshipRecord]) -> Dict[str, Any]:
        """Get statistics about an analyzed stack"""
        return {
            'total_resources': len(result.resources),
            'resources_by_service': dict(Counter(r.get_service_name() or 'unknown' for r in result.resources)),
            'resources_by_type': dict(Counter(r.type for r in result.resources)),
            'relationships_by_kind': dict(Counter(r.kind.value for r in relationships)),
            'dependency_cycles': len(result.dependency_cycles)
        }

    def log_export_summary(self, output_path: Path, summary: Dict[str, Any]):
        """Log export summary"""
        self.logger.info(f"📄 {self.get_format_name().upper()} Export Summary:")
        self.logger.info(f"   File: {output_path}")
        for key, value in summary.items():
            self.logger.info(f"   {key.replace('_', ' ').title()}: {value}")
