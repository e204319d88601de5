"""
JSON exporter for analysis and validation results.
"""

import json
from typing import Any, Dict, List, Optional
from pathlib import Path
from datetime import datetime

from core.models import RelationshipRecord, StackAnalysisResult, ValidationResult
from .base_exporter import BaseExporter


class JSONExporter(BaseExporter):
    """Export results to JSON format"""

    def get_format_name(self) -> str:
        return "json"

    def get_file_extension(self) -> str:
        return ".json"

    def export_analysis(self, result: StackAnalysisResult, relationships: List[RelationshipRecord],
                        filename: str = None) -> Optional[Path]:
        """Export a stack analysis to a JSON file"""
        if not self.should_export():
            self.logger.debug("JSON export disabled by configuration")
            return None

        output_path = self.get_output_path(filename or self.get_output_filename("analysis"))
        self.logger.info(f"📄 Exporting analysis of {result.stack_name} to JSON: {output_path}")

        statistics = self.get_analysis_statistics(result, relationships)
        export_data = {
            'metadata': self._export_metadata('analysis'),
            'statistics': statistics,
            'analysis': result.to_dict(),
            'relationships': [r.to_dict() for r in relationships]
        }

        self._write(output_path, export_data)
        self.log_export_summary(output_path, {
            'stack': result.stack_name,
            'resources': statistics['total_resources'],
            'relationships': len(relationships)
        })
        return output_path

    def export_validation(self, result: ValidationResult, filename: str = None) -> Optional[Path]:
        """Export a validation result to a JSON file"""
        if not self.should_export():
            self.logger.debug("JSON export disabled by configuration")
            return None

        output_path = self.get_output_path(filename or self.get_output_filename("validation"))
        self.logger.info(f"📄 Exporting validation result to JSON: {output_path}")

        export_data = {
            'metadata': self._export_metadata('validation'),
            'validation': result.to_dict()
        }

        self._write(output_path, export_data)
        self.log_export_summary(output_path, {
            'success': result.success,
            'diff_status': result.diff_status.value,
            'modified_resources': len(result.comparison.modified_resources)
        })
        return output_path

    def _export_metadata(self, kind: str) -> Dict[str, Any]:
        return {
            'export_format': 'json',
            'export_kind': kind,
            'timestamp': datetime.now().isoformat()
        }

    def _write(self, output_path: Path, data: Dict[str, Any]):
        try:
            with open(output_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, default=str, ensure_ascii=False)
        except OSError as e:
            self.logger.error(f"Failed to export JSON: {e}")
            raise
