"""
Exception hierarchy for migration analysis and validation.
"""


class MigrationAnalysisError(Exception):
    """Base class for all migration analysis errors"""
    pass


class TemplateLoadError(MigrationAnalysisError):
    """Template document is missing, unreadable or malformed"""
    pass


class CommandError(MigrationAnalysisError):
    """External command could not be run to completion"""

    def __init__(self, message: str, args=None, returncode=None, stdout: str = "", stderr: str = ""):
        super().__init__(message)
        self.command = list(args or [])
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


class SynthesisError(MigrationAnalysisError):
    """Re-synthesis of a template failed"""

    def __init__(self, message: str, errors=None, output: str = ""):
        super().__init__(message)
        self.errors = list(errors or [])
        self.output = output
