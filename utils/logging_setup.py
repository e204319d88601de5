"""
Centralized logging setup for migration analysis.
"""

import logging
import sys
import time
from pathlib import Path
from typing import Optional

ROOT_LOGGER_NAME = "migration_analysis"


def setup_logging(
    log_level: str = "INFO",
    console_level: str = "INFO",
    file_level: str = "DEBUG",
    log_file: Optional[Path] = None,
    logger_name: str = ROOT_LOGGER_NAME
) -> logging.Logger:
    """
    Setup centralized logging for migration analysis.

    Args:
        log_level: Overall log level
        console_level: Console output log level
        file_level: File output log level
        log_file: Path to log file (optional)
        logger_name: Name of the logger

    Returns:
        Configured logger instance
    """

    # Create main logger
    logger = logging.getLogger(logger_name)
    logger.setLevel(getattr(logging, log_level.upper()))

    # Clear any existing handlers
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.propagate = False

    # Create formatters
    detailed_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    simple_formatter = logging.Formatter(
        '%(levelname)s - %(message)s'
    )

    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(getattr(logging, console_level.upper()))
    console_handler.setFormatter(simple_formatter)
    logger.addHandler(console_handler)

    # File handler (if log file specified)
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(getattr(logging, file_level.upper()))
        file_handler.setFormatter(detailed_formatter)
        logger.addHandler(file_handler)

    return logger


def log_system_info(logger: logging.Logger):
    """Log system and environment information"""
    import platform
    import boto3
    import neo4j

    logger.info("🖥️  System Information:")
    logger.info(f"   Platform: {platform.platform()}")
    logger.info(f"   Python: {platform.python_version()}")
    logger.info(f"   Boto3: {boto3.__version__}")
    logger.info(f"   Neo4j driver: {getattr(neo4j, '__version__', 'unknown')}")


def log_configuration(logger: logging.Logger, config):
    """Log run configuration"""
    logger.info("⚙️  Migration Analysis Configuration:")
    logger.info(f"   Synth Command: {' '.join(config.synth_command)}")
    logger.info(f"   Migrated Synth Command: {' '.join(config.migrated_synth_command)}")
    logger.info(f"   Plan Command: {' '.join(config.plan_command) if config.plan_command else 'disabled'}")
    logger.info(f"   Diff Mode: {config.diff_mode}")
    logger.info(f"   Command Timeout: {config.command_timeout}s")
    logger.info(f"   Output Formats: {', '.join(config.output_formats)}")

    if config.region or config.profile:
        logger.info(f"   Region: {config.region or 'default'}")
        logger.info(f"   Profile: {config.profile or 'default'}")

    if config.is_neo4j_enabled():
        logger.info(f"   Neo4j: {config.graph_db_url}")
        logger.info(f"   Reset Graph: {config.reset_graph}")


def configure_third_party_loggers():
    """Configure third-party library loggers to reduce noise"""
    logging.getLogger('boto3').setLevel(logging.WARNING)
    logging.getLogger('botocore').setLevel(logging.WARNING)
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('neo4j').setLevel(logging.WARNING)


class TimedLogger:
    """Logger that tracks timing of operations"""

    def __init__(self, logger: logging.Logger, operation_name: str):
        self.logger = logger
        self.operation_name = operation_name
        self.start_time = None

    def __enter__(self):
        self.start_time = time.time()
        self.logger.info(f"🚀 Starting {self.operation_name}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.start_time:
            duration = time.time() - self.start_time
            if exc_type is None:
                self.logger.info(f"✅ {self.operation_name} completed in {duration:.2f} seconds")
            else:
                self.logger.error(f"❌ {self.operation_name} failed after {duration:.2f} seconds")

    def log_milestone(self, milestone: str):
        """Log a milestone during the operation"""
        if self.start_time:
            elapsed = time.time() - self.start_time
            self.logger.info(f"📍 {self.operation_name} - {milestone} (elapsed: {elapsed:.2f}s)")
