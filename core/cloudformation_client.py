"""
CloudFormation client for fetching templates of deployed stacks.
"""

import json
import logging
from typing import Any, Dict, Optional

import boto3
from botocore.exceptions import ClientError, NoCredentialsError

from .config import MigrationConfig
from .errors import TemplateLoadError
from .template_loader import validate_template


class CloudFormationTemplateClient:
    """Read-only access to the templates of deployed CloudFormation stacks"""

    def __init__(self, config: MigrationConfig, session: Optional[boto3.Session] = None):
        """Initialize client with configuration and an optional AWS session"""
        self.config = config
        if session is None:
            session = boto3.Session(profile_name=config.profile) if config.profile else boto3.Session()
        self.session = session
        self.region = config.region
        self.logger = logging.getLogger('migration_analysis.cloudformation')

        # Client cache
        self._clients = {}

    def get_client(self, service_name: str = 'cloudformation'):
        """Get cached AWS client for service"""
        if service_name not in self._clients:
            try:
                self._clients[service_name] = self.session.client(
                    service_name,
                    region_name=self.region
                )
            except Exception as e:
                self.logger.error(f"Failed to create {service_name} client: {e}")
                raise

        return self._clients[service_name]

    def get_template(self, stack_name: str) -> Dict[str, Any]:
        """
        Fetch the original template of a deployed stack.

        Raises:
            TemplateLoadError: the stack cannot be read or its template is not JSON
        """
        self.logger.info(f"☁️  Fetching template for deployed stack: {stack_name}")

        try:
            response = self.get_client().get_template(
                StackName=stack_name,
                TemplateStage='Original'
            )
        except ClientError as e:
            error_code = e.response.get('Error', {}).get('Code', 'Unknown')
            self.logger.error(f"✗ {stack_name}: {error_code} - {e}")
            raise TemplateLoadError(f"Failed to fetch template for stack '{stack_name}': {error_code}: {e}") from e
        except NoCredentialsError as e:
            raise TemplateLoadError(f"No AWS credentials available to fetch stack '{stack_name}'") from e

        body = response.get('TemplateBody')

        # get_template returns a parsed document for JSON bodies and a string otherwise
        if isinstance(body, str):
            try:
                body = json.loads(body)
            except json.JSONDecodeError as e:
                raise TemplateLoadError(
                    f"Template of stack '{stack_name}' is not JSON (YAML templates are not supported)"
                ) from e

        validate_template(body, source=f"stack:{stack_name}")
        return body
