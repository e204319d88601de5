"""
Neo4j client for publishing analyzed stacks as a resource graph.
"""

import logging
from typing import List, Dict, Any
import json

from neo4j import GraphDatabase
from neo4j.exceptions import ServiceUnavailable, AuthError

from core.config import MigrationConfig
from core.models import RelationshipKind, RelationshipRecord, ResourceRecord, StackAnalysisResult


RELATIONSHIP_TYPES = {
    RelationshipKind.PERMISSION_GRANT: 'PERMISSION_GRANT',
    RelationshipKind.NETWORK_ACCESS: 'NETWORK_ACCESS',
    RelationshipKind.DATA_REFERENCE: 'DATA_REFERENCE',
}


class Neo4jClient:
    """Neo4j client for stack dependency and relationship graphs"""

    def __init__(self, config: MigrationConfig, driver=None):
        """Initialize Neo4j client with configuration"""
        self.config = config
        self.logger = logging.getLogger('migration_analysis.neo4j')
        self.driver = driver

        # Operation statistics
        self.stats = {
            'nodes_created': 0,
            'relationships_created': 0,
            'dependency_edges': 0,
            'inferred_edges': 0,
            'constraints_created': 0
        }

        if self.driver is None and config.is_neo4j_enabled():
            self._connect()

    def _connect(self):
        """Establish connection to Neo4j database"""
        try:
            uri = self.config.get_neo4j_uri()
            self.logger.info(f"Connecting to Neo4j at {uri}")

            self.driver = GraphDatabase.driver(
                uri,
                auth=(self.config.graph_db_user, self.config.graph_db_password)
            )

            self.driver.verify_connectivity()
            self.logger.info("✓ Neo4j connection successful")

        except AuthError as e:
            self.logger.error(f"✗ Neo4j authentication failed: {e}")
            raise
        except ServiceUnavailable as e:
            self.logger.error(f"✗ Neo4j service unavailable: {e}")
            raise

    def close(self):
        """Close Neo4j connection"""
        if self.driver:
            self.driver.close()
            self.driver = None
            self.logger.info("Neo4j connection closed")

    def reset_graph(self):
        """Delete everything and recreate constraints"""
        self.logger.info("🔄 Resetting Neo4j graph database")

        with self.driver.session() as session:
            session.run("MATCH (n) DETACH DELETE n")
            self.logger.info("✓ All nodes and relationships deleted")
            self._create_constraints(session)

    def _create_constraints(self, session):
        """Create necessary constraints and indexes"""
        statements = [
            "CREATE CONSTRAINT stack_name_unique IF NOT EXISTS FOR (s:Stack) REQUIRE s.name IS UNIQUE",
            "CREATE CONSTRAINT resource_key_unique IF NOT EXISTS FOR (r:Resource) REQUIRE r.key IS UNIQUE",
            "CREATE INDEX resource_type_index IF NOT EXISTS FOR (r:Resource) ON (r.resource_type)",
        ]

        for statement in statements:
            session.run(statement)
            self.stats['constraints_created'] += 1
            self.logger.debug(f"✓ Created constraint/index: {statement}")

    def publish_analysis(self, result: StackAnalysisResult, relationships: List[RelationshipRecord]):
        """Write a stack, its resources, dependency edges and inferred relationships"""
        self.logger.info(f"📈 Publishing {len(result.resources)} resources of {result.stack_name} to Neo4j")

        with self.driver.session() as session:
            self._merge_stack_node(session, result)

            for resource in result.resources:
                self._merge_resource_node(session, result.stack_name, resource)

            for resource in result.resources:
                for dep_id in resource.depends_on:
                    if result.get_resource(dep_id) is not None:
                        self._merge_edge(session, result.stack_name, resource.logical_id, dep_id, 'DEPENDS_ON', {})
                        self.stats['dependency_edges'] += 1

            for relationship in relationships:
                if result.get_resource(relationship.target) is None:
                    self.logger.debug(f"Skipping relationship to unknown resource {relationship.target}")
                    continue

                self._merge_edge(
                    session,
                    result.stack_name,
                    relationship.source,
                    relationship.target,
                    RELATIONSHIP_TYPES[relationship.kind],
                    {'evidence': json.dumps(relationship.evidence, default=str, sort_keys=True)}
                )
                self.stats['inferred_edges'] += 1

        self.logger.info(f"✓ Added {self.stats['nodes_created']} nodes and {self.stats['relationships_created']} relationships")

    def _merge_stack_node(self, session, result: StackAnalysisResult):
        query = """
        MERGE (s:Stack {name: $name})
        SET s.template_path = $template_path,
            s.resource_count = $resource_count,
            s.cycle_count = $cycle_count,
            s.updated_at = datetime()
        RETURN s
        """
        session.run(
            query,
            name=result.stack_name,
            template_path=result.template_path or "",
            resource_count=len(result.resources),
            cycle_count=len(result.dependency_cycles)
        )
        self.stats['nodes_created'] += 1

    def _merge_resource_node(self, session, stack_name: str, resource: ResourceRecord):
        """Create a resource node labelled with the short resource type"""
        label = self._extract_node_label(resource.type)

        node_props = {
            'logical_id': resource.logical_id,
            'resource_type': resource.type,
            'service': resource.get_service_name(),
            'stack': stack_name
        }
        node_props.update(self._flatten_properties(resource.properties))

        query = f"""
        MERGE (r:Resource:{label} {{key: $key}})
        SET r += $props, r.updated_at = datetime()
        WITH r
        MATCH (s:Stack {{name: $stack}})
        MERGE (s)-[:CONTAINS]->(r)
        RETURN r
        """
        session.run(query, key=self._resource_key(stack_name, resource.logical_id), props=node_props, stack=stack_name)
        self.stats['nodes_created'] += 1
        self.stats['relationships_created'] += 1

    def _merge_edge(self, session, stack_name: str, source_id: str, target_id: str,
                    rel_type: str, props: Dict[str, Any]):
        query = f"""
        MATCH (source:Resource {{key: $source_key}})
        MATCH (target:Resource {{key: $target_key}})
        MERGE (source)-[r:{rel_type}]->(target)
        SET r += $props
        RETURN r
        """
        session.run(
            query,
            source_key=self._resource_key(stack_name, source_id),
            target_key=self._resource_key(stack_name, target_id),
            props=props
        )
        self.stats['relationships_created'] += 1

    def _resource_key(self, stack_name: str, logical_id: str) -> str:
        return f"{stack_name}/{logical_id}"

    def _extract_node_label(self, resource_type: str) -> str:
        """AWS::S3::Bucket -> Bucket; anything unusable becomes UnknownResource"""
        label = resource_type.split('::')[-1] if resource_type else ''
        if not label.isidentifier():
            return 'UnknownResource'
        return label

    def _flatten_properties(self, properties: Dict[str, Any]) -> Dict[str, Any]:
        """Flatten nested properties for Neo4j storage"""
        flattened = {}

        def flatten_dict(obj, prefix=""):
            for key, value in obj.items():
                new_key = f"prop_{prefix}_{key}" if prefix else f"prop_{key}"

                if isinstance(value, dict):
                    flatten_dict(value, f"{prefix}_{key}" if prefix else key)
                elif isinstance(value, list):
                    # Convert lists to JSON strings
                    flattened[new_key] = json.dumps(value, default=str) if value else "[]"
                elif isinstance(value, (str, int, float, bool)):
                    flattened[new_key] = value
                elif value is None:
                    flattened[new_key] = ""
                else:
                    flattened[new_key] = str(value)

        if isinstance(properties, dict):
            flatten_dict(properties)

        return flattened

    def get_statistics(self) -> Dict[str, Any]:
        """Get Neo4j operation statistics"""
        return self.stats.copy()

    def log_statistics(self):
        """Log Neo4j operation statistics"""
        self.logger.info("📊 Neo4j Operation Statistics:")
        self.logger.info(f"   Nodes Created: {self.stats['nodes_created']}")
        self.logger.info(f"   Relationships Created: {self.stats['relationships_created']}")
        self.logger.info(f"   Dependency Edges: {self.stats['dependency_edges']}")
        self.logger.info(f"   Inferred Edges: {self.stats['inferred_edges']}")
