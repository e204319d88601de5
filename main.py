#!/usr/bin/env python3
"""
Migration Analysis & Validation Tool

Analyzes existing infrastructure templates (dependency order, implicit
relationships) and validates that a migrated definition synthesizes to a
state-equivalent template.
"""

import argparse
import sys
from pathlib import Path

# Add the current directory to Python path to allow imports
sys.path.insert(0, str(Path(__file__).parent))

from core.config import DEFAULT_PLAN_COMMAND, MigrationConfig
from core.errors import MigrationAnalysisError
from core.migration_engine import MigrationEngine

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CHANGES = 2


def create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure argument parser"""
    parser = argparse.ArgumentParser(
        description='Migration Analysis & Validation Tool',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Analyze a template file
  python main.py analyze --template cdk.out/MyStack.template.json

  # Synthesize a CDK project and analyze one of its stacks
  python main.py analyze --project ./legacy-app --stack MyStack

  # Analyze the template of a deployed stack and publish it to Neo4j
  python main.py analyze --deployed-stack MyStack --region us-east-1 --update-graph

  # Compare two template files
  python main.py compare original.template.json migrated.template.json

  # Re-synthesize a migrated service and validate it, failing on any change
  python main.py validate --migrated-project ./service --original-template original.json --stack MyStack --fail-on-changes

Environment Variables:
  AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY, AWS_SESSION_TOKEN - AWS credentials
  NEO4J_URL, NEO4J_USER, NEO4J_PASSWORD - Neo4j connection details
  MIGRATION_SYNTH_COMMAND - Command used to synthesize original stacks
  MIGRATION_COMMAND_TIMEOUT - Timeout in seconds for external commands
  LOG_LEVEL - Logging level (DEBUG, INFO, WARNING, ERROR)
        """
    )

    # Options shared by every command
    common = argparse.ArgumentParser(add_help=False)

    output_group = common.add_argument_group('Output Settings')
    output_group.add_argument(
        '--output-dir',
        help='Directory for exported results and logs (default: timestamped directory)'
    )
    output_group.add_argument(
        '--patterns-file',
        help='JSON file with non-functional change patterns (default: config/non_functional_patterns.json)'
    )
    output_group.add_argument(
        '--command-timeout',
        type=float,
        default=300.0,
        help='Timeout in seconds for synthesis and diff commands (default: 300)'
    )

    logging_group = common.add_argument_group('Logging')
    logging_group.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        default='INFO',
        help='Overall logging level (default: INFO)'
    )
    logging_group.add_argument(
        '--console-log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        default='INFO',
        help='Console logging level (default: INFO)'
    )

    subparsers = parser.add_subparsers(dest='command')

    # analyze
    analyze_parser = subparsers.add_parser('analyze', parents=[common], help='Analyze a stack template')
    source_group = analyze_parser.add_mutually_exclusive_group(required=True)
    source_group.add_argument('--template', help='Path to a template JSON file')
    source_group.add_argument('--project', help='Path to a CDK project to synthesize (requires --stack)')
    source_group.add_argument('--deployed-stack', help='Name of a deployed CloudFormation stack')
    analyze_parser.add_argument('--stack', help='Stack name')
    analyze_parser.add_argument('--region', help='AWS region for --deployed-stack')
    analyze_parser.add_argument('--profile', help='AWS profile for --deployed-stack')

    neo4j_group = analyze_parser.add_argument_group('Neo4j Graph Database')
    neo4j_group.add_argument('--update-graph', action='store_true', help='Publish the analysis to Neo4j')
    neo4j_group.add_argument('--reset-graph', action='store_true', help='Reset the graph before publishing')
    neo4j_group.add_argument('--graph-db-url', default='localhost:7687', help='Neo4j database URL (default: localhost:7687)')
    neo4j_group.add_argument('--graph-db-user', default='neo4j', help='Neo4j username (default: neo4j)')
    neo4j_group.add_argument('--graph-db-password', default='neo4j', help='Neo4j password')

    # compare
    compare_parser = subparsers.add_parser('compare', parents=[common], help='Compare two template files')
    compare_parser.add_argument('original', help='Original template JSON file')
    compare_parser.add_argument('migrated', help='Migrated template JSON file')
    compare_parser.add_argument('--diff-tool', action='store_true', help='Use the external diff tool for the textual diff')
    compare_parser.add_argument('--fail-on-changes', action='store_true', help='Exit with status 2 when templates differ')

    # validate
    validate_parser = subparsers.add_parser('validate', parents=[common], help='Validate a migrated service')
    validate_parser.add_argument('--migrated-project', required=True, help='Path to the migrated service project')
    validate_parser.add_argument('--original-template', required=True, help='Original template JSON file')
    validate_parser.add_argument('--stack', required=True, help='Stack name')
    validate_parser.add_argument('--plan', action='store_true', help='Run the platform plan check first')
    validate_parser.add_argument('--diff-tool', action='store_true', help='Use the external diff tool for the textual diff')
    validate_parser.add_argument('--fail-on-changes', action='store_true', help='Exit with status 2 when templates differ')

    parser.add_argument(
        '--version',
        action='version',
        version='Migration Analysis Tool v1.0'
    )

    return parser


def validate_arguments(args) -> bool:
    """Validate command line arguments"""
    errors = []

    if args.command is None:
        errors.append("a command is required: analyze, compare or validate")

    if args.command == 'analyze':
        if args.project and not args.stack:
            errors.append("--project requires --stack")
        if args.reset_graph and not args.update_graph:
            errors.append("--reset-graph requires --update-graph")

    if args.command and args.command_timeout <= 0:
        errors.append("--command-timeout must be positive")

    if errors:
        print("❌ Argument validation errors:")
        for error in errors:
            print(f"   • {error}")
        return False

    return True


def build_config(args) -> MigrationConfig:
    """Create configuration from parsed arguments"""
    options = dict(
        output_dir=args.output_dir,
        patterns_file=args.patterns_file,
        command_timeout=args.command_timeout,
        log_level=args.log_level,
        console_log_level=args.console_log_level
    )

    if args.command == 'analyze':
        options.update(
            region=args.region,
            profile=args.profile,
            update_graph=args.update_graph,
            reset_graph=args.reset_graph,
            graph_db_url=args.graph_db_url,
            graph_db_user=args.graph_db_user,
            graph_db_password=args.graph_db_password
        )
    else:
        options['diff_mode'] = 'command' if args.diff_tool else 'builtin'

    if args.command == 'validate' and args.plan:
        options['plan_command'] = list(DEFAULT_PLAN_COMMAND)

    return MigrationConfig(**options)


def run_command(engine: MigrationEngine, args) -> int:
    """Dispatch to the engine and map the outcome to an exit status"""
    if args.command == 'analyze':
        if args.deployed_stack:
            result, relationships = engine.run_analysis(stack_name=args.deployed_stack, deployed=True)
        else:
            result, relationships = engine.run_analysis(
                template_path=args.template,
                project_path=args.project,
                stack_name=args.stack
            )

        print(f"\n✅ Analysis completed: {result.stack_name}")
        print(f"   Resources: {len(result.resources)}")
        print(f"   Relationships: {len(relationships)}")
        if result.has_cycles():
            print(f"   ⚠️  Dependency cycle edges: {len(result.dependency_cycles)}")
        return EXIT_OK

    if args.command == 'compare':
        validation = engine.run_comparison(args.original, args.migrated)
    else:
        validation = engine.run_validation(args.migrated_project, args.original_template, args.stack)

    print(f"\n{'✅' if validation.success else '❌'} Validation {'completed' if validation.success else 'failed'}")
    print(f"   Diff Result: {validation.diff_status.value}")
    for error in validation.validation_errors:
        print(f"   ❌ {error}")
    for warning in validation.warnings:
        print(f"   ⚠️  {warning}")

    if not validation.success:
        return EXIT_FAILURE
    if args.fail_on_changes and validation.has_changes():
        return EXIT_CHANGES
    return EXIT_OK


def main(argv=None):
    """Main entry point"""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not validate_arguments(args):
        return EXIT_FAILURE

    try:
        config = build_config(args)
    except ValueError as e:
        print(f"❌ Configuration error: {e}")
        return EXIT_FAILURE

    engine = None

    try:
        engine = MigrationEngine(config)
        status = run_command(engine, args)
        print(f"   Output Directory: {engine.output_dir}")
        return status

    except KeyboardInterrupt:
        print("\n⚠️  Interrupted by user")
        return EXIT_FAILURE

    except MigrationAnalysisError as e:
        print(f"\n❌ {args.command.capitalize()} failed: {e}")
        return EXIT_FAILURE

    except Exception as e:
        print(f"\n❌ Unexpected error during {args.command}: {e}")
        return EXIT_FAILURE

    finally:
        if engine:
            engine.cleanup()


if __name__ == "__main__":
    sys.exit(main())
