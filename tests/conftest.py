"""Shared fixtures for migration analysis tests."""

import copy
import json
import logging

import pytest


@pytest.fixture(autouse=True)
def reset_logging():
    """Engine runs reconfigure the package logger; restore propagation for caplog"""
    yield
    logger = logging.getLogger('migration_analysis')
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for name in ('LOG_LEVEL', 'NEO4J_URL', 'NEO4J_USER', 'NEO4J_PASSWORD',
                 'MIGRATION_SYNTH_COMMAND', 'MIGRATION_COMMAND_TIMEOUT'):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def bucket_template():
    """Single encrypted bucket"""
    return {
        'Resources': {
            'BucketA': {
                'Type': 'Storage::Bucket',
                'Properties': {'Encrypted': True}
            }
        }
    }


@pytest.fixture
def app_template():
    """Small application stack with IAM, networking and data references"""
    return {
        'Description': 'Sample application',
        'Parameters': {'Env': {'Type': 'String', 'Default': 'dev'}},
        'Resources': {
            'AppFunction': {
                'Type': 'AWS::Lambda::Function',
                'Properties': {
                    'Role': {'Fn::GetAtt': ['AppRole', 'Arn']},
                    'Environment': {'Variables': {'TABLE': {'Ref': 'TableA'}}}
                },
                'DependsOn': ['AppRole', 'TableA']
            },
            'AppRole': {
                'Type': 'AWS::IAM::Role',
                'Properties': {
                    'AssumeRolePolicyDocument': {
                        'Statement': [{
                            'Effect': 'Allow',
                            'Principal': {'Service': 'lambda.amazonaws.com'},
                            'Action': 'sts:AssumeRole'
                        }]
                    }
                }
            },
            'TableA': {
                'Type': 'AWS::DynamoDB::Table',
                'Properties': {'TableName': 'table-a'},
                'Metadata': {'Description': 'Primary table'}
            },
            'TablePolicy': {
                'Type': 'AWS::IAM::Policy',
                'Properties': {
                    'PolicyDocument': {
                        'Statement': [{
                            'Effect': 'Allow',
                            'Action': ['dynamodb:GetItem'],
                            'Resource': [{'Fn::GetAtt': ['TableA', 'Arn']}]
                        }]
                    },
                    'Roles': [{'Ref': 'AppRole'}]
                },
                'DependsOn': 'AppRole'
            }
        },
        'Outputs': {'TableName': {'Value': {'Ref': 'TableA'}}}
    }


@pytest.fixture
def write_template(tmp_path):
    """Write a template document to a file and return its path"""
    def _write(template, name='template.json'):
        path = tmp_path / name
        path.write_text(json.dumps(template, indent=2), encoding='utf-8')
        return path
    return _write


@pytest.fixture
def clone():
    return copy.deepcopy
