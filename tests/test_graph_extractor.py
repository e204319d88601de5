"""Tests for resource graph extraction and dependency ordering."""

import logging

import pytest

from analysis.graph_extractor import ResourceGraphExtractor, normalize_depends_on
from core.errors import TemplateLoadError
from core.models import DependencyCycle


def _resource(resource_type='Test::Thing', depends_on=None, **extra):
    definition = {'Type': resource_type, 'Properties': {}}
    if depends_on is not None:
        definition['DependsOn'] = depends_on
    definition.update(extra)
    return definition


class TestNormalizeDependsOn:
    """Tests for DependsOn normalization"""

    def test_missing_is_empty(self):
        assert normalize_depends_on(None) == []

    def test_single_string(self):
        assert normalize_depends_on('Vpc') == ['Vpc']

    def test_list_keeps_order(self):
        assert normalize_depends_on(['B', 'A']) == ['B', 'A']

    def test_invalid_type_raises(self):
        with pytest.raises(TemplateLoadError):
            normalize_depends_on({'Ref': 'A'})


class TestBuildRecords:
    """Tests for record construction"""

    def test_records_keep_template_fields(self):
        extractor = ResourceGraphExtractor()
        records = extractor.build_records({
            'Table': {
                'Type': 'AWS::DynamoDB::Table',
                'Properties': {'TableName': 't'},
                'Metadata': {'Owner': 'team'},
                'DependsOn': 'Key'
            }
        })

        assert len(records) == 1
        record = records[0]
        assert record.logical_id == 'Table'
        assert record.type == 'AWS::DynamoDB::Table'
        assert record.properties == {'TableName': 't'}
        assert record.metadata == {'Owner': 'team'}
        assert record.depends_on == ['Key']

    def test_missing_properties_become_empty_map(self):
        records = ResourceGraphExtractor().build_records({'A': {'Type': 'Test::Thing'}})
        assert records[0].properties == {}
        assert records[0].metadata is None

    def test_missing_type_raises(self):
        with pytest.raises(TemplateLoadError, match='has no Type'):
            ResourceGraphExtractor().build_records({'A': {'Properties': {}}})

    def test_non_object_resource_raises(self):
        with pytest.raises(TemplateLoadError, match='must be an object'):
            ResourceGraphExtractor().build_records({'A': 'not-a-resource'})


class TestDependencyOrdering:
    """Tests for the depth-first topological sort"""

    def test_dependencies_come_first(self):
        result = ResourceGraphExtractor().extract({
            'Function': _resource(depends_on=['Role', 'Table']),
            'Role': _resource(),
            'Table': _resource(depends_on='Key'),
            'Key': _resource()
        })

        order = [r.logical_id for r in result.resources]
        assert order == ['Role', 'Key', 'Table', 'Function']
        assert result.cycles == []

    def test_every_dependency_precedes_its_dependent(self):
        resources = {
            'D': _resource(depends_on=['B', 'C']),
            'C': _resource(depends_on='A'),
            'B': _resource(depends_on='A'),
            'A': _resource(),
            'E': _resource()
        }
        result = ResourceGraphExtractor().extract(resources)
        position = {r.logical_id: i for i, r in enumerate(result.resources)}

        for record in result.resources:
            for dep in record.depends_on:
                assert position[dep] < position[record.logical_id]

    def test_independent_resources_keep_declaration_order(self):
        result = ResourceGraphExtractor().extract({
            'Zeta': _resource(),
            'Alpha': _resource(),
            'Mid': _resource()
        })
        assert [r.logical_id for r in result.resources] == ['Zeta', 'Alpha', 'Mid']

    def test_external_dependencies_are_ignored(self):
        result = ResourceGraphExtractor().extract({
            'A': _resource(depends_on=['OutsideStack']),
            'B': _resource(depends_on='A')
        })
        assert [r.logical_id for r in result.resources] == ['A', 'B']
        assert result.cycles == []

    def test_each_resource_appears_once(self):
        result = ResourceGraphExtractor().extract({
            'A': _resource(depends_on=['C']),
            'B': _resource(depends_on=['C']),
            'C': _resource()
        })
        ids = [r.logical_id for r in result.resources]
        assert sorted(ids) == ['A', 'B', 'C']
        assert len(ids) == len(set(ids))

    def test_empty_resources(self):
        result = ResourceGraphExtractor().extract({})
        assert result.resources == []
        assert result.cycles == []


class TestDependencyCycles:
    """Tests for warn-and-continue cycle handling"""

    def test_two_node_cycle_is_reported_once(self, caplog):
        extractor = ResourceGraphExtractor()

        with caplog.at_level(logging.WARNING, logger='migration_analysis.extractor'):
            result = extractor.extract({
                'A': _resource(depends_on='B'),
                'B': _resource(depends_on='A')
            })

        warnings = [r for r in caplog.records if 'Circular dependency' in r.getMessage()]
        assert len(warnings) == 1
        assert 'A' in warnings[0].getMessage()

        assert [r.logical_id for r in result.resources] == ['B', 'A']
        assert result.cycles == [DependencyCycle(source='B', target='A')]

    def test_cycle_does_not_stop_remaining_resources(self):
        result = ResourceGraphExtractor().extract({
            'A': _resource(depends_on='B'),
            'B': _resource(depends_on='A'),
            'C': _resource(depends_on='A'),
            'D': _resource()
        })

        ids = [r.logical_id for r in result.resources]
        assert sorted(ids) == ['A', 'B', 'C', 'D']
        assert ids.index('A') < ids.index('C')
        assert len(result.cycles) == 1

    def test_self_dependency_is_a_cycle(self):
        result = ResourceGraphExtractor().extract({'A': _resource(depends_on='A')})
        assert [r.logical_id for r in result.resources] == ['A']
        assert result.cycles == [DependencyCycle(source='A', target='A')]
