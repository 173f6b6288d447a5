"""Tests for the YAML/JSON entity registry."""
import json

import pytest

from odataquery.config import GLOBAL_MAX_TAKE
from odataquery.registry import Registry, resolve_type

from tests.records import Person, Timesheet, sample_timesheets

ENTITIES_YAML = """
entities:
  timesheets:
    type: tests.records:Timesheet
    filter: "Deleted eq false"
    defaultOrderBy: "Hours desc"
    include:
      - Employee
    maxTake: 3
  people:
    type: tests.records:Person
    maxTake: 999999999
"""


@pytest.fixture
def entities_file(tmp_path):
    path = tmp_path / "entities.yaml"
    path.write_text(ENTITIES_YAML, encoding="utf-8")
    return path


class TestLoadEntities:
    def test_loads_base_queries(self, entities_file):
        registry = Registry(entities_file)
        registry.load_entities()

        base = registry.ensure_entity("timesheets")
        assert base.entity_type is Timesheet
        assert base.max_take == min(3, GLOBAL_MAX_TAKE)
        assert [str(i) for i in base.include] == ["Employee"]
        assert [t.Id for t in sample_timesheets() if base.filter(t)] == [1, 2, 4, 5]
        assert [t.Id for t in base.default_order(sample_timesheets())] == [1, 4, 2, 3, 5]

    def test_max_take_capped_globally(self, entities_file):
        registry = Registry(entities_file)
        registry.load_entities()
        assert registry.ensure_entity("people").max_take == GLOBAL_MAX_TAKE
        assert registry.entity_type("people") is Person

    def test_unknown_entity(self, entities_file):
        registry = Registry(entities_file)
        registry.load_entities()
        with pytest.raises(KeyError):
            registry.ensure_entity("nope")

    def test_json_file(self, tmp_path):
        path = tmp_path / "entities.json"
        path.write_text(json.dumps({"entities": {"people": {"type": "tests.records:Person"}}}), encoding="utf-8")
        registry = Registry(path)
        registry.load_entities()
        assert registry.names() == ["people"]

    def test_registered_type_without_type_key(self, tmp_path):
        path = tmp_path / "entities.yaml"
        path.write_text("entities:\n  sheets:\n    defaultOrderBy: Id\n", encoding="utf-8")
        registry = Registry(path)
        registry.register("sheets", Timesheet)
        registry.load_entities()
        assert registry.entity_type("sheets") is Timesheet
        assert registry.ensure_entity("sheets").default_order is not None

    def test_schema_violation(self, tmp_path):
        path = tmp_path / "entities.yaml"
        path.write_text("entities:\n  sheets:\n    view: SOME_VIEW\n", encoding="utf-8")
        with pytest.raises(RuntimeError, match="Bad entities file"):
            Registry(path).load_entities()

    def test_missing_file(self, tmp_path):
        with pytest.raises(RuntimeError, match="not found"):
            Registry(tmp_path / "missing.yaml").load_entities()


class TestRegistry:
    def test_register_in_code(self, tmp_path):
        registry = Registry(tmp_path / "missing.yaml")
        base = registry.register("timesheets", Timesheet)
        assert base.max_take == GLOBAL_MAX_TAKE
        assert registry.names() == ["timesheets"]

    def test_describe(self, entities_file):
        registry = Registry(entities_file)
        registry.load_entities()
        info = registry.describe("timesheets")
        assert info["type"] == "Timesheet"
        assert info["defaultOrderBy"] == "Hours desc"
        assert info["include"] == ["Employee"]

    def test_refresh_all_reports_errors(self, tmp_path):
        path = tmp_path / "entities.yaml"
        path.write_text(
            "entities:\n"
            "  good:\n    type: tests.records:Person\n"
            "  bad:\n    type: no_such_module.models:Thing\n"
            "  broken:\n    type: tests.records:Person\n    filter: \"Nope eq 1\"\n",
            encoding="utf-8",
        )
        registry = Registry(path)
        summary = registry.refresh_all()
        assert summary["good"] == "ok"
        assert summary["bad"].startswith("error:")
        assert summary["broken"].startswith("error:")
        assert registry.names() == ["good"]

    def test_resolve_type(self):
        assert resolve_type("tests.records:Person") is Person
