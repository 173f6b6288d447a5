import importlib
import json
import logging
import typing as t
from pathlib import Path

import yaml
from jsonschema import Draft7Validator

from .config import ENTITIES_PATH
from .errors import ODataError
from .fields import type_name
from .query import BaseQuery, BaseQueryBuilder
from .validation import _cap_max_take

log = logging.getLogger("odataquery.registry")


class EntityConfig(t.TypedDict, total=False):
    type: str
    filter: str
    defaultOrderBy: str
    include: list[str]
    maxTake: int


ENTITIES_SCHEMA: dict[str, t.Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "OData entity registry",
    "type": "object",
    "required": ["entities"],
    "properties": {
        "entities": {
            "type": "object",
            "additionalProperties": {
                "type": "object",
                "additionalProperties": False,
                "properties": {
                    "type": {"type": "string", "pattern": r"^[A-Za-z_][\w.]*:[A-Za-z_]\w*$"},
                    "filter": {"type": "string"},
                    "defaultOrderBy": {"type": "string", "minLength": 1},
                    "include": {"type": "array", "items": {"type": "string", "minLength": 1}},
                    "maxTake": {"type": "integer", "minimum": 1},
                },
            },
        }
    },
}

_ENTITIES_VALIDATOR = Draft7Validator(ENTITIES_SCHEMA)


def resolve_type(spec: str) -> type:
    """Import ``package.module:ClassName``."""
    module_name, _, attr = spec.partition(":")
    module = importlib.import_module(module_name)
    return getattr(module, attr)


class Registry:
    """
    Entity name -> record type and BaseQuery. Types are registered in code or
    named in the entities file; the file adds base filters, default ordering,
    includes and page caps.
    """

    def __init__(self, path: t.Optional[Path] = None):
        self.path = Path(path) if path is not None else ENTITIES_PATH
        self.types: dict[str, type] = {}
        self.entities_cfg: dict[str, EntityConfig] = {}
        self.base_queries: dict[str, BaseQuery] = {}

    def register(self, name: str, entity_type: type, base: t.Optional[BaseQuery] = None) -> BaseQuery:
        if base is None:
            base = BaseQueryBuilder(entity_type).with_max_take(_cap_max_take(None)).build()
        self.types[name] = entity_type
        self.base_queries[name] = base
        return base

    def read_config(self) -> dict[str, EntityConfig]:
        if not self.path.exists():
            raise RuntimeError(f"Entities file not found: {self.path}")
        with self.path.open("r", encoding="utf-8") as f:
            if self.path.suffix.lower() in (".yaml", ".yml"):
                cfg = yaml.safe_load(f) or {}
            else:
                cfg = json.load(f)
        errors = sorted(_ENTITIES_VALIDATOR.iter_errors(cfg), key=lambda e: list(e.path))
        if errors:
            where = "/".join(str(p) for p in errors[0].path) or "<root>"
            raise RuntimeError(f"Bad entities file {self.path} at {where}: {errors[0].message}")
        return cfg["entities"]

    def build_base_query(self, name: str, cfg: EntityConfig) -> BaseQuery:
        if "type" in cfg:
            entity_type = resolve_type(cfg["type"])
        elif name in self.types:
            entity_type = self.types[name]
        else:
            raise RuntimeError(f"No type configured or registered for entity {name}")
        builder = BaseQueryBuilder(entity_type)
        if cfg.get("filter"):
            builder = builder.where(cfg["filter"])
        if cfg.get("defaultOrderBy"):
            builder = builder.default_order_by(cfg["defaultOrderBy"])
        if cfg.get("include"):
            builder = builder.include(*cfg["include"])
        builder = builder.with_max_take(_cap_max_take(cfg.get("maxTake")))
        return builder.build()

    def load_entities(self) -> None:
        self.entities_cfg = self.read_config()
        for name, cfg in self.entities_cfg.items():
            base = self.build_base_query(name, cfg)
            self.register(name, base.entity_type, base)
        log.info("Loaded %d entities from %s", len(self.entities_cfg), self.path)

    def ensure_entity(self, name: str) -> BaseQuery:
        if name not in self.base_queries:
            raise KeyError(f"Unknown entity: {name}")
        return self.base_queries[name]

    def entity_type(self, name: str) -> type:
        return self.ensure_entity(name).entity_type

    def names(self) -> list[str]:
        return sorted(self.base_queries)

    def describe(self, name: str) -> dict[str, t.Any]:
        base = self.ensure_entity(name)
        return {
            "entity": name,
            "type": type_name(base.entity_type),
            "filter": str(base.filter) if base.filter is not None else None,
            "defaultOrderBy": str(base.default_order) if base.default_order is not None else None,
            "include": [str(i) for i in base.include],
            "maxTake": base.max_take,
        }

    def refresh_all(self) -> dict[str, str]:
        """Re-read the entities file and rebuild every configured entity."""
        self.entities_cfg = self.read_config()
        summaries: dict[str, str] = {}
        for name, cfg in self.entities_cfg.items():
            try:
                base = self.build_base_query(name, cfg)
            except (ODataError, ImportError, AttributeError, RuntimeError) as e:
                log.warning("Could not load entity %s: %s", name, e)
                summaries[name] = f"error: {e}"
                continue
            self.register(name, base.entity_type, base)
            summaries[name] = "ok"
        return summaries
