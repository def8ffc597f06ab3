from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from jsonschema import RefResolver
from jsonschema.validators import Draft202012Validator as Validator


def load_schema(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        schema = yaml.safe_load(f)
    Validator.check_schema(schema)
    return schema


def _ref_store(root: Path) -> dict[str, Any]:
    # every sibling schema, keyed by $id (when present) and file uri
    store: dict[str, Any] = {}
    for path in sorted(root.glob("*.schema.yaml")):
        with path.open("r", encoding="utf-8") as f:
            s = yaml.safe_load(f) or {}
        if s.get("$id"):
            store[str(s["$id"])] = s
        store[path.resolve().as_uri()] = s
    return store


def validate_obj(schema: dict[str, Any], obj: dict[str, Any], *, schemas_root: Path | None = None, schema_path: Path | None = None) -> None:
    """Validate ``obj`` against ``schema``.

    Raises:
        jsonschema.ValidationError: on the first failing constraint
    """
    store: dict[str, Any] = {}
    base_uri = ""
    if schemas_root is not None:
        root = schemas_root.resolve()
        base_uri = root.as_uri() + "/"
        store = _ref_store(root)
    elif schema_path is not None:
        base_uri = schema_path.resolve().parent.as_uri() + "/"
    resolver = RefResolver(base_uri=base_uri, referrer=schema, store=store)
    Validator(schema, resolver=resolver).validate(obj)


def validate_artifact(kind: str, obj: dict[str, Any], schemas_root: Path) -> str:
    """Validate ``obj`` against ``<schemas_root>/<kind>.schema.yaml``.

    Returns the schema's ``version`` so callers can stamp their outputs.
    """
    schema = load_schema(schemas_root / f"{kind}.schema.yaml")
    validate_obj(schema, obj, schemas_root=schemas_root)
    return str(schema.get("version", "0.0.0"))
