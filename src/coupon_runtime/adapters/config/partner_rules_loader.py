"""Loading and validation of partner rule tables stored as JSON."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

import jsonschema

from coupon_runtime.domain.combination.partners import (
    DEFAULT_PARTNER_TABLE,
    PartnerTable,
    partner_table_from_dict,
)

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).with_name("partner_rules.schema.json")


def load_schema(schema_path: Path = SCHEMA_PATH) -> dict[str, Any]:
    if not schema_path.exists():
        raise FileNotFoundError(f"Schema file not found: {schema_path}")
    with open(schema_path, "r", encoding="utf-8") as f:
        return json.load(f)


def validate_partner_rules(data: dict[str, Any], schema_path: Path = SCHEMA_PATH) -> None:
    """Validate partner rule data against the JSON schema."""
    schema = load_schema(schema_path)
    try:
        jsonschema.validate(instance=data, schema=schema)
    except jsonschema.ValidationError as e:
        raise ValueError(f"Partner rules validation failed: {e.message}") from e
    except jsonschema.SchemaError as e:
        raise ValueError(f"Schema error: {e.message}") from e


def load_partner_table(path: Optional[str | Path] = None) -> PartnerTable:
    """
    Load a partner table from a JSON file.

    Without a path the built-in table is returned. A file that is missing,
    malformed or fails schema validation raises, so a bad deployment is
    noticed at startup instead of silently dropping partner rules.
    """
    if path is None:
        return DEFAULT_PARTNER_TABLE

    rules_path = Path(path)
    if not rules_path.exists():
        raise FileNotFoundError(f"Partner rules not found: {rules_path}")

    try:
        with open(rules_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in partner rules file {rules_path}: {e}") from e

    validate_partner_rules(data)
    table = partner_table_from_dict(data)
    logger.info(f"Loaded {len(table)} partner rule(s) from {rules_path}")
    return table
