"""The fixed clients/orders scenario and entity id resolution."""

from __future__ import annotations

import json
import re
from typing import Any, Mapping
from urllib.parse import quote

from .models import EntityRef, ScenarioStep

_PLACEHOLDER_PATTERN = re.compile(r"\{([^}]+)\}")

# Used whenever the creating step failed or returned no usable id.
DEFAULT_ENTITY_IDS = {
    "supplier": 1,
    "consumer": 2,
}

SUPPLIER = EntityRef(entity="supplier", default=DEFAULT_ENTITY_IDS["supplier"])
CONSUMER = EntityRef(entity="consumer", default=DEFAULT_ENTITY_IDS["consumer"])


def _order(title: str, price: int) -> dict[str, Any]:
    return {
        "title": title,
        "supplierId": SUPPLIER,
        "consumerId": CONSUMER,
        "price": price,
    }


def build_scenario() -> tuple[ScenarioStep, ...]:
    """Return the nine steps in execution order."""

    return (
        ScenarioStep(
            title="Create Supplier",
            method="POST",
            path="/clients",
            body={"name": "Supplier A", "email": "suppA@test.io", "address": "Kyiv"},
            capture_as="supplier",
        ),
        ScenarioStep(
            title="Create Consumer",
            method="POST",
            path="/clients",
            body={"name": "Consumer B", "email": "consB@test.io", "address": "Lviv"},
            capture_as="consumer",
        ),
        ScenarioStep(title="Create Order", method="POST", path="/orders", body=_order("order-1", 100)),
        ScenarioStep(title="Duplicate Order", method="POST", path="/orders", body=_order("order-1", 100)),
        ScenarioStep(title="Profit Supplier", method="GET", path="/clients/{supplier}/profit"),
        ScenarioStep(title="Profit Consumer", method="GET", path="/clients/{consumer}/profit"),
        ScenarioStep(title="Order with bad price", method="POST", path="/orders", body=_order("bad-price", 0)),
        ScenarioStep(
            title="Deactivate Consumer",
            method="PATCH",
            path="/clients/{consumer}/status",
            body={"active": False},
        ),
        ScenarioStep(
            title="Order after deactivation",
            method="POST",
            path="/orders",
            body=_order("after-deactivate", 50),
        ),
    )


def parse_entity(body: str | None) -> dict[str, Any] | None:
    """Decode a response body into a captured entity, or None if it is not a JSON object."""

    if not body:
        return None
    try:
        payload = json.loads(body)
    except ValueError:
        return None
    return payload if isinstance(payload, dict) else None


def resolve_id(captured: Mapping[str, Mapping[str, Any]], ref: EntityRef) -> Any:
    entity = captured.get(ref.entity)
    if entity is None:
        return ref.default
    value = entity.get("id")
    return ref.default if value is None else value


def resolve_path(template: str, captured: Mapping[str, Mapping[str, Any]]) -> str:
    def _substitute(match: re.Match[str]) -> str:
        name = match.group(1)
        ref = EntityRef(entity=name, default=DEFAULT_ENTITY_IDS.get(name, 0))
        return quote(str(resolve_id(captured, ref)), safe="")

    resolved = _PLACEHOLDER_PATTERN.sub(_substitute, template)
    if not resolved.startswith("/"):
        resolved = f"/{resolved}"
    return resolved


def resolve_body(body: Any, captured: Mapping[str, Mapping[str, Any]]) -> Any:
    """Replace every EntityRef inside ``body`` with the resolved id."""

    if isinstance(body, EntityRef):
        return resolve_id(captured, body)
    if isinstance(body, dict):
        return {key: resolve_body(value, captured) for key, value in body.items()}
    if isinstance(body, list):
        return [resolve_body(item, captured) for item in body]
    return body
