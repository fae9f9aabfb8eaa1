"""
Role projections of items.

Each role grants a set of capabilities and each field names the capability
needed to see it. A caller gets exactly the fields its role unlocks, both
in JSON responses and in the CSV export.
"""

import csv
import io
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Optional

from pos_api.modules.users.models import Role
from .models import Item
from .schemas import ItemResponse


class Capability(str, Enum):
    VIEW_COST = "view_cost"


ROLE_CAPABILITIES: Dict[str, FrozenSet[Capability]] = {
    Role.ADMIN.value: frozenset({Capability.VIEW_COST}),
    Role.CASHIER.value: frozenset(),
}

# (field, required capability, CSV header)
ITEM_FIELDS = [
    ("id", None, "ID"),
    ("name", None, "Name"),
    ("description", None, "Description"),
    ("stock", None, "Stock"),
    ("buy_price", Capability.VIEW_COST, "Buy Price"),
    ("price", None, "Price"),
    ("image_url", None, "Image URL"),
    ("created_at", None, "Created At"),
    ("updated_at", None, "Updated At"),
]


def capabilities_for(role: Optional[str]) -> FrozenSet[Capability]:
    """Anonymous callers and unknown roles get no capabilities."""
    if role is None:
        return frozenset()
    return ROLE_CAPABILITIES.get(role, frozenset())


def visible_fields(role: Optional[str]) -> List[str]:
    granted = capabilities_for(role)
    return [name for name, needed, _ in ITEM_FIELDS if needed is None or needed in granted]


def project_item(item: Item, role: Optional[str]) -> Dict[str, Any]:
    """JSON-ready dict of the fields the role may see."""
    return ItemResponse.model_validate(item).model_dump(
        mode="json", include=set(visible_fields(role))
    )


def project_items(items: Iterable[Item], role: Optional[str]) -> List[Dict[str, Any]]:
    return [project_item(item, role) for item in items]


def csv_headers(role: Optional[str]) -> List[str]:
    granted = capabilities_for(role)
    return [header for _, needed, header in ITEM_FIELDS if needed is None or needed in granted]


def render_items_csv(items: Iterable[Item], role: Optional[str]) -> str:
    """CSV text of the items, one row each, projected for the role."""
    fields = visible_fields(role)
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(csv_headers(role))
    for item in items:
        row = project_item(item, role)
        writer.writerow(["" if row[field] is None else row[field] for field in fields])
    return buffer.getvalue()
