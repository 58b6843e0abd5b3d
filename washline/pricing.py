"""
Order pricing.

Every selected service adds a flat fee to the per-item price; the order total
is that per-item price multiplied by the total number of pieces.

    Washing + Ironing, 3 shirts + 1 coat  ->  (50 + 30) * 4 = 320
"""

from washline.errors import ValidationError

SERVICE_FEES = {
    "Washing": 50,
    "Ironing": 30,
    "Dry Cleaning": 80,
    "Express Delivery": 100,
}

ITEM_TYPES = (
    "Shirt",
    "Pants",
    "Dress",
    "Suit",
    "Jacket",
    "Sweater",
    "T-Shirt",
    "Jeans",
    "Skirt",
    "Blouse",
    "Coat",
    "Towel",
    "Bed Sheet",
    "Curtain",
    "Table Cloth",
)


class PricingError(ValidationError):
    """Raised for any services/items input the calculator cannot price"""


def normalize_services(services):
    """Validate the service list and drop duplicates, keeping first-seen order"""
    if not services or not isinstance(services, list):
        raise PricingError("At least one service is required")

    invalid = [s for s in services if not isinstance(s, str) or s not in SERVICE_FEES]
    if invalid:
        raise PricingError(
            "Invalid services: {}".format(", ".join(str(s) for s in invalid)),
            valid_services=list(SERVICE_FEES),
        )

    seen = []
    for service in services:
        if service not in seen:
            seen.append(service)
    return seen


def _quantity(item):
    quantity = item.get("quantity")
    # bool is an int subclass; reject it along with floats and strings
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise PricingError("Invalid quantity for {}".format(item.get("type")))
    return quantity


def normalize_items(items):
    """Validate the item list and return [{type, quantity}] copies"""
    if not items or not isinstance(items, list):
        raise PricingError("At least one item is required")

    normalized = []
    for item in items:
        if not isinstance(item, dict):
            raise PricingError("Each item must be an object with type and quantity")
        if item.get("type") not in ITEM_TYPES:
            raise PricingError(
                "Invalid item type: {}".format(item.get("type")),
                valid_item_types=list(ITEM_TYPES),
            )
        normalized.append({"type": item["type"], "quantity": _quantity(item)})
    return normalized


def calculate_order_price(services, items):
    """Price an order.

    Parameters
    ----------
    services : list[str]
        Selected service labels.
    items : list[dict]
        Each dict: ``{ type, quantity }``.

    Returns
    -------
    dict with ``services``, ``unit_price``, ``items`` (each with ``price``),
    ``total_quantity`` and ``total_amount``.

    Raises
    ------
    PricingError
        Before anything is computed, if either list is empty or holds an
        unknown label or a bad quantity.
    """
    services = normalize_services(services)
    items = normalize_items(items)

    unit_price = sum(SERVICE_FEES[s] for s in services)
    total_quantity = sum(item["quantity"] for item in items)

    return {
        "services": services,
        "unit_price": unit_price,
        "items": [dict(item, price=unit_price) for item in items],
        "total_quantity": total_quantity,
        "total_amount": unit_price * total_quantity,
    }


def catalog():
    """Service fee table and item types, for clients building an order form"""
    return {
        "services": [{"name": name, "fee": fee} for name, fee in SERVICE_FEES.items()],
        "item_types": list(ITEM_TYPES),
    }
