"""
XSS sanitization helpers.

The general pass (sanitize_value) HTML-escapes every string in a payload,
keys included. Specialized sanitizers add field-specific rules on top of it
for names, addresses, URL slugs and lists. Escaping is idempotent so the
specialized rules can run after the general pass without double-encoding.
"""

import re
from collections.abc import Callable
from typing import Any

_ESCAPES = str.maketrans(
    {
        "<": "&lt;",
        ">": "&gt;",
        '"': "&quot;",
        "'": "&#x27;",
        "/": "&#x2F;",
    }
)

# "&" that does not already start one of the entities produced above
_BARE_AMPERSAND = re.compile(r"&(?!(?:amp|lt|gt|quot|#x27|#x2F);)")

_SCRIPT_BLOCK = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.I)
_JS_PROTOCOL = re.compile(r"javascript:", re.I)
_EVENT_HANDLER = re.compile(r"on\w+\s*=", re.I)
_ESCAPED_SCRIPT = re.compile(r"&lt;(?:/|&#x2F;)?script", re.I)
_NON_SLUG = re.compile(r"[^a-z0-9-]")
_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]")

ADDRESS_FIELDS = ("zip_code", "street", "street_number", "complement", "city", "state")
# camelCase keys sent by the registration wizard
CAMEL_ADDRESS_FIELDS = ("zipCode", "streetNumber")


def sanitize_text(value: Any) -> Any:
    """HTML-escape & < > " ' / and trim. Non-strings and empty strings pass through."""
    if not isinstance(value, str) or not value:
        return value
    escaped = _BARE_AMPERSAND.sub("&amp;", value).translate(_ESCAPES)
    return escaped.strip()


def sanitize_value(value: Any) -> Any:
    """Recursively sanitize strings, dict keys and values, and list elements."""
    if isinstance(value, str):
        return sanitize_text(value)
    if isinstance(value, list):
        return [sanitize_value(item) for item in value]
    if isinstance(value, dict):
        return {sanitize_text(k): sanitize_value(v) for k, v in value.items()}
    return value


def _strip_active_content(value: str) -> str:
    value = _SCRIPT_BLOCK.sub("", value)
    value = _JS_PROTOCOL.sub("", value)
    return _EVENT_HANDLER.sub("", value)


def sanitize_name(value: Any) -> Any:
    """Person, restaurant and location names."""
    if not isinstance(value, str) or not value:
        return value
    value = _ESCAPED_SCRIPT.sub("", _strip_active_content(value))
    return value.replace("<", "&lt;").replace(">", "&gt;").strip()


def sanitize_address(value: Any) -> Any:
    if not isinstance(value, str) or not value:
        return value
    value = _strip_active_content(value)
    return value.replace("<", "&lt;").replace(">", "&gt;").strip()


def sanitize_html(value: Any) -> Any:
    """Free text that may have been pasted from rich editors (bios, notes)."""
    if not isinstance(value, str) or not value:
        return value
    return sanitize_text(_strip_active_content(value))


def sanitize_url(value: Any) -> Any:
    """URL slugs: lowercase letters, digits and hyphens only."""
    if not isinstance(value, str) or not value:
        return value
    return _NON_SLUG.sub("", value.lower())


def sanitize_list(values: Any) -> Any:
    if not isinstance(values, list):
        return values
    return [sanitize_text(v) if isinstance(v, str) else v for v in values]


def _apply(data: dict[str, Any], rules: dict[str, Callable[[Any], Any]]) -> None:
    for field, rule in rules.items():
        if field in data:
            data[field] = rule(data[field])


def sanitize_restaurant_data(data: Any) -> Any:
    if not isinstance(data, dict):
        return data
    data = dict(data)
    _apply(
        data,
        {
            "owner_name": sanitize_name,
            "restaurant_name": sanitize_name,
            "restaurant_url_name": sanitize_url,
            "ownerName": sanitize_name,
            "restaurantName": sanitize_name,
            "restaurantUrlName": sanitize_url,
            "description": sanitize_text,
            "website": sanitize_text,
        },
    )
    return data


def sanitize_address_data(data: Any) -> Any:
    if not isinstance(data, dict):
        return data
    data = dict(data)
    _apply(data, dict.fromkeys(ADDRESS_FIELDS + CAMEL_ADDRESS_FIELDS, sanitize_address))
    return data


def sanitize_location_data(data: Any) -> Any:
    """Accepts flat address_* columns or a nested address object."""
    if not isinstance(data, dict):
        return data
    data = dict(data)
    _apply(
        data,
        {
            "name": sanitize_name,
            "url_name": sanitize_url,
            "urlName": sanitize_url,
            "selected_features": sanitize_list,
            "selectedFeatures": sanitize_list,
            **{f"address_{field}": sanitize_address for field in ADDRESS_FIELDS},
        },
    )
    if "address" in data:
        data["address"] = sanitize_address_data(data["address"])
    return data


def sanitize_user_data(data: Any) -> Any:
    if not isinstance(data, dict):
        return data
    data = dict(data)
    _apply(
        data,
        {
            "bio": sanitize_html,
            "full_name": sanitize_name,
            "email": sanitize_text,
            "phone": sanitize_text,
            "role": sanitize_text,
            "status": sanitize_text,
        },
    )
    if isinstance(data.get("username"), str):
        data["username"] = _NON_ALNUM.sub("", data["username"])
    return sanitize_value(data)


def sanitize_registration_data(data: Any) -> Any:
    """Multi-step restaurant registration: owner, restaurant, locations, billing."""
    if not isinstance(data, dict):
        return data
    data = dict(data)
    if isinstance(data.get("owner"), dict):
        owner = dict(data["owner"])
        _apply(owner, {"full_name": sanitize_name, "fullName": sanitize_name})
        data["owner"] = owner
    if "restaurant" in data:
        data["restaurant"] = sanitize_restaurant_data(data["restaurant"])
    if isinstance(data.get("locations"), list):
        data["locations"] = [sanitize_location_data(loc) for loc in data["locations"]]
    for key in ("billing_address", "billingAddress"):
        if key in data:
            data[key] = sanitize_address_data(data[key])
    return data
