"""
bptf-prices - Request parameter normalization

Each endpoint declares its query fields in the order they are sent, with a
default and a domain check. A caller's parameter bag is reduced to that
ordered list: missing or falsy values take the default, present values are
checked, anything else in the bag is ignored.
"""

import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from bptf_prices.config import (
    CURRENCIES_PATH,
    PRICE_HISTORY_PATH,
    PRICES_PATH,
    SPECIAL_ITEMS_PATH,
    TF2_APPID,
    DEFAULT_RAW,
    DEFAULT_ITEM,
    DEFAULT_QUALITY,
    DEFAULT_TRADABLE,
    DEFAULT_CRAFTABLE,
    DEFAULT_PRICEINDEX,
    DEFAULT_PRICES_SINCE,
    RAW_VALUES,
    ITEM_QUALITIES,
    TRADABLE_VALUES,
    CRAFTABLE_VALUES,
)
from bptf_prices.errors import InvalidParameter

Callback = Callable[[Optional[Exception], Any], None]


def _is_number(value) -> bool:
    # bool is an int subclass; raw=True must not pass as raw=1
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        return False
    return math.isfinite(value)


def _one_of(choices) -> Callable[[Any], bool]:
    def check(value) -> bool:
        if isinstance(value, bool):
            return False
        return value in choices
    return check


def _non_empty_str(value) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _positive_number(value) -> bool:
    return _is_number(value) and value > 0


@dataclass(frozen=True)
class ParamField:
    name: str
    default: Any
    check: Callable[[Any], bool]
    expected: str           # human-readable domain for error messages


@dataclass(frozen=True)
class Endpoint:
    name: str
    path: str
    fields: Tuple[ParamField, ...]


def _choices(values) -> str:
    return "{" + ", ".join(str(v) for v in values) + "}"


RAW = ParamField("raw", DEFAULT_RAW, _one_of(RAW_VALUES), _choices(RAW_VALUES))
APPID = ParamField("appid", TF2_APPID, _one_of((TF2_APPID,)), str(TF2_APPID))

CURRENCIES = Endpoint("get_currencies", CURRENCIES_PATH, (RAW,))

PRICE_HISTORY = Endpoint("get_price_history", PRICE_HISTORY_PATH, (
    APPID,
    ParamField("item", DEFAULT_ITEM, _non_empty_str, "a non-empty item name"),
    ParamField("quality", DEFAULT_QUALITY, _one_of(ITEM_QUALITIES),
               _choices(ITEM_QUALITIES)),
    ParamField("tradable", DEFAULT_TRADABLE, _one_of(TRADABLE_VALUES),
               _choices(TRADABLE_VALUES)),
    ParamField("craftable", DEFAULT_CRAFTABLE, _one_of(CRAFTABLE_VALUES),
               _choices(CRAFTABLE_VALUES)),
    ParamField("priceindex", DEFAULT_PRICEINDEX, _is_number, "a number"),
))

PRICES = Endpoint("get_prices", PRICES_PATH, (
    RAW,
    ParamField("since", DEFAULT_PRICES_SINCE, _positive_number,
               "a positive UNIX timestamp"),
))

SPECIAL_ITEMS = Endpoint("get_special_items", SPECIAL_ITEMS_PATH, (APPID,))

ENDPOINTS: Dict[str, Endpoint] = {
    ep.name: ep for ep in (CURRENCIES, PRICE_HISTORY, PRICES, SPECIAL_ITEMS)
}


def split_callback(params: Optional[Mapping[str, Any]]
                   ) -> Tuple[Dict[str, Any], Optional[Callback]]:
    """Pull the first callable value out of the bag, whatever its key.

    Returns a copy of the bag without that entry, plus the callable (or
    None when the caller wants a Future back).
    """
    bag = dict(params or {})
    for key, value in bag.items():
        if callable(value):
            del bag[key]
            return bag, value
    return bag, None


def normalize(endpoint: Endpoint, params: Mapping[str, Any]) -> List[Tuple[str, Any]]:
    """Apply defaults and domain checks; return fields in query order.

    Raises:
        InvalidParameter: a supplied (truthy) value fails its field's check.
    """
    pairs = []
    for f in endpoint.fields:
        value = params.get(f.name)
        if not value:
            value = f.default
        elif not f.check(value):
            raise InvalidParameter(f.name, value, f.expected)
        pairs.append((f.name, value))
    return pairs


def build_query(endpoint: Endpoint, params: Mapping[str, Any],
                api_key: Optional[str]) -> List[Tuple[str, Any]]:
    """Normalized fields followed by the `key` parameter.

    A missing key is sent as an empty value; the service answers that
    with its own authentication error.
    """
    query = normalize(endpoint, params)
    query.append(("key", api_key if api_key is not None else ""))
    return query
