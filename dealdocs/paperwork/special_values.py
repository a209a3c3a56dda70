"""
Special Values

Computed values an administrator can map a template field to instead of
a stored profile path. Each is registered under a reserved key wrapped
in double underscores, which can never collide with a profile path
segment.

Usage in a field mapping:
    {"Date": "__CURRENT_DATE__", "Vehicle": "__INTEREST_VEHICLE_YMM__"}
"""

import logging
import re
from datetime import datetime, date
from typing import Any, Callable, Dict, List, Optional

import pytz

from config import Config

logger = logging.getLogger(__name__)

# Type alias for special value functions
SpecialValueFunc = Callable[[Dict[str, Any]], str]

# Reserved key format: __UPPER_SNAKE__
SPECIAL_KEY_PATTERN = re.compile(r'^__[A-Z][A-Z0-9_]*__$')


def dealership_today() -> date:
    """Today's date in the dealership's timezone."""
    tz = pytz.timezone(Config.DEALERSHIP_TIMEZONE)
    return datetime.now(tz).date()


def format_us_date(value: date) -> str:
    """
    Format a date the way en-US locales print it.

    Examples:
        date(2026, 1, 5) -> "1/5/2026"
    """
    return f"{value.month}/{value.day}/{value.year}"


def _vehicle_ymm(profile: Dict[str, Any], vehicle_key: str) -> str:
    vehicle = profile.get('vehicle_info', {}).get(vehicle_key, {}) or {}
    parts = [vehicle.get('year', ''), vehicle.get('make', ''), vehicle.get('model', '')]
    return ' '.join(str(p) for p in parts).strip()


def special_current_date(profile: Dict[str, Any]) -> str:
    return format_us_date(dealership_today())


def special_salesperson(profile: Dict[str, Any]) -> str:
    return Config.SALESPERSON_NAME


def special_interest_vehicle_ymm(profile: Dict[str, Any]) -> str:
    """Interest vehicle as "year make model"."""
    return _vehicle_ymm(profile, 'interest_vehicle')


def special_trade_vehicle_ymm(profile: Dict[str, Any]) -> str:
    """Trade-in vehicle as "year make model"."""
    return _vehicle_ymm(profile, 'trade_vehicle')


# Registry of available special values
SPECIAL_VALUES: Dict[str, SpecialValueFunc] = {
    '__CURRENT_DATE__': special_current_date,
    '__SALESPERSON__': special_salesperson,
    '__INTEREST_VEHICLE_YMM__': special_interest_vehicle_ymm,
    '__TRADE_VEHICLE_YMM__': special_trade_vehicle_ymm,
}


def is_special_key(key: Optional[str]) -> bool:
    """Check if a mapping target is a registered special value."""
    return bool(key) and key in SPECIAL_VALUES


def mappable_special_keys() -> List[str]:
    """All registered special keys, in registration order."""
    return list(SPECIAL_VALUES.keys())


def resolve_special_value(key: str, profile: Dict[str, Any]) -> Optional[str]:
    """
    Compute a special value for a profile.

    Returns None for keys that are not registered.
    """
    func = SPECIAL_VALUES.get(key)
    if not func:
        logger.warning(f"Unknown special value: {key}")
        return None
    return func(profile)


def register_special_value(key: str, func: SpecialValueFunc) -> None:
    """
    Register a computed value under a reserved key.

        from dealdocs.paperwork.special_values import register_special_value
        register_special_value('__STOCK_LABEL__', my_stock_label)
    """
    if not SPECIAL_KEY_PATTERN.match(key):
        raise ValueError(f"Special value keys must look like __NAME__, got: {key}")
    SPECIAL_VALUES[key] = func
    logger.debug(f"Registered special value: {key}")
