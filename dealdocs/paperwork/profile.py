"""
Customer Profile

The canonical shape of a customer record and the merge used to apply
incremental updates to it.

A profile is a plain nested dict (it round-trips through Supabase JSON
columns unchanged). Every leaf defaults to an "empty" value: '', 0,
False or []. Empty means "unknown", which is different from an explicit
value, so merges never let an empty value replace a known one.
"""

import copy
from typing import Any, Dict

from config import Config

CustomerProfile = Dict[str, Any]

# Sections owned by the record itself rather than the profile schema
READ_ONLY_KEYS = ('id', 'created_at')

INITIAL_CUSTOMER_PROFILE: CustomerProfile = {
    'personal_info': {
        'full_name': '',
        'first_name': '',
        'last_name': '',
        'phone': '',
        'email': '',
        'address': {
            'full_address': '',
            'street': '',
            'city': '',
            'state': '',
            'zip': '',
        },
        'drivers_license': {
            'number': '',
            'expiration': '',
            'state': Config.LICENSE_STATE,
            'is_expired': False,
        },
    },
    'vehicle_info': {
        'interest_vehicle': {
            'year': '',
            'make': '',
            'model': '',
            'stock_number': '',
            'vin': '',
        },
        'trade_vehicle': {
            'year': '',
            'make': '',
            'model': '',
            'vin': '',
            'lien_holder': '',
            'payoff_amount': 0,
        },
        'trade_in': False,
        'purchase_type': '',
    },
    'financial_info': {
        'employment': {
            'employer': '',
            'position': '',
            'income': 0,
        },
        'financing_needed': False,
        'references': [],
    },
    'sales_info': {
        'stage': 'initial_contact',
        'salesperson': Config.SALESPERSON_NAME,
    },
}


def new_profile() -> CustomerProfile:
    """Return a fresh copy of the canonical default profile."""
    return copy.deepcopy(INITIAL_CUSTOMER_PROFILE)


def is_empty_value(value: Any) -> bool:
    """
    Check whether a value is the "unknown" sentinel.

    None, '', numeric zero and empty collections are empty.
    Booleans are always explicit values, so False is not empty.
    """
    if value is None:
        return True
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return value == 0
    if isinstance(value, (str, list, tuple, dict)):
        return len(value) == 0
    return False


def deep_merge(target: Dict[str, Any], source: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge a partial profile into an existing one.

    Dicts merge key by key. Anything else (lists included) replaces the
    existing value wholesale, but only when the incoming value is not
    empty. Neither argument is modified.

    Examples:
        deep_merge({'a': {'b': 'x'}}, {'a': {'b': ''}})   -> {'a': {'b': 'x'}}
        deep_merge({'a': {'b': 'x'}}, {'a': {'c': 'y'}})  -> {'a': {'b': 'x', 'c': 'y'}}
        deep_merge({'t': True}, {'t': False})             -> {'t': False}
    """
    output = copy.deepcopy(target) if target else {}
    if not source:
        return output

    for key, source_value in source.items():
        if isinstance(source_value, dict):
            target_value = output.get(key)
            if not isinstance(target_value, dict):
                target_value = {}
            output[key] = deep_merge(target_value, source_value)
        elif not is_empty_value(source_value):
            output[key] = copy.deepcopy(source_value)

    return output


def strip_read_only(profile: CustomerProfile) -> CustomerProfile:
    """Drop record-level keys (id, created_at) before writing a profile back."""
    return {k: v for k, v in profile.items() if k not in READ_ONLY_KEYS}
