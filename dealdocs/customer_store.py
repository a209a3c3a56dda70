"""
Customer Store

Customer profiles persisted in the Supabase `customers` table. Each row
holds the four profile sections as JSON columns plus `id` and
`created_at`.

Updates are deep merges: new data is folded into the stored profile
without ever replacing a known value with an empty one.
"""

import logging
from typing import Any, Dict, List, Optional

from config import Config
from .supabase_client import get_supabase_client
from .paperwork.profile import deep_merge, new_profile, strip_read_only

logger = logging.getLogger(__name__)


def _table():
    return get_supabase_client().table(Config.CUSTOMERS_TABLE)


def list_customers() -> List[Dict[str, Any]]:
    """Retrieve all customer profiles, newest first."""
    try:
        response = _table().select('*').order('created_at', desc=True).execute()
    except Exception as e:
        logger.error(f"Error fetching customers from Supabase: {e}")
        raise
    return response.data or []


def get_customer(customer_id: str) -> Optional[Dict[str, Any]]:
    """
    Retrieve a single customer profile.

    Returns None if no customer has that id.
    """
    try:
        response = _table().select('*').eq('id', customer_id).limit(1).execute()
    except Exception as e:
        logger.error(f"Error fetching customer {customer_id}: {e}")
        raise
    return response.data[0] if response.data else None


def create_customer() -> Dict[str, Any]:
    """Create a new customer seeded from the default profile."""
    try:
        response = _table().insert(new_profile()).execute()
    except Exception as e:
        logger.error(f"Error creating customer in Supabase: {e}")
        raise
    customer = response.data[0]
    logger.info(f"Created customer {customer.get('id')}")
    return customer


def update_customer(customer_id: str, partial: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Deep-merge partial profile data into a stored customer.

    Args:
        customer_id: The customer to update
        partial: Partial profile (same nesting as the full profile)

    Returns:
        The updated profile, or None if the customer does not exist
    """
    current = get_customer(customer_id)
    if current is None:
        logger.warning(f"Customer {customer_id} not found for update")
        return None

    merged = deep_merge(current, partial)
    payload = strip_read_only(merged)

    try:
        response = _table().update(payload).eq('id', customer_id).execute()
    except Exception as e:
        logger.error(f"Error updating customer {customer_id} in Supabase: {e}")
        raise

    return response.data[0] if response.data else merged
