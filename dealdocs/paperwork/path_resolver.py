"""
Path Resolver

Looks up values in a customer profile using dot-notation paths, and
lists every leaf path of the canonical profile shape so administrators
can map template fields to them.

Path syntax:
    personal_info.full_name                  -> profile['personal_info']['full_name']
    vehicle_info.interest_vehicle.vin        -> nested dict lookup
    financial_info.references.0.name         -> list index, then dict key
"""

import logging
from typing import Any, List, Optional

from .profile import INITIAL_CUSTOMER_PROFILE

logger = logging.getLogger(__name__)


class PathResolver:
    """
    Resolves dot paths against nested dicts and flattens schemas.

    Resolution never raises: a missing key, an out-of-range index or a
    node that cannot be traversed (a string, a number, None) all resolve
    to None.
    """

    # Flattened canonical profile, computed once per process
    _profile_flat_keys: Optional[List[str]] = None

    @classmethod
    def resolve(cls, root: Any, dot_path: Optional[str]) -> Any:
        """
        Resolve a dot path to a value.

        Args:
            root: The structure to walk (normally a customer profile)
            dot_path: Path like "personal_info.address.city"

        Returns:
            The resolved value, or None if any segment is missing
        """
        if not dot_path:
            return None

        current = root
        for part in dot_path.split('.'):
            current = cls._get_value(current, part)
            if current is None:
                return None

        return current

    @classmethod
    def _get_value(cls, node: Any, part: str) -> Any:
        """Get one segment from a dict key or a list index."""
        if isinstance(node, dict):
            return node.get(part)

        if isinstance(node, (list, tuple)) and part.isdigit():
            index = int(part)
            if index < len(node):
                return node[index]

        return None

    @classmethod
    def flatten_schema(cls, instance: dict, prefix: str = '') -> List[str]:
        """
        Generate the ordered list of leaf dot paths in a nested dict.

        Dicts are recursed into. Lists are leaves, even when their
        elements are dicts (e.g. financial_info.references).

        Examples:
            {'a': {'b': '', 'c': []}, 'd': 0} -> ['a.b', 'a.c', 'd']
        """
        keys = []
        for key, value in instance.items():
            path = f"{prefix}.{key}" if prefix else key
            if isinstance(value, dict) and value:
                keys.extend(cls.flatten_schema(value, path))
            else:
                keys.append(path)
        return keys

    @classmethod
    def get_profile_flat_keys(cls) -> List[str]:
        """
        Get every leaf path of the canonical customer profile.

        The default profile is static, so the result is cached for the
        lifetime of the process.
        """
        if cls._profile_flat_keys is None:
            cls._profile_flat_keys = cls.flatten_schema(INITIAL_CUSTOMER_PROFILE)
            logger.debug(f"Cached {len(cls._profile_flat_keys)} profile paths")
        return list(cls._profile_flat_keys)
