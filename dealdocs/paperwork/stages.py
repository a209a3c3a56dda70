"""
Stage Classification

Places a customer in the sales pipeline from the data collected so far.
"""

from typing import Any, Dict

from .types import FormStage
from .path_resolver import PathResolver
from .profile import is_empty_value


def _has(profile: Dict[str, Any], path: str) -> bool:
    return not is_empty_value(PathResolver.resolve(profile, path))


def determine_stage(profile: Dict[str, Any]) -> FormStage:
    """
    Determine the customer's current sales stage.

    Rules are checked in priority order and the first match wins:
        1. closing: interest vehicle VIN and driver's license number known
        2. financing: financing needed, name and phone known
        3. initial_contact: default

    A profile matching both 1 and 2 is closing.
    """
    if _has(profile, 'vehicle_info.interest_vehicle.vin') and \
            _has(profile, 'personal_info.drivers_license.number'):
        return FormStage.CLOSING

    if PathResolver.resolve(profile, 'financial_info.financing_needed') and \
            _has(profile, 'personal_info.full_name') and \
            _has(profile, 'personal_info.phone'):
        return FormStage.FINANCING

    return FormStage.INITIAL_CONTACT
