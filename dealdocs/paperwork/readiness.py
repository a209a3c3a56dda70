"""
Form Readiness

Checks whether the profile holds enough data to auto-fill a form.
Readiness is advisory only: it never blocks requirement resolution or
generation, it just tells the salesperson what is still missing.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from .types import FormReadiness
from .path_resolver import PathResolver
from .profile import is_empty_value


@dataclass(frozen=True)
class RequiredData:
    """
    One readiness check.

    The warning is reported when any of the paths resolves to an empty
    value (so a check over make and model warns once if either is
    missing).
    """
    paths: Tuple[str, ...]
    warning: str

    def is_missing(self, profile: Dict[str, Any]) -> bool:
        return any(is_empty_value(PathResolver.resolve(profile, p)) for p in self.paths)


NAME = RequiredData(('personal_info.full_name',), "Missing customer name.")

READINESS_RULES: Dict[str, List[RequiredData]] = {
    'interview_sheet': [
        NAME,
        RequiredData(('personal_info.phone',), "Missing phone number."),
        RequiredData(('personal_info.email',), "Missing email address."),
    ],
    'test_drive_agreement': [
        NAME,
        RequiredData(('personal_info.drivers_license.number',), "Missing driver's license number."),
        RequiredData(('personal_info.drivers_license.expiration',), "Missing license expiration date."),
        RequiredData(
            ('vehicle_info.interest_vehicle.make', 'vehicle_info.interest_vehicle.model'),
            "Missing vehicle of interest."
        ),
    ],
    'credit_application': [
        NAME,
        RequiredData(('personal_info.address.full_address',), "Missing customer address."),
        RequiredData(('financial_info.employment.employer',), "Missing employment information."),
    ],
    'reference_sheet': [
        NAME,
        RequiredData(('financial_info.references',), "At least one reference is required."),
    ],
    'delivery_report': [
        NAME,
        RequiredData(('vehicle_info.interest_vehicle.vin',), "Missing VIN for vehicle of interest."),
    ],
    'privacy_policy': [NAME],
    'deal_check_list': [NAME],
    'oil_changes_form': [
        NAME,
        RequiredData(('vehicle_info.interest_vehicle.model',), "Missing vehicle model."),
    ],
    'payoff_authorization': [
        NAME,
        RequiredData(('vehicle_info.trade_vehicle.vin',), "Missing trade-in vehicle VIN."),
        RequiredData(('vehicle_info.trade_vehicle.lien_holder',), "Missing trade-in lien holder."),
    ],
}


def get_form_readiness(form_id: str, profile: Dict[str, Any]) -> FormReadiness:
    """
    Validate that a form's required data is present in the profile.

    Args:
        form_id: Catalog form id (e.g. 'test_drive_agreement')
        profile: The customer profile

    Returns:
        FormReadiness with every unmet check's warning, in rule order.
        Forms without rules are always ready.
    """
    warnings = [
        rule.warning
        for rule in READINESS_RULES.get(form_id, [])
        if rule.is_missing(profile)
    ]
    return FormReadiness(is_ready=not warnings, warnings=warnings)
