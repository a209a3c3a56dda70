"""
Required Forms

Works out which catalog forms a deal needs right now, and why.

Rules are applied in a fixed order over an insertion-ordered dict keyed
by form id:
    1. every form tagged with the customer's stage  -> "Stage: <stage>"
    2. conditional rules, whatever the stage        -> rule reason
    3. at closing, every form tagged "always"       -> "Required for Sale"

The first insertion of a form id fixes its position in the result. A
later rule that matches the same id only replaces the reason, so a
form matched by a conditional rule and again by the closing rule keeps
its position but reads "Required for Sale".
"""

import logging
from typing import Any, Dict, List

from .types import FormStage, RequiredForm
from .catalog import get_form, get_forms_for_stage
from .path_resolver import PathResolver
from .stages import determine_stage

logger = logging.getLogger(__name__)

REQUIRED_FOR_SALE_REASON = "Required for Sale"

# Conditional document rules, evaluated regardless of stage.
# Condition operators: equals, truthy
CONDITIONAL_RULES: List[Dict[str, Any]] = [
    {
        'form_id': 'oil_changes_form',
        'reason': 'New Vehicle',
        'condition': {'field': 'vehicle_info.purchase_type', 'equals': 'new'},
    },
    {
        'form_id': 'payoff_authorization',
        'reason': 'Has Trade-In',
        'condition': {'field': 'vehicle_info.trade_in', 'truthy': True},
    },
]


def stage_reason(stage: FormStage) -> str:
    return f"Stage: {stage.label}"


def evaluate_condition(condition: Dict[str, Any], profile: Dict[str, Any]) -> bool:
    """
    Evaluate a single rule condition against a profile.

    Args:
        condition: {'field': <dot path>, '<operator>': <operand>}
        profile: The customer profile

    Returns:
        True if the condition holds
    """
    field_value = PathResolver.resolve(profile, condition['field'])

    if 'equals' in condition:
        return field_value == condition['equals']
    if 'truthy' in condition:
        return bool(field_value) == condition['truthy']

    logger.warning(f"Condition on {condition['field']} has no operator")
    return False


def get_required_forms(profile: Dict[str, Any]) -> List[RequiredForm]:
    """
    Get the forms required for a customer, deduplicated and ordered.

    Args:
        profile: The customer profile

    Returns:
        List of RequiredForm in first-insertion order, each carrying the
        reason from the last rule that matched it
    """
    stage = determine_stage(profile)

    # Plain dicts keep insertion order; re-assigning a key keeps its slot
    required: Dict[str, RequiredForm] = {}

    # 1. Stage-based forms
    for form in get_forms_for_stage(stage):
        required[form.id] = RequiredForm(form=form, reason=stage_reason(stage))

    # 2. Conditional forms
    for rule in CONDITIONAL_RULES:
        if not evaluate_condition(rule['condition'], profile):
            continue
        form = get_form(rule['form_id'])
        if form:
            required[form.id] = RequiredForm(form=form, reason=rule['reason'])

    # 3. Forms every sale needs, once the deal is closing
    if stage == FormStage.CLOSING:
        for form in get_forms_for_stage(FormStage.ALWAYS):
            required[form.id] = RequiredForm(form=form, reason=REQUIRED_FOR_SALE_REASON)

    return list(required.values())
