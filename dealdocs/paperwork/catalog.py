"""
Form Catalog - the fixed set of paper documents a deal can require.

Each entry's stage tag decides when the form is pulled into a deal:
- initial_contact / financing / closing: required while the customer is
  classified into that stage
- always: required for every sale, pulled in at closing
- conditional: required only when a profile condition holds
  (see requirements.CONDITIONAL_RULES)

TO ADD A NEW DOCUMENT:
1. Add an entry to FORM_CATALOG below
2. Add its readiness rules to readiness.READINESS_RULES
3. Upload the PDF template and save a field mapping for it
"""

from typing import Dict, List, Optional

from .types import Form, FormStage
from .exceptions import UnknownFormError


# =============================================================================
# FORM CATALOG
# =============================================================================
# Order matters: it is the order forms are listed and generated in.
# =============================================================================

FORM_CATALOG: Dict[str, Form] = {
    'interview_sheet': Form(
        id='interview_sheet',
        name='Interview Sheet',
        stage=FormStage.INITIAL_CONTACT,
    ),
    'test_drive_agreement': Form(
        id='test_drive_agreement',
        name='Test Drive Agreement',
        stage=FormStage.INITIAL_CONTACT,
    ),
    'credit_application': Form(
        id='credit_application',
        name='Credit Application (F&I)',
        stage=FormStage.FINANCING,
    ),
    'reference_sheet': Form(
        id='reference_sheet',
        name='Reference Sheet',
        stage=FormStage.FINANCING,
    ),
    'delivery_report': Form(
        id='delivery_report',
        name='Delivery Report',
        stage=FormStage.ALWAYS,
    ),
    'privacy_policy': Form(
        id='privacy_policy',
        name='Privacy Policy',
        stage=FormStage.ALWAYS,
    ),
    'deal_check_list': Form(
        id='deal_check_list',
        name='Deal Check List',
        stage=FormStage.ALWAYS,
    ),
    'oil_changes_form': Form(
        id='oil_changes_form',
        name='Oil Changes Form',
        stage=FormStage.CONDITIONAL,
    ),
    'payoff_authorization': Form(
        id='payoff_authorization',
        name='Payoff Authorization Sheet',
        stage=FormStage.CONDITIONAL,
    ),
}


def all_forms() -> List[Form]:
    """Get all catalog forms in catalog order."""
    return list(FORM_CATALOG.values())


def get_form(form_id: str) -> Optional[Form]:
    """Get a form by id, or None if it is not in the catalog."""
    return FORM_CATALOG.get(form_id)


def get_form_or_raise(form_id: str) -> Form:
    """Get a form by id, raising UnknownFormError if not found."""
    form = get_form(form_id)
    if not form:
        raise UnknownFormError(f"Unknown form id: {form_id}", form_id=form_id)
    return form


def get_forms_for_stage(stage: FormStage) -> List[Form]:
    """Get all forms tagged with a stage, in catalog order."""
    return [f for f in FORM_CATALOG.values() if f.stage == stage]
