"""
Deal Paperwork System

Decides which paper documents a car deal needs, whether each one has
enough customer data behind it, and fills the PDF templates.

Usage:
    from dealdocs.paperwork import get_required_forms, get_form_readiness, DocumentFiller

    for required in get_required_forms(profile):
        readiness = get_form_readiness(required.form.id, profile)

    filler = DocumentFiller(template_store)
    preview = filler.generate_preview_data('interview_sheet', profile)
    package = generate_deal_package(filler, profile)
"""

from .types import (
    FormStage,
    Form,
    RequiredForm,
    FormReadiness,
    FilledField,
    GeneratedDocument,
    DealPackage
)

from .exceptions import (
    DocumentError,
    ConfigurationError,
    UnknownFormError,
    TemplateNotFoundError,
    TemplateReadError,
    FieldWriteError,
    ExtractionError
)

from .catalog import FORM_CATALOG, all_forms, get_form, get_form_or_raise, get_forms_for_stage
from .profile import INITIAL_CUSTOMER_PROFILE, new_profile, deep_merge, is_empty_value
from .path_resolver import PathResolver
from .special_values import (
    SPECIAL_VALUES,
    mappable_special_keys,
    register_special_value,
    resolve_special_value
)
from .stages import determine_stage
from .requirements import get_required_forms
from .readiness import get_form_readiness
from .pdf_template import PdfFormTemplate, discover_fields
from .filler import DocumentFiller, MANUAL_ENTRY_FIELDS
from .batch import generate_documents, generate_deal_package

__all__ = [
    # Types
    'FormStage',
    'Form',
    'RequiredForm',
    'FormReadiness',
    'FilledField',
    'GeneratedDocument',
    'DealPackage',

    # Exceptions
    'DocumentError',
    'ConfigurationError',
    'UnknownFormError',
    'TemplateNotFoundError',
    'TemplateReadError',
    'FieldWriteError',
    'ExtractionError',

    # Catalog and profile
    'FORM_CATALOG',
    'all_forms',
    'get_form',
    'get_form_or_raise',
    'get_forms_for_stage',
    'INITIAL_CUSTOMER_PROFILE',
    'new_profile',
    'deep_merge',
    'is_empty_value',

    # Resolution
    'PathResolver',
    'SPECIAL_VALUES',
    'mappable_special_keys',
    'register_special_value',
    'resolve_special_value',

    # Rules
    'determine_stage',
    'get_required_forms',
    'get_form_readiness',

    # Generation
    'PdfFormTemplate',
    'discover_fields',
    'DocumentFiller',
    'MANUAL_ENTRY_FIELDS',
    'generate_documents',
    'generate_deal_package',
]
