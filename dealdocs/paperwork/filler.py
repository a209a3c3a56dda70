"""
Document Filler

Resolves a form's template fields against a customer profile and writes
the results into the PDF template.

A field's value comes from, in order:
    1. the manual-entry list: always "[Manual Entry]", never auto-filled
    2. its saved mapping to a special value (e.g. __CURRENT_DATE__)
    3. its saved mapping to a profile dot path
    4. nothing: unmapped fields display as "---"

Usage:
    filler = DocumentFiller(get_template_store())
    preview = filler.generate_preview_data('interview_sheet', profile)
    pdf_bytes = filler.generate_document_bytes(form, profile)
"""

import logging
from typing import Any, Callable, Dict, List

from .types import FilledField, Form
from .formatting import (
    MANUAL_ENTRY_DISPLAY,
    format_display_value,
    is_checked_value,
    is_fillable,
)
from .path_resolver import PathResolver
from .special_values import is_special_key, resolve_special_value
from .pdf_template import (
    KIND_CHECKBOX,
    KIND_RADIO,
    KIND_SELECT,
    KIND_TEXT,
    PdfFormTemplate,
)
from .exceptions import TemplateNotFoundError, TemplateReadError

logger = logging.getLogger(__name__)

# Financial and identity fields left blank for the salesperson to fill by hand
MANUAL_ENTRY_FIELDS = ('SalePrice', 'DownPayment', 'PayoffAmount', 'AnnualIncome', 'SSN')

NOT_MAPPED_SOURCE = 'Not Mapped'
MANUAL_ENTRY_SOURCE = 'N/A'


class DocumentFiller:
    """
    Fills form templates from customer profiles.

    Args:
        template_store: Provides discovered fields, mappings and template bytes
        template_factory: Builds a fillable template from raw bytes
    """

    def __init__(self, template_store: Any, template_factory: Callable[[bytes], Any] = PdfFormTemplate):
        self.template_store = template_store
        self.template_factory = template_factory

    @staticmethod
    def resolve_value(mapped_path: str, profile: Dict[str, Any]) -> Any:
        """Resolve a mapping target to a raw value."""
        if not mapped_path:
            return None
        if is_special_key(mapped_path):
            return resolve_special_value(mapped_path, profile)
        return PathResolver.resolve(profile, mapped_path)

    def generate_preview_data(self, form_id: str, profile: Dict[str, Any]) -> List[FilledField]:
        """
        Build the formatted values that would be written to a form.

        Args:
            form_id: Catalog form id
            profile: The customer profile

        Returns:
            One FilledField per discovered template field, in discovery order
        """
        mappings = self.template_store.get_mapping(form_id) or {}
        discovered_fields = self.template_store.get_discovered_fields(form_id) or []

        if not discovered_fields:
            logger.info(f"No discovered fields for form {form_id}; preview is empty")

        filled = []
        for pdf_field in discovered_fields:
            if pdf_field in MANUAL_ENTRY_FIELDS:
                filled.append(FilledField(
                    pdf_field=pdf_field,
                    value=MANUAL_ENTRY_DISPLAY,
                    source_path=MANUAL_ENTRY_SOURCE
                ))
                continue

            mapped_path = mappings.get(pdf_field)
            value = self.resolve_value(mapped_path, profile)

            filled.append(FilledField(
                pdf_field=pdf_field,
                value=format_display_value(value),
                source_path=mapped_path or NOT_MAPPED_SOURCE
            ))

        return filled

    def _load_template(self, form: Form) -> Any:
        raw = self.template_store.get_template_bytes(form.id)
        if not raw:
            raise TemplateNotFoundError(
                f"Template file not found for form: {form.name}", form_id=form.id
            )
        try:
            return self.template_factory(raw)
        except TemplateReadError as e:
            raise TemplateReadError(
                f"Template file for form '{form.name}' could not be read: {e}", form_id=form.id
            ) from e

    @staticmethod
    def write_field(template: Any, field: FilledField) -> bool:
        """
        Write one formatted value into the template.

        Returns:
            False if the field kind has no write mode (e.g. signatures)
        """
        kind = template.get_field_kind(field.pdf_field)

        if kind == KIND_TEXT:
            template.set_text(field.pdf_field, field.value)
        elif kind == KIND_CHECKBOX:
            template.set_checked(field.pdf_field, is_checked_value(field.value))
        elif kind in (KIND_RADIO, KIND_SELECT):
            template.select_option(field.pdf_field, field.value)
        else:
            return False
        return True

    def generate_document_bytes(self, form: Form, profile: Dict[str, Any]) -> bytes:
        """
        Fill and flatten a form's template.

        Fields that fail to write are logged and left blank; only a
        missing or unreadable template aborts the document.

        Raises:
            TemplateNotFoundError: No template uploaded for the form
            TemplateReadError: Template bytes are not a readable PDF form
        """
        template = self._load_template(form)
        preview = self.generate_preview_data(form.id, profile)

        written = 0
        for field in preview:
            if not is_fillable(field.value):
                continue
            try:
                if self.write_field(template, field):
                    written += 1
                else:
                    logger.debug(f"Field '{field.pdf_field}' on '{form.name}' has no write mode, skipped")
            except Exception as e:
                logger.warning(
                    f"Could not fill field '{field.pdf_field}' on form '{form.name}'. "
                    f"It may not exist on the PDF. Error: {e}"
                )

        template.flatten()
        logger.info(f"Filled {written}/{len(preview)} field(s) on {form.name}")
        return template.to_bytes()
