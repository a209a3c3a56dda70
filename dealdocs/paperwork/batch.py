"""
Batch Generation

Generates several forms for one customer, strictly one after another,
and packages them into a single archive.

The profile is copied once up front so every document in the batch is
filled from the same snapshot. Any error aborts the whole batch: nothing
generated before the failure is returned.
"""

import copy
import logging
from typing import Any, Callable, Dict, List, Optional

from .types import DealPackage, Form, GeneratedDocument
from .requirements import get_required_forms
from ..packaging import archive_filename, build_archive, document_filename

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str], None]

PACKAGING_LABEL = "Creating ZIP file..."


def progress_label(index: int, total: int, form: Form) -> str:
    """Label shown before generating the index-th (1-based) form."""
    return f"Generating {index}/{total}: {form.name}..."


def generate_documents(
    filler: Any,
    forms: List[Form],
    profile: Dict[str, Any],
    on_progress: Optional[ProgressCallback] = None
) -> List[GeneratedDocument]:
    """
    Fill each form in order.

    Args:
        filler: A DocumentFiller
        forms: Forms to generate, in output order
        profile: The customer profile (copied, never modified)
        on_progress: Called with a progress label before each form

    Returns:
        Generated documents in the same order as forms

    Raises:
        DocumentError: From the first form that cannot be generated
    """
    snapshot = copy.deepcopy(profile)
    documents = []
    total = len(forms)

    for index, form in enumerate(forms, start=1):
        label = progress_label(index, total, form)
        logger.info(label)
        if on_progress:
            on_progress(label)

        try:
            content = filler.generate_document_bytes(form, snapshot)
        except Exception as e:
            logger.error(f"Batch aborted at {form.name} ({index}/{total}): {e}")
            raise

        documents.append(GeneratedDocument(
            form=form,
            filename=document_filename(form.name),
            content=content
        ))

    return documents


def generate_deal_package(
    filler: Any,
    profile: Dict[str, Any],
    forms: Optional[List[Form]] = None,
    on_progress: Optional[ProgressCallback] = None
) -> DealPackage:
    """
    Generate every form for a deal and zip them.

    Args:
        filler: A DocumentFiller
        profile: The customer profile
        forms: Forms to include; defaults to the currently required forms
        on_progress: Called with a progress label before each step

    Returns:
        DealPackage named after the customer
    """
    if forms is None:
        forms = [required.form for required in get_required_forms(profile)]

    documents = generate_documents(filler, forms, profile, on_progress)

    if on_progress:
        on_progress(PACKAGING_LABEL)

    content = build_archive((doc.filename, doc.content) for doc in documents)
    return DealPackage(
        filename=archive_filename(profile),
        content=content,
        documents=tuple(doc.filename for doc in documents)
    )
