"""
Deal Document Packaging

Bundles generated documents into one downloadable ZIP archive.
"""

import io
import re
import zipfile
from typing import Any, Dict, Iterable, Tuple

ARCHIVE_SUFFIX = '_Deal_Documents.zip'
DEFAULT_CUSTOMER_NAME = 'Customer'


def _underscored(value: str) -> str:
    return re.sub(r'\s', '_', value)


def document_filename(document_name: str) -> str:
    """
    File name for a generated document inside the archive.

    Examples:
        "Oil Changes Form" -> "Oil_Changes_Form.pdf"
    """
    return f"{_underscored(document_name)}.pdf"


def archive_filename(profile: Dict[str, Any]) -> str:
    """
    Download name for a customer's archive.

    Examples:
        full_name "Jane Doe" -> "Jane_Doe_Deal_Documents.zip"
        no name             -> "Customer_Deal_Documents.zip"
    """
    full_name = (profile.get('personal_info') or {}).get('full_name') or ''
    return f"{_underscored(full_name) or DEFAULT_CUSTOMER_NAME}{ARCHIVE_SUFFIX}"


def build_archive(documents: Iterable[Tuple[str, bytes]]) -> bytes:
    """
    Zip (filename, bytes) pairs, in the order given.

    Returns:
        The archive bytes
    """
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, 'w', compression=zipfile.ZIP_DEFLATED) as archive:
        for filename, content in documents:
            archive.writestr(filename, content)
    return buffer.getvalue()
