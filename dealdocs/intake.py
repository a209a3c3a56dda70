"""
Intake Conversation

The chat loop that builds up a customer profile: every salesperson
message (or license photo) is stored, run through AI extraction, merged
into the profile, and answered with a short assistant message.
"""

import logging
from typing import Any, Dict, Optional, Tuple

from . import ai_extraction, customer_store, message_store
from .paperwork.exceptions import ExtractionError

logger = logging.getLogger(__name__)

PROFILE_UPDATED_REPLY = "Profile updated."
NOTHING_NEW_REPLY = "Noted. Is there anything else?"
EXTRACTION_FAILED_REPLY = "Sorry, I couldn't process that. Please try again."
IMAGE_FAILED_REPLY = "There was an error processing the image."
LICENSE_UNREADABLE_REPLY = (
    "I couldn't extract the license number or expiration date from that image. "
    "Please try another photo or enter it manually."
)


def _reply(customer_id: str, text: str) -> Dict[str, Any]:
    message = message_store.make_message('assistant', text)
    message_store.append_messages(customer_id, message)
    return message


def process_message(customer_id: str, text: str) -> Tuple[Dict[str, Any], Optional[Dict[str, Any]]]:
    """
    Handle one salesperson chat message.

    Returns:
        (assistant reply, updated profile or None if nothing changed)

    Raises:
        LookupError: If the customer does not exist
    """
    customer = customer_store.get_customer(customer_id)
    if customer is None:
        raise LookupError(f"Customer {customer_id} not found")

    message_store.append_messages(customer_id, message_store.make_message('user', text))

    try:
        extracted = ai_extraction.extract_profile_from_text(text, customer)
    except ExtractionError as e:
        logger.warning(f"Extraction failed for customer {customer_id}: {e}")
        return _reply(customer_id, EXTRACTION_FAILED_REPLY), None

    if not extracted:
        return _reply(customer_id, NOTHING_NEW_REPLY), None

    updated = customer_store.update_customer(customer_id, extracted)
    return _reply(customer_id, PROFILE_UPDATED_REPLY), updated


def license_reply(license_update: Dict[str, Any]) -> str:
    if license_update['is_expired']:
        return (
            f"LICENSE EXPIRED: Scanned license expired on {license_update['expiration']}. "
            f"Profile has been updated with a warning."
        )
    return (
        f"Driver's license scanned and profile updated. "
        f"License #: {license_update['number']}, Expires: {license_update['expiration']}."
    )


def process_license_image(
    customer_id: str,
    file_name: str,
    image: bytes,
    mime_type: str
) -> Tuple[Dict[str, Any], Optional[Dict[str, Any]]]:
    """
    Handle an uploaded driver's license photo.

    Returns:
        (assistant reply, updated profile or None if the scan failed)

    Raises:
        LookupError: If the customer does not exist
    """
    if customer_store.get_customer(customer_id) is None:
        raise LookupError(f"Customer {customer_id} not found")

    message_store.append_messages(
        customer_id, message_store.make_message('user', f"Uploaded driver's license: {file_name}")
    )

    try:
        extracted = ai_extraction.extract_license_from_image(image, mime_type)
    except ExtractionError as e:
        logger.warning(f"License scan failed for customer {customer_id}: {e}")
        return _reply(customer_id, IMAGE_FAILED_REPLY), None

    license_update = ai_extraction.build_license_update(extracted)
    if license_update is None:
        return _reply(customer_id, LICENSE_UNREADABLE_REPLY), None

    updated = customer_store.update_customer(
        customer_id, {'personal_info': {'drivers_license': license_update}}
    )
    return _reply(customer_id, license_reply(license_update)), updated
