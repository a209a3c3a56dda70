"""
AI Extraction Service

Turns a salesperson's chat messages and driver's license photos into
partial customer profiles using the OpenAI Chat Completions API.

Model Hierarchy:
1. Primary: GPT-4o (most capable, reads images)
2. Fallback: GPT-4o-mini (faster, cost-effective, reads images)
3. Legacy: GPT-3.5-turbo (text only)

Usage:
    from dealdocs.ai_extraction import extract_profile_from_text

    partial = extract_profile_from_text("John Smith, 614-555-0100, wants a 2023 Civic", profile)
"""

import base64
import json
import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Union

import openai

from config import Config
from .paperwork.exceptions import ExtractionError
from .paperwork.special_values import dealership_today

logger = logging.getLogger(__name__)

# Model configuration - using Chat Completions API compatible models
PRIMARY_MODEL = "gpt-4o"
FALLBACK_MODEL = "gpt-4o-mini"
LEGACY_MODEL = "gpt-3.5-turbo"

TEXT_MODELS = (PRIMARY_MODEL, FALLBACK_MODEL, LEGACY_MODEL)
VISION_MODELS = (PRIMARY_MODEL, FALLBACK_MODEL)

# Errors that should trigger fallback (model not available, rate limited, etc.)
FALLBACK_ERROR_CODES = [401, 403, 404, 429]

LICENSE_EXPIRATION_FORMAT = "%m-%d-%Y"

PROFILE_EXTRACTION_PROMPT = """You are an AI assistant for a car dealership. The current salesperson is {salesperson}. Your task is to extract structured information from a salesperson's chat message and create a JSON object to update the customer's profile.
You will be given the salesperson's message and the customer's current JSON profile.
- Analyze the message for any new customer data. A single message can contain multiple pieces of information (e.g., name, phone, and vehicle interest).
- Create a JSON object containing ONLY the fields for which new information is provided, using the same nesting as the profile (personal_info, vehicle_info, financial_info).
- NEVER overwrite existing data with empty or null values. If the message doesn't contain info for a field, omit that field from your JSON response.
- Data Transformation Rules:
    - full_name: If a full name is given, populate full_name and also split it into first_name and last_name.
    - full_address: If a full address is given, populate full_address and also split it into street, city, state and zip.
    - vehicles: Parse strings like "2023 Honda Civic" into year, make and model. Distinguish between interest_vehicle (what they want to buy) and trade_vehicle (what they are trading in).
- Inference Rules:
    - trade_in: If the message mentions trading in a vehicle, set trade_in to true and populate trade_vehicle.
    - financing_needed: If the message mentions loans, credit, or payments, set financing_needed to true.
    - purchase_type: Set to "new" or "used" if mentioned.
- Respond ONLY with the JSON object of the data to be updated. If no new data is found, return an empty JSON object {{}}."""

LICENSE_EXTRACTION_PROMPT = """You are a highly accurate OCR system specialized in reading {state} Driver's Licenses.
From the provided image, extract the following fields precisely:
1. number: The license number. This is often labeled "LN" and is typically 2 letters followed by 6 numbers.
2. expiration: The expiration date, labeled "EXP". Extract it in MM-DD-YYYY format.
If the image is blurry, unreadable, or not a driver's license, return an empty JSON object.
Respond ONLY with a JSON object with the keys "number" and "expiration"."""


def _should_fallback(error):
    """Check if error should trigger fallback to next model."""
    if hasattr(error, 'status_code'):
        return error.status_code in FALLBACK_ERROR_CODES
    return False


def _call_chat_completions_api(client, model, messages, temperature=0.0, json_mode=False):
    """Call the OpenAI Chat Completions API."""
    kwargs = {
        "model": model,
        "messages": messages,
        "temperature": temperature
    }

    if json_mode:
        kwargs["response_format"] = {"type": "json_object"}

    response = client.chat.completions.create(**kwargs)
    return response.choices[0].message.content


def generate_ai_response(
    system_prompt: str,
    user_content: Union[str, List[Dict[str, Any]]],
    temperature: float = 0.0,
    json_mode: bool = False,
    models: tuple = TEXT_MODELS,
    api_key: str = None
) -> str:
    """
    Generate an AI response using the model fallback chain.

    Args:
        system_prompt: The system instructions for the AI
        user_content: User text, or a list of content parts (text/image)
        temperature: Creativity level (0.0-1.0)
        json_mode: If True, request JSON response format
        models: Models to try, in order
        api_key: Optional API key override (uses Config.OPENAI_API_KEY if not provided)

    Returns:
        The AI-generated response text

    Raises:
        ValueError: If API key is not configured
        openai.APIError: If the last model fails, or any model fails unrecoverably
    """
    key = api_key or Config.OPENAI_API_KEY
    if not key:
        logger.error("OpenAI API key is not configured!")
        raise ValueError("OpenAI API key is not configured")

    client = openai.OpenAI(api_key=key)
    messages = [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user_content}
    ]

    for attempt, model in enumerate(models, start=1):
        is_last = attempt == len(models)
        try:
            logger.info(f"[{attempt}/{len(models)}] Attempting model: {model}")
            result = _call_chat_completions_api(client, model, messages, temperature, json_mode)
            logger.info(f"SUCCESS: Generated response with {model}")
            return result

        except (openai.NotFoundError, openai.AuthenticationError,
                openai.PermissionDeniedError, openai.RateLimitError) as e:
            if is_last:
                logger.error(f"FATAL: All models failed. {model} error: {str(e)}")
                raise
            logger.warning(f"FALLBACK TRIGGERED: {model} failed with {type(e).__name__}. Error: {str(e)}")

        except openai.APIError as e:
            if is_last or not _should_fallback(e):
                logger.error(f"FATAL: {model} failed with unrecoverable error: {str(e)}")
                raise
            logger.warning(f"FALLBACK TRIGGERED: {model} failed with status {e.status_code}. Error: {str(e)}")

    raise ValueError("No models configured for AI response")


def _parse_json_object(text: Optional[str]) -> Dict[str, Any]:
    text = (text or '').strip()
    if not text:
        return {}
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def extract_profile_from_text(message: str, current_profile: Dict[str, Any]) -> Dict[str, Any]:
    """
    Extract new customer data from a chat message.

    Args:
        message: The salesperson's message
        current_profile: The customer's current profile, for context

    Returns:
        Partial profile with only the newly mentioned fields ({} if none)

    Raises:
        ExtractionError: If the AI call fails or returns invalid JSON
    """
    salesperson = (current_profile.get('sales_info') or {}).get('salesperson') or Config.SALESPERSON_NAME
    system_prompt = PROFILE_EXTRACTION_PROMPT.format(salesperson=salesperson)
    profile_context = {k: v for k, v in current_profile.items() if k not in ('id', 'created_at')}
    user_prompt = (
        f'Salesperson Message: "{message}"\n\n'
        f"Current Customer Profile:\n{json.dumps(profile_context, indent=2)}"
    )

    try:
        response = generate_ai_response(system_prompt, user_prompt, json_mode=True)
        return _parse_json_object(response)
    except (openai.OpenAIError, ValueError) as e:
        logger.error(f"Error extracting data from text: {e}")
        raise ExtractionError("Failed to process message with AI.", source='text') from e


def extract_license_from_image(image: bytes, mime_type: str) -> Dict[str, str]:
    """
    Read a driver's license number and expiration date from a photo.

    Returns:
        {'number': ..., 'expiration': 'MM-DD-YYYY'}, or {} if unreadable

    Raises:
        ExtractionError: If the AI call fails or returns invalid JSON
    """
    encoded = base64.b64encode(image).decode('ascii')
    content = [
        {"type": "text", "text": "Extract the license number and expiration date."},
        {"type": "image_url", "image_url": {"url": f"data:{mime_type};base64,{encoded}"}},
    ]
    system_prompt = LICENSE_EXTRACTION_PROMPT.format(state=Config.LICENSE_STATE)

    try:
        response = generate_ai_response(system_prompt, content, json_mode=True, models=VISION_MODELS)
        data = _parse_json_object(response)
    except (openai.OpenAIError, ValueError) as e:
        logger.error(f"Error extracting data from image: {e}")
        raise ExtractionError("Failed to process driver's license image.", source='image') from e

    return {k: str(data[k]) for k in ('number', 'expiration') if data.get(k)}


def parse_license_expiration(expiration: str) -> Optional[date]:
    """Parse an MM-DD-YYYY (or MM/DD/YYYY) expiration; None if unparseable."""
    for fmt in (LICENSE_EXPIRATION_FORMAT, "%m/%d/%Y", "%Y-%m-%d"):
        try:
            return datetime.strptime(expiration.strip(), fmt).date()
        except ValueError:
            continue
    logger.warning(f"Could not parse license expiration: {expiration}")
    return None


def build_license_update(extracted: Dict[str, str], today: date = None) -> Optional[Dict[str, Any]]:
    """
    Build the drivers_license patch for a scanned license.

    Args:
        extracted: Output of extract_license_from_image
        today: Reference date (defaults to today in the dealership timezone)

    Returns:
        The license fields including is_expired, or None when the scan
        is missing the number or expiration
    """
    number = extracted.get('number')
    expiration = extracted.get('expiration')
    if not number or not expiration:
        return None

    today = today or dealership_today()
    expires_on = parse_license_expiration(expiration)

    return {
        'number': number,
        'expiration': expiration,
        'state': Config.LICENSE_STATE,
        'is_expired': expires_on is not None and expires_on < today,
    }
