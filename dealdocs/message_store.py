"""
Message Store

Chat history between the salesperson and the intake assistant, kept in
the Supabase `messages` table and read back in timestamp order.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Union

from config import Config
from .supabase_client import get_supabase_client

logger = logging.getLogger(__name__)

MESSAGE_ROLES = ('user', 'assistant', 'system')

Message = Dict[str, Any]


def make_message(role: str, text: str) -> Message:
    """Build a message stamped with the current UTC time."""
    if role not in MESSAGE_ROLES:
        raise ValueError(f"Unknown message role: {role}")
    return {
        'role': role,
        'text': text,
        'timestamp': datetime.now(timezone.utc).isoformat()
    }


def get_messages(customer_id: str) -> List[Message]:
    """Retrieve a customer's messages, oldest first."""
    if not customer_id:
        return []

    try:
        response = (
            get_supabase_client()
            .table(Config.MESSAGES_TABLE)
            .select('role, text, timestamp')
            .eq('customer_id', customer_id)
            .order('timestamp')
            .execute()
        )
    except Exception as e:
        logger.error(f"Error fetching messages for customer {customer_id}: {e}")
        raise

    return response.data or []


def append_messages(customer_id: str, messages: Union[Message, List[Message]]) -> None:
    """Append one message or a list of messages to a customer's history."""
    if not customer_id:
        return

    if isinstance(messages, dict):
        messages = [messages]

    rows = [
        {
            'customer_id': customer_id,
            'role': msg['role'],
            'text': msg['text'],
            'timestamp': msg['timestamp'],
        }
        for msg in messages
    ]
    if not rows:
        return

    try:
        get_supabase_client().table(Config.MESSAGES_TABLE).insert(rows).execute()
    except Exception as e:
        logger.error(f"Error appending messages for customer {customer_id}: {e}")
        raise
