"""
Conversation logging to MySQL.

Stores each answered exchange in the conversations table and counts it
against the client's credits for the current billing period.
"""
import logging
from typing import Dict, List

import mysql.connector

from .database_client import Database
from .errors import ConversationLogError
from .models.conversation import ConversationRecord

logger = logging.getLogger(__name__)

_INSERT_CONVERSATION = """
    INSERT INTO conversations
    (client_id, customer_phone, message_type, message_text, ai_response, created_at)
    VALUES (%s, %s, 'incoming', %s, %s, %s)
"""

_INCREMENT_CREDITS = """
    UPDATE saas_credits
    SET credits_used = credits_used + 1
    WHERE client_id = %s
    AND CURRENT_DATE BETWEEN period_start AND period_end
"""

_RECENT_CONVERSATIONS = """
    SELECT customer_phone, message_text, ai_response, created_at
    FROM conversations
    WHERE client_id = %s
    ORDER BY created_at DESC
    LIMIT %s
"""


class ConversationLogger:
    def __init__(self, db: Database):
        self.db = db

    def log_conversation(self, client_id: str, sender_id: str, request: str, response: str) -> None:
        """Persist one exchange. Blocking; run it off the event loop."""
        self.log_record(ConversationRecord(client_id, sender_id, request, response))

    def log_record(self, record: ConversationRecord) -> None:
        """
        Insert the conversation row, then bump the period's credit usage.

        Raises:
            ConversationLogError: the conversation row could not be written.
        """
        try:
            self.db.execute(
                _INSERT_CONVERSATION,
                (record.client_id, record.sender_id, record.request_text,
                 record.response_text, record.created_at),
            )
        except mysql.connector.Error as e:
            raise ConversationLogError(f"failed to log conversation for client {record.client_id}: {e}") from e

        # Credit accounting is best effort: the conversation is already stored.
        try:
            self.db.execute(_INCREMENT_CREDITS, (record.client_id,))
        except mysql.connector.Error as e:
            logger.warning(f"[CONV_LOG] Credit update failed for client {record.client_id}: {e}")

    def get_recent_conversations(self, client_id: str, limit: int = 50) -> List[Dict]:
        """
        Retrieve the latest conversations for a client, newest first.

        Args:
            client_id: Tenant id
            limit: Maximum number of rows

        Returns:
            List of dicts with keys: customer_phone, message_text, ai_response, created_at
        """
        return self.db.fetch_all(_RECENT_CONVERSATIONS, (client_id, limit))
