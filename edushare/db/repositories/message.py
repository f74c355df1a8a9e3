"""Message repository for database operations."""

from typing import Optional, List

import duckdb

from .base import BaseRepository
from ..database_models.message import MessageDO
from ...errors import TransientFetchError


SORT_ORDERS = {
    None: "id ASC",
    "created_at": "created_at ASC, id ASC",
    "-created_at": "created_at DESC, id DESC",
}

_COLUMNS = "id, conversation_id, sender_email, receiver_email, body, item_id, is_read, is_flagged, created_at"


def _row_to_message(row) -> MessageDO:
    return MessageDO(
        id=row[0],
        conversation_id=row[1],
        sender_email=row[2],
        receiver_email=row[3],
        body=row[4],
        item_id=row[5],
        read=bool(row[6]),
        flagged=bool(row[7]),
        created_at=row[8],
    )


class MessageRepository(BaseRepository):
    """Repository for Message CRUD operations."""

    def add(self, message: MessageDO) -> Optional[MessageDO]:
        """
        Append a new message.

        Args:
            message: MessageDO instance (id is ignored and assigned here)

        Returns:
            The stored MessageDO with its id, None on failure
        """
        try:
            result = self.conn.execute(f"""
                INSERT INTO messages ({_COLUMNS})
                VALUES (nextval('messages_id_seq'), ?, ?, ?, ?, ?, ?, ?, ?)
                RETURNING {_COLUMNS}
            """, [
                message.conversation_id,
                message.sender_email,
                message.receiver_email,
                message.body,
                message.item_id,
                message.read,
                message.flagged,
                message.created_at,
            ]).fetchone()

            if result is None:
                return None
            self.conn.commit()
            stored = _row_to_message(result)
            self.logger.debug(f"Added message {stored.id} to conversation {stored.conversation_id}")
            return stored
        except Exception as e:
            self.logger.error(f"Failed to add message: {e}")
            return None

    def get(self, message_id: int) -> Optional[MessageDO]:
        """
        Get message by ID.

        Args:
            message_id: Message ID

        Returns:
            MessageDO instance or None
        """
        try:
            row = self._fetchone(f"SELECT {_COLUMNS} FROM messages WHERE id = ?", [message_id])
            return _row_to_message(row) if row else None
        except Exception as e:
            self.logger.error(f"Failed to get message {message_id}: {e}")
            return None

    def list_all(self, sort: Optional[str] = None) -> List[MessageDO]:
        """
        List every message.

        Args:
            sort: ``"-created_at"`` (newest first), ``"created_at"`` or None

        Returns:
            List of MessageDO instances

        Raises:
            ValueError: unknown sort hint
            TransientFetchError: the query failed
        """
        if sort not in SORT_ORDERS:
            raise ValueError(f"Unsupported sort: {sort}")
        try:
            rows = self._fetchall(f"SELECT {_COLUMNS} FROM messages ORDER BY {SORT_ORDERS[sort]}")
        except duckdb.Error as e:
            self.logger.error(f"Failed to list messages: {e}")
            raise TransientFetchError(f"Failed to list messages: {e}") from e
        return [_row_to_message(row) for row in rows]

    def list_for_user(self, email: str) -> List[MessageDO]:
        """
        List messages sent or received by a user, oldest first.

        Args:
            email: User email

        Returns:
            List of MessageDO instances

        Raises:
            TransientFetchError: the query failed
        """
        try:
            rows = self._fetchall(f"""
                SELECT {_COLUMNS}
                FROM messages
                WHERE sender_email = ? OR receiver_email = ?
                ORDER BY created_at ASC, id ASC
            """, [email, email])
        except duckdb.Error as e:
            self.logger.error(f"Failed to list messages for {email}: {e}")
            raise TransientFetchError(f"Failed to list messages for {email}: {e}") from e
        return [_row_to_message(row) for row in rows]

    def update(
        self,
        message_id: int,
        read: Optional[bool] = None,
        flagged: Optional[bool] = None
    ) -> Optional[MessageDO]:
        """
        Partially update the mutable flags of a message.

        Setting a flag to its current value is a no-op, so repeated calls
        converge on the same state.

        Args:
            message_id: Message ID
            read: New read state, or None to leave unchanged
            flagged: New flagged state, or None to leave unchanged

        Returns:
            The message after the update, None if it does not exist or the
            update failed
        """
        try:
            set_clauses = []
            params = []

            if read is not None:
                set_clauses.append("is_read = ?")
                params.append(bool(read))

            if flagged is not None:
                set_clauses.append("is_flagged = ?")
                params.append(bool(flagged))

            if set_clauses:
                params.append(message_id)
                self.conn.execute(
                    f"UPDATE messages SET {', '.join(set_clauses)} WHERE id = ?",
                    params
                )
                self.conn.commit()

            row = self._fetchone(f"SELECT {_COLUMNS} FROM messages WHERE id = ?", [message_id])
            return _row_to_message(row) if row else None
        except Exception as e:
            self.logger.error(f"Failed to update message {message_id}: {e}")
            return None

    def count_unread(self, email: str) -> int:
        """
        Count unread messages addressed to a user.

        Args:
            email: Receiver email

        Returns:
            Number of unread messages (0 on failure)
        """
        try:
            row = self._fetchone(
                "SELECT COUNT(*) FROM messages WHERE receiver_email = ? AND NOT is_read",
                [email]
            )
            return row[0] if row else 0
        except Exception as e:
            self.logger.error(f"Failed to count unread messages: {e}")
            return 0
