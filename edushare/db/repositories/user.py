"""User repository for database operations."""

from typing import Dict, Optional, List

from .base import BaseRepository
from ..database_models.user import UserDO


def _row_to_user(row) -> UserDO:
    return UserDO(email=row[0], full_name=row[1], verified=bool(row[2]), created_at=row[3])


class UserRepository(BaseRepository):
    """Repository for the user directory used to resolve display names."""

    def upsert(self, user: UserDO) -> bool:
        """
        Create a user or update the name and verified flag of an existing one.

        Args:
            user: UserDO instance

        Returns:
            True if successful, False otherwise
        """
        try:
            existing = self._fetchone("SELECT email FROM users WHERE email = ?", [user.email])
            if existing:
                self.conn.execute(
                    "UPDATE users SET full_name = ?, verified = ? WHERE email = ?",
                    [user.full_name, user.verified, user.email]
                )
            else:
                self.conn.execute(
                    "INSERT INTO users (email, full_name, verified, created_at) VALUES (?, ?, ?, ?)",
                    [user.email, user.full_name, user.verified, user.created_at]
                )
            self.conn.commit()
            self.logger.info(f"Saved user record: {user.email}")
            return True
        except Exception as e:
            self.logger.error(f"Failed to save user {user.email}: {e}")
            return False

    def get(self, email: str) -> Optional[UserDO]:
        """
        Get user by email.

        Args:
            email: User email

        Returns:
            UserDO instance or None
        """
        try:
            row = self._fetchone(
                "SELECT email, full_name, verified, created_at FROM users WHERE email = ?",
                [email]
            )
            return _row_to_user(row) if row else None
        except Exception as e:
            self.logger.error(f"Failed to get user {email}: {e}")
            return None

    def list_all(self) -> List[UserDO]:
        """
        List all users.

        Returns:
            List of UserDO instances
        """
        try:
            rows = self._fetchall(
                "SELECT email, full_name, verified, created_at FROM users ORDER BY email ASC"
            )
            return [_row_to_user(row) for row in rows]
        except Exception as e:
            self.logger.error(f"Failed to list users: {e}")
            return []

    def display_names(self) -> Dict[str, str]:
        """Map of email to full name, for users that have one."""
        return {user.email: user.full_name for user in self.list_all() if user.full_name}
