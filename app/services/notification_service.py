"""
Notification service.

Writes in-app notifications. Called after the financial commit; a
failure here is logged and never propagated.
"""

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.notification import Notification
from app.repositories.notification_repository import (
    NotificationRepository,
)


class NotificationService:
    """Notification service."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize notification service."""
        self.session = session
        self.notification_repo = NotificationRepository(session)

    async def notify(
        self,
        user_id: int,
        type: str,
        title: str,
        message: str,
    ) -> bool:
        """
        Create in-app notification in its own short transaction.

        Args:
            user_id: Recipient user ID
            type: Notification type
            title: Short title
            message: Message text

        Returns:
            True if stored, False on any failure
        """
        try:
            await self.notification_repo.create(
                user_id=user_id,
                type=str(type),
                title=title,
                message=message,
            )
            await self.session.commit()
        except Exception as e:
            await self.session.rollback()
            logger.warning(
                f"Failed to create notification for user {user_id}: {e}",
                extra={"user_id": user_id, "type": str(type)},
            )
            return False
        return True

    async def mark_read(self, user_id: int) -> int:
        """
        Mark all user notifications as read.

        Returns:
            Number of notifications updated
        """
        updated = await self.notification_repo.update_where(
            Notification.user_id == user_id,
            Notification.is_read.is_(False),
            is_read=True,
        )
        await self.session.commit()
        return updated
