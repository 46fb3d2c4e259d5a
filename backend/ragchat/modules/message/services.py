"""Message persistence for chat sessions."""

from typing import List

from sqlalchemy import select
from sqlalchemy.exc import NoResultFound
from sqlalchemy.ext.asyncio import AsyncSession

from ..common.exceptions import ResourceNotFoundError
from .crud import message_crud
from .models import Message
from .schemas import MessageRead


class MessageService:
    """Service for reading and writing the messages of a session.

    A session is just the ``session_id`` its messages share; its history is
    the messages in insertion order.

    Bot messages are written by a single writer: the answer call that
    created the message is the only caller of :meth:`update_bot_message`
    for that id while it runs. Nothing enforces this; concurrent writers to
    the same message would overwrite each other.
    """

    async def get_messages(
        self,
        session_id: str,
        db: AsyncSession,
    ) -> List[MessageRead]:
        """Get the full history of a session.

        Args:
            session_id: Session to read
            db: Database session

        Returns:
            Messages in insertion order
        """
        stmt = select(Message).where(Message.session_id == session_id).order_by(Message.id)
        result = await db.execute(stmt)
        return [MessageRead.model_validate(message) for message in result.scalars().all()]

    async def add_user_message(
        self,
        session_id: str,
        text: str,
        db: AsyncSession,
    ) -> MessageRead:
        """Append a user message to a session."""
        message = await self._create(Message(session_id=session_id, is_viewer=True, text=text), db)
        return MessageRead.model_validate(message)

    async def add_bot_message(
        self,
        session_id: str,
        db: AsyncSession,
    ) -> int:
        """Create the empty bot message an answer will stream into.

        Returns:
            ID of the new message
        """
        message = await self._create(Message(session_id=session_id, is_viewer=False, text=""), db)
        return message.id

    async def update_bot_message(
        self,
        message_id: int,
        text: str,
        db: AsyncSession,
    ) -> None:
        """Overwrite the text of a bot message and commit.

        Raises:
            ResourceNotFoundError: If the message doesn't exist
        """
        try:
            await message_crud.update(db=db, object={"text": text}, id=message_id)
        except NoResultFound as e:
            raise ResourceNotFoundError(f"Message {message_id} not found") from e

    async def _create(self, message: Message, db: AsyncSession) -> Message:
        db.add(message)
        await db.flush()
        await db.commit()
        return message
