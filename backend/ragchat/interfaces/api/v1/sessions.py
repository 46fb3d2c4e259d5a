"""Chat session API endpoints."""

from typing import List

from fastapi import APIRouter, Depends, status

from ....modules.chat.schemas import AnswerResponse
from ....modules.chat.services import ChatService
from ....modules.message.schemas import MessageCreate, MessageRead
from ....modules.message.services import MessageService
from ..dependencies import DbSession, get_chat_service, get_message_service

router = APIRouter(prefix="/sessions", tags=["Sessions"])


@router.get(
    "/{session_id}/messages",
    summary="Get Session History",
    description="Returns every message of a session in the order it was written.",
    responses={
        200: {"description": "Session history, possibly empty"},
    },
)
async def get_messages(
    session_id: str,
    db: DbSession,
    message_service: MessageService = Depends(get_message_service),
) -> List[MessageRead]:
    """Get the messages of a session."""
    return await message_service.get_messages(session_id, db)


@router.post(
    "/{session_id}/messages",
    status_code=status.HTTP_201_CREATED,
    summary="Add User Message",
    description="Appends a user message to a session. The session is created by its first message.",
    responses={
        201: {"description": "Message stored"},
        422: {"description": "Invalid message"},
    },
)
async def add_message(
    session_id: str,
    message: MessageCreate,
    db: DbSession,
    message_service: MessageService = Depends(get_message_service),
) -> MessageRead:
    """Add a user message to a session."""
    return await message_service.add_user_message(session_id, message.text, db)


@router.post(
    "/{session_id}/answer",
    summary="Answer Latest Message",
    description="""Answer the last message of a session.

    Retrieves the most relevant chunks for the last message, then streams a
    reply from the chat model into a new bot message. The message is
    updated while the reply streams in, so clients polling the session
    history see the answer grow.

    On failure the bot message is set to a fallback text and the error is
    returned.
    """,
    responses={
        200: {"description": "The stored bot message"},
        404: {"description": "Session has no messages"},
        502: {"description": "A MiniMax API failed"},
    },
)
async def answer(
    session_id: str,
    db: DbSession,
    chat_service: ChatService = Depends(get_chat_service),
) -> AnswerResponse:
    """Generate the bot's answer for a session."""
    return await chat_service.answer(session_id, db)
