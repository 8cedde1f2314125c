"""Chat routes forwarding to the backend chatbot."""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from thesisbot.api.state import state
from thesisbot.exceptions import CollectionNotFoundError, ThesisBotError
from thesisbot.models.collection import Message

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/chat", tags=["chat"])


class ChatPayload(BaseModel):
    """Request body for a chat turn."""
    prompt: str = ""
    collectionId: Optional[str] = None
    paperId: Optional[str] = None


def _message(content: str, is_user: bool, paper_id: Optional[str]) -> Message:
    return Message(
        id=uuid.uuid4().hex,
        content=content,
        timestamp=datetime.now(timezone.utc).isoformat(),
        is_user=is_user,
        paper_id=paper_id or "",
    )


@router.post("")
async def send_message(body: ChatPayload):
    """Send a prompt to the chatbot.

    When a collection is given, the user turn and the bot reply are
    stored against it (and the paper, if any).
    """
    prompt = body.prompt.strip()
    if not prompt:
        return JSONResponse({"error": "Message is empty"}, status_code=400)

    if body.collectionId and state.repo.get_collection(body.collectionId) is None:
        raise CollectionNotFoundError(body.collectionId)

    user_message = _message(prompt, True, body.paperId)
    try:
        reply = await state.analysis.chat(prompt)
    except ThesisBotError as e:
        logger.error("Error sending message to chatbot: %s", e.message)
        return JSONResponse({"error": "Failed to process message"}, status_code=500)
    bot_message = _message(reply, False, body.paperId)

    if body.collectionId:
        state.repo.add_messages(body.collectionId, [user_message, bot_message])

    return JSONResponse({"message": bot_message.to_dict(), "userMessage": user_message.to_dict()})


@router.post("/clear")
async def clear_history():
    """Reset the backend's conversation history."""
    try:
        data = await state.analysis.clear_history()
    except ThesisBotError as e:
        logger.error("Error clearing chat history: %s", e.message)
        return JSONResponse({"error": "Failed to clear history"}, status_code=500)
    return JSONResponse(data)
