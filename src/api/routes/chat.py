"""Chat routes.

Messages are polled by the client; there is no push channel.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status

from api.routes.auth import get_current_user
from core.dependencies import ChatManagerDep
from core.exceptions import ForbiddenError, NotFoundError, TrackerError, ValidationError
from schemas.chat import ChatListResponse, ChatMessage
from schemas.user import User
from utils import chat_manager as chat_rules
from utils.file_storage import FileTooLargeError, delete_upload, save_upload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/chat", tags=["Chat"])


@router.post(
    "",
    response_model=ChatMessage,
    status_code=status.HTTP_201_CREATED,
    summary="Send a chat message",
)
def send_message(
    chat_manager: ChatManagerDep,
    content: str = Form(default=""),
    recipient_id: Optional[str] = Form(default=None, alias="recipientId"),
    reply_to_id: Optional[str] = Form(default=None, alias="replyToId"),
    file: Optional[UploadFile] = File(default=None, description="Optional attachment"),
    current_user: User = Depends(get_current_user),
) -> ChatMessage:
    """Send a message, optionally with one attached file.

    Admin messages go to ``recipientId`` when given, otherwise to everyone.
    Messages from regular users are only seen by them and the admins.

    Raises:
        HTTPException: 400 for an empty message, 404 for an unknown reply
            target or recipient, 413 for an oversized file.
    """
    attachment = None
    if file is not None and file.filename:
        try:
            attachment = save_upload(file.file, file.filename, file.content_type)
        except FileTooLargeError as e:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=str(e),
            )

    try:
        return chat_manager.post_message(
            current_user,
            content,
            recipient_id=recipient_id,
            reply_to_id=reply_to_id,
            attachment=attachment,
        )
    except TrackerError as e:
        if attachment is not None:
            delete_upload(attachment)
        if isinstance(e, NotFoundError):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
        if isinstance(e, ValidationError):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
        raise


@router.get("", response_model=ChatListResponse, summary="List chat messages")
def list_messages(
    chat_manager: ChatManagerDep,
    view: str = Query(default="all", description="all, inbox, chat or broadcast"),
    with_user: Optional[str] = Query(default=None, description="Admin: one user's thread"),
    current_user: User = Depends(get_current_user),
) -> ChatListResponse:
    """List the messages visible to the caller, oldest first."""
    messages = chat_manager.list_for(current_user)
    try:
        messages = chat_rules.partition(messages, current_user, view, with_user)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return ChatListResponse(messages=messages)


@router.delete("/{message_id}", summary="Delete a chat message")
def delete_message(
    message_id: str,
    chat_manager: ChatManagerDep,
    current_user: User = Depends(get_current_user),
) -> dict:
    """Delete a message. Only its sender or an admin may do so."""
    try:
        chat_manager.delete_message(message_id, current_user)
    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Message not found",
        )
    except ForbiddenError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    return {"message": "Message deleted successfully"}
