"""Chat message storage and visibility rules.

Every message is one of three kinds, fixed when it is stored:

* ``broadcast``: sent by an admin to everybody.
* ``direct``: sent by an admin to a single user (``recipient_id``).
* ``peer``: sent by a regular user; only the sender and admins see it.

The kind and the admin flag come from the sender's stored role, never from
the request.
"""

import logging
import secrets
from datetime import datetime
from typing import List, Optional

import pytz
from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from config import BROADCAST_RECIPIENT
from core.exceptions import ForbiddenError, NotFoundError, ValidationError
from models.chat_message import ChatMessageModel
from models.user import UserModel
from schemas.chat import ChatMessage
from schemas.user import User
from utils.converters import model_to_message
from utils.file_storage import StoredFile

logger = logging.getLogger(__name__)

CHAT_VIEWS = ("all", "inbox", "chat", "broadcast")


class MessageNotFoundError(NotFoundError):
    """Raised when a chat message does not exist or is not visible."""

    def __init__(self, message_id: str):
        super().__init__("Message", message_id)


def message_kind(sender: User, recipient_id: Optional[str]) -> str:
    """Decide a new message's kind from its sender and requested recipient."""
    if sender.role != "admin":
        return "peer"
    if recipient_id and recipient_id != BROADCAST_RECIPIENT:
        return "direct"
    return "broadcast"


def in_inbox(message: ChatMessage, viewer: User) -> bool:
    """Direct admin messages addressed to a regular user."""
    if viewer.role == "admin":
        return False
    return (
        message.isAdmin
        and not message.isBroadcast
        and message.recipientId == viewer.user_id
    )


def in_conversation(message: ChatMessage, user_id: str) -> bool:
    """Admin view of the thread with one user."""
    return message.senderId == user_id or (
        message.kind == "direct" and message.recipientId == user_id
    )


def partition(
    messages: List[ChatMessage],
    viewer: User,
    view: str = "all",
    with_user: Optional[str] = None,
) -> List[ChatMessage]:
    """Narrow an already visible message list to one tab of the chat UI.

    Args:
        messages: Messages visible to the viewer, oldest first.
        viewer: The requesting user.
        view: One of "all", "inbox", "chat" or "broadcast".
        with_user: For admins, restrict "chat" to one user's conversation.

    Raises:
        ValidationError: If the view name is unknown.
    """
    if view not in CHAT_VIEWS:
        raise ValidationError(f"Invalid view: {view}")
    if view == "inbox":
        return [m for m in messages if in_inbox(m, viewer)]
    if view == "broadcast":
        return [m for m in messages if m.isAdmin and m.isBroadcast]
    if view == "chat":
        if viewer.role == "admin":
            if with_user:
                return [m for m in messages if in_conversation(m, with_user)]
            return messages
        return [m for m in messages if not in_inbox(m, viewer)]
    return messages


class ChatManager:
    """Manages chat messages using SQLAlchemy."""

    def __init__(self, db: Session):
        self.db = db

    def _visible_query(self, viewer: User):
        query = self.db.query(ChatMessageModel)
        if viewer.role != "admin":
            query = query.filter(
                or_(
                    ChatMessageModel.sender_id == viewer.user_id,
                    and_(
                        ChatMessageModel.is_admin.is_(True),
                        or_(
                            ChatMessageModel.recipient_id.is_(None),
                            ChatMessageModel.recipient_id == viewer.user_id,
                        ),
                    ),
                )
            )
        return query

    def post_message(
        self,
        sender: User,
        content: str,
        recipient_id: Optional[str] = None,
        reply_to_id: Optional[str] = None,
        attachment: Optional[StoredFile] = None,
    ) -> ChatMessage:
        """Store a new message.

        Args:
            sender: The authenticated sender.
            content: Message text; may be empty only with an attachment.
            recipient_id: Target user for an admin direct message.
            reply_to_id: Message being replied to; it must be visible to the
                sender and is copied by value.
            attachment: Already stored upload, if any.

        Raises:
            ValidationError: If there is neither text nor attachment.
            MessageNotFoundError: If the reply target is not visible.
            NotFoundError: If a direct message names an unknown recipient.
        """
        content = (content or "").strip()
        if not content and attachment is None:
            raise ValidationError("Message content is required")

        reply_snapshot = None
        if reply_to_id:
            original = (
                self._visible_query(sender)
                .filter(ChatMessageModel.message_id == reply_to_id)
                .first()
            )
            if original is None:
                raise MessageNotFoundError(reply_to_id)
            reply_snapshot = {
                "sender_id": original.sender_id,
                "sender_name": original.sender_name,
                "content": original.content,
            }

        kind = message_kind(sender, recipient_id)
        if kind == "direct":
            recipient = (
                self.db.query(UserModel)
                .filter(UserModel.user_id == recipient_id)
                .first()
            )
            if recipient is None:
                raise NotFoundError("Recipient", recipient_id)

        model = ChatMessageModel(
            message_id=secrets.token_hex(12),
            sender_id=sender.user_id,
            sender_name=sender.name or sender.email.split("@")[0],
            content=content,
            is_admin=sender.role == "admin",
            kind=kind,
            recipient_id=recipient_id if kind == "direct" else None,
            is_broadcast=kind == "broadcast",
            reply_to=reply_snapshot,
            timestamp=datetime.now(pytz.utc).isoformat(),
        )
        if attachment is not None:
            model.file_url = attachment.url
            model.file_name = attachment.name
            model.file_type = attachment.content_type
            model.file_size = attachment.size

        self.db.add(model)
        self.db.commit()
        self.db.refresh(model)
        logger.info(
            "Stored %s message %s from %s", kind, model.message_id, sender.user_id
        )
        return model_to_message(model)

    def list_for(self, viewer: User) -> List[ChatMessage]:
        """Every message the viewer may see, oldest first."""
        models = (
            self._visible_query(viewer)
            .order_by(ChatMessageModel.timestamp, ChatMessageModel.message_id)
            .all()
        )
        return [model_to_message(m) for m in models]

    def delete_message(self, message_id: str, requester: User) -> None:
        """Delete a message as its sender or as an admin.

        Raises:
            MessageNotFoundError: If the message does not exist.
            ForbiddenError: If the requester is neither admin nor sender.
        """
        model = (
            self.db.query(ChatMessageModel)
            .filter(ChatMessageModel.message_id == message_id)
            .first()
        )
        if model is None:
            raise MessageNotFoundError(message_id)
        if requester.role != "admin" and model.sender_id != requester.user_id:
            raise ForbiddenError("Not authorized to delete this message")

        self.db.delete(model)
        self.db.commit()
        logger.info("Deleted message %s (by %s)", message_id, requester.user_id)
