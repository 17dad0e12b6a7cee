"""Chat message database model."""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, JSON, String, Text

from .base import Base


class ChatMessageModel(Base):
    __tablename__ = "chat_messages"

    message_id = Column(String, primary_key=True, index=True)
    sender_id = Column(String, ForeignKey("users.user_id"), index=True, nullable=False)
    sender_name = Column(String, nullable=False)
    content = Column(Text, nullable=False, default="")

    file_url = Column(String, nullable=True)
    file_name = Column(String, nullable=True)
    file_type = Column(String, nullable=True)
    file_size = Column(Integer, nullable=True)

    is_admin = Column(Boolean, nullable=False, default=False)
    kind = Column(String, nullable=False)  # 'broadcast', 'direct' or 'peer'
    recipient_id = Column(String, index=True, nullable=True)
    is_broadcast = Column(Boolean, nullable=False, default=False)
    reply_to = Column(JSON, nullable=True)  # {sender_id, sender_name, content}

    timestamp = Column(String, index=True, nullable=False)
