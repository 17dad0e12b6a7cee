"""Chat message schema definitions."""

from typing import List, Literal, Optional

from pydantic import BaseModel

MessageKind = Literal["broadcast", "direct", "peer"]


class ReplySnapshot(BaseModel):
    """Copy of the replied-to message taken when the reply was sent."""

    senderId: str
    senderName: str
    content: str


class ChatMessage(BaseModel):
    id: str
    senderId: str
    senderName: str
    content: str
    fileUrl: Optional[str] = None
    fileName: Optional[str] = None
    fileType: Optional[str] = None
    fileSize: Optional[int] = None
    isAdmin: bool
    kind: MessageKind
    recipientId: Optional[str] = None
    isBroadcast: bool = False
    replyTo: Optional[ReplySnapshot] = None
    timestamp: str


class ChatListResponse(BaseModel):
    messages: List[ChatMessage]
