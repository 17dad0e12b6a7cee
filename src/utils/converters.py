"""Conversions between SQLAlchemy models and API schemas."""

from models.chat_message import ChatMessageModel
from models.project import ProjectModel
from models.user import UserModel
from schemas.chat import ChatMessage, ReplySnapshot
from schemas.project import Project
from schemas.user import User


def user_to_model(user: User) -> UserModel:
    return UserModel(**user.model_dump())


def model_to_user(model: UserModel) -> User:
    return User(
        user_id=model.user_id,
        name=model.name,
        email=model.email,
        password_hash=model.password_hash,
        role=model.role,
        provider=model.provider,
        github_id=model.github_id,
        avatar=model.avatar,
        token_id=model.token_id,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def model_to_project(model: ProjectModel) -> Project:
    return Project(
        id=model.project_id,
        title=model.title,
        description=model.description,
        techStack=model.tech_stack,
        week=model.week,
        status=model.status,
        githubRepo=model.github_repo,
        url=model.url,
        userId=model.user_id,
        userName=model.user_name,
        isHidden=bool(model.is_hidden),
        createdAt=model.created_at,
        updatedAt=model.updated_at,
    )


def model_to_message(model: ChatMessageModel) -> ChatMessage:
    reply = None
    if model.reply_to:
        reply = ReplySnapshot(
            senderId=model.reply_to.get("sender_id", ""),
            senderName=model.reply_to.get("sender_name", ""),
            content=model.reply_to.get("content", ""),
        )
    return ChatMessage(
        id=model.message_id,
        senderId=model.sender_id,
        senderName=model.sender_name,
        content=model.content,
        fileUrl=model.file_url,
        fileName=model.file_name,
        fileType=model.file_type,
        fileSize=model.file_size,
        isAdmin=bool(model.is_admin),
        kind=model.kind,
        recipientId=model.recipient_id,
        isBroadcast=bool(model.is_broadcast),
        replyTo=reply,
        timestamp=model.timestamp,
    )
