from .base import Base
from .user import UserModel
from .project import ProjectModel
from .chat_message import ChatMessageModel

__all__ = ["Base", "UserModel", "ProjectModel", "ChatMessageModel"]
