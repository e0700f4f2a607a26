from .auth import AnonymousAuthProvider, AuthProvider, CallableAuthProvider, StaticAuthProvider
from .chat_session import ChatMessage, ChatSession, SessionSnapshot

__all__ = [
    "AnonymousAuthProvider",
    "AuthProvider",
    "CallableAuthProvider",
    "ChatMessage",
    "ChatSession",
    "SessionSnapshot",
    "StaticAuthProvider",
]
