"""
Async client for the BookBridge chat feed.
"""

from .chat_feed import ChatFeedClient, ChatFeedError, ConversationView

__all__ = ["ChatFeedClient", "ChatFeedError", "ConversationView"]
