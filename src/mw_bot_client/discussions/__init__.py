from .session import DiscussionSession

__all__ = ["DiscussionSession"]
