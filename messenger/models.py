"""Imports every model so that Base.metadata knows all tables."""
from messenger.api.conversations.models import Conversation
from messenger.api.friends.models import Friendship
from messenger.api.groups.models import Group, GroupMember, GroupMessage
from messenger.api.messages.models import Message
from messenger.api.mutes.models import Mute
from messenger.api.users.models import User

__all__ = [
    "Conversation",
    "Friendship",
    "Group",
    "GroupMember",
    "GroupMessage",
    "Message",
    "Mute",
    "User",
]
