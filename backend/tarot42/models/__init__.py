# Import every model so relationships resolve and Base.metadata is complete.
from tarot42.models.account import Account
from tarot42.models.auth_event import AuthEvent
from tarot42.models.drawn_card import DrawnCard
from tarot42.models.session import UserSession
from tarot42.models.user import User
from tarot42.models.user_goal import UserGoal
from tarot42.models.verification import Verification

__all__ = [
    "Account",
    "AuthEvent",
    "DrawnCard",
    "User",
    "UserGoal",
    "UserSession",
    "Verification",
]
