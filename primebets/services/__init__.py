"""Domain services over the key-value store."""

from primebets.services.history import BetHistory
from primebets.services.notifications import NotificationCenter
from primebets.services.payments import PaymentResult, SimulatedGateway
from primebets.services.profiles import ProfileStore
from primebets.services.subscriptions import SubscriptionLedger
from primebets.services.users import UserDirectory

__all__ = [
    "BetHistory",
    "NotificationCenter",
    "PaymentResult",
    "SimulatedGateway",
    "ProfileStore",
    "SubscriptionLedger",
    "UserDirectory",
]
