"""
Venue Context Trackers

장소별 잔고/가방 변화 분류기.
"""

from engine.trackers.ambient import LootTracker, QuestTracker
from engine.trackers.auction import AuctionTracker, BlackMarketTracker
from engine.trackers.bank import BankTracker, GuildBankTracker, WarbandBankTracker
from engine.trackers.base import (
    BalanceObservation,
    PendingAction,
    TrackerContext,
    VenueTracker,
)
from engine.trackers.mail import MailTracker
from engine.trackers.registry import TRACKER_CLASSES, build_trackers
from engine.trackers.repair import RepairTracker
from engine.trackers.services import BarberTracker, FlightTracker, TransmogTracker
from engine.trackers.trade import TradeTracker
from engine.trackers.vendor import VendorTracker

__all__ = [
    "AuctionTracker",
    "BalanceObservation",
    "BankTracker",
    "BarberTracker",
    "BlackMarketTracker",
    "FlightTracker",
    "GuildBankTracker",
    "LootTracker",
    "MailTracker",
    "PendingAction",
    "QuestTracker",
    "RepairTracker",
    "TRACKER_CLASSES",
    "TrackerContext",
    "TradeTracker",
    "TransmogTracker",
    "VendorTracker",
    "VenueTracker",
    "WarbandBankTracker",
    "build_trackers",
]
