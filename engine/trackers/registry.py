"""
Tracker 레지스트리

설정(tracking)에서 활성화된 장소의 Tracker만 생성.
등록 순서가 동률 분류 시 우선순위.
"""

import logging

from core.config.loader import TrackingConfig
from core.types import Venue
from engine.trackers.ambient import LootTracker, QuestTracker
from engine.trackers.auction import AuctionTracker, BlackMarketTracker
from engine.trackers.bank import BankTracker, GuildBankTracker, WarbandBankTracker
from engine.trackers.base import TrackerContext, VenueTracker
from engine.trackers.mail import MailTracker
from engine.trackers.repair import RepairTracker
from engine.trackers.services import BarberTracker, FlightTracker, TransmogTracker
from engine.trackers.trade import TradeTracker
from engine.trackers.vendor import VendorTracker

logger = logging.getLogger(__name__)

# (활성화 토글 장소, Tracker 클래스)
TRACKER_CLASSES: list[tuple[Venue, type[VenueTracker]]] = [
    (Venue.VENDOR, VendorTracker),
    (Venue.REPAIR, RepairTracker),
    (Venue.AUCTION_HOUSE, AuctionTracker),
    (Venue.BLACK_MARKET, BlackMarketTracker),
    (Venue.MAILBOX, MailTracker),
    (Venue.TRADE, TradeTracker),
    (Venue.BANK, BankTracker),
    (Venue.GUILD_BANK, GuildBankTracker),
    (Venue.WARBAND_BANK, WarbandBankTracker),
    (Venue.BARBER, BarberTracker),
    (Venue.TRANSMOG, TransmogTracker),
    (Venue.FLIGHT_MASTER, FlightTracker),
    (Venue.QUEST, QuestTracker),
    (Venue.LOOT, LootTracker),
]


def build_trackers(
    ctx: TrackerContext,
    tracking: TrackingConfig | None = None,
) -> list[VenueTracker]:
    """활성화된 Tracker 생성

    Args:
        ctx: Tracker 공유 의존성
        tracking: 장소별 활성화 설정 (None이면 전부 활성)

    Returns:
        등록 순서대로 정렬된 Tracker 목록
    """
    tracking = tracking or TrackingConfig()
    trackers: list[VenueTracker] = []
    disabled: list[str] = []

    for venue, tracker_cls in TRACKER_CLASSES:
        if tracking.is_enabled(venue):
            trackers.append(tracker_cls(ctx))
        else:
            disabled.append(tracker_cls.name)

    if disabled:
        logger.info(f"비활성화된 Tracker: {', '.join(disabled)}")
    return trackers
