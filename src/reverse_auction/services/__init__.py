"""Auction services: session state machine, registry, scheduler and routing."""

from .auction import AuctionSession, BidResult, JoinResult
from .commands import CommandRouter
from .registry import SessionRegistry
from .scheduler import AuctionScheduler

__all__ = [
    "AuctionScheduler",
    "AuctionSession",
    "BidResult",
    "CommandRouter",
    "JoinResult",
    "SessionRegistry",
]
