"""
Session registry.

Owns the mapping from session id to AuctionSession. Sessions are created
lazily on first join and removed only by the retention sweep.
"""

import threading

from ..config import Settings
from .auction import AuctionSession, Clock, utc_now


class SessionRegistry:
    """
    In-memory registry of auction sessions.

    Attributes:
        _sessions: Dictionary mapping session_id to AuctionSession
        _settings: Defaults applied to newly created sessions
    """

    def __init__(self, settings: Settings, clock: Clock = utc_now) -> None:
        """
        Initialize the registry.

        Args:
            settings: Application settings supplying auction defaults
            clock: Time source handed to every session
        """
        self._sessions: dict[str, AuctionSession] = {}
        self._settings = settings
        self._clock = clock
        self._lock = threading.Lock()

    def _new_session(self, session_id: str) -> AuctionSession:
        return AuctionSession(
            session_id,
            start_countdown=self._settings.start_countdown,
            duration=self._settings.auction_duration,
            starting_price=self._settings.starting_price,
            leaderboard_size=self._settings.leaderboard_size,
            bid_cooldown=self._settings.bid_cooldown,
            clock=self._clock,
        )

    def get_or_create(self, session_id: str) -> AuctionSession:
        """
        Return the session for an id, creating it on first use.

        Args:
            session_id: Session identifier

        Returns:
            Existing or newly created AuctionSession

        Note:
            Lookup and insert happen under one lock, so concurrent callers
            for the same id always receive the same instance.
        """
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                session = self._new_session(session_id)
                self._sessions[session_id] = session
            return session

    def get(self, session_id: str) -> AuctionSession | None:
        """Look up a session without creating it."""
        return self._sessions.get(session_id)

    def remove(self, session_id: str) -> None:
        """Remove a session. Missing ids are ignored."""
        with self._lock:
            self._sessions.pop(session_id, None)

    def all(self) -> list[AuctionSession]:
        """Snapshot of all sessions, safe to iterate while the map changes."""
        with self._lock:
            return list(self._sessions.values())

    @property
    def clock(self) -> Clock:
        """Time source shared with every session."""
        return self._clock

    def session_count(self) -> int:
        return len(self._sessions)

    def active_session_count(self) -> int:
        return sum(1 for session in self.all() if session.is_active)
