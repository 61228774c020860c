"""
Custom exceptions for the reverse auction server.

Bid failures are recoverable by the caller and are reported back to the
originating connection only; none of them changes session state.
"""


class AuctionError(Exception):
    """Base exception for all reverse auction errors."""

    def __init__(self, message: str, code: str = "UNKNOWN_ERROR") -> None:
        """
        Initialize exception with message and error code.

        Args:
            message: Human-readable error message
            code: Machine-readable error code (SNAKE_CASE)
        """
        self.message = message
        self.code = code
        super().__init__(message)


class UnknownSessionError(AuctionError):
    """Raised when an operation targets a session id that was never joined."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"Session '{session_id}' not found", code="UNKNOWN_SESSION")


class BidRejectedError(AuctionError):
    """Base class for bids refused by a session."""


class SessionNotActiveError(BidRejectedError):
    """Raised when a bid arrives outside the active bidding window."""

    def __init__(self, message: str = "Auction is not accepting bids") -> None:
        super().__init__(message, code="SESSION_NOT_ACTIVE")


class InvalidBidError(BidRejectedError):
    """Raised when the bid amount is missing or malformed."""

    def __init__(self, message: str = "Bid amount must be a finite number") -> None:
        super().__init__(message, code="INVALID_BID")


class BidTooHighError(BidRejectedError):
    """Raised when a bid does not undercut the current best bid."""

    def __init__(self, amount: float, current_bid: float) -> None:
        self.amount = amount
        self.current_bid = current_bid
        message = f"Bid of {amount:g} must be lower than current bid of {current_bid:g}"
        super().__init__(message, code="BID_TOO_HIGH")


class NotParticipantError(BidRejectedError):
    """Raised when a connection bids on a session it has not joined."""

    def __init__(self, message: str = "Join the auction before placing a bid") -> None:
        super().__init__(message, code="NOT_A_PARTICIPANT")
