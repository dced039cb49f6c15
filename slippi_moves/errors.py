"""Exceptions for slippi-moves with structured error information."""

from enum import Enum


class MatchErrorKind(str, Enum):
    """Why a match was skipped."""

    UNKNOWN_PORT = "unknown_port"
    OUT_OF_ORDER_FRAMES = "out_of_order_frames"
    DECODE_ERROR = "decode_error"


class SlippiMovesError(Exception):
    """Base exception for all slippi-moves errors."""

    kind: MatchErrorKind | None = None

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class MatchError(SlippiMovesError):
    """A match violates a consistency invariant and is rejected wholesale."""


class UnknownPortError(MatchError):
    """A frame record or event references a port absent from the roster."""

    kind = MatchErrorKind.UNKNOWN_PORT

    def __init__(self, port: int, roster_ports: list[int], match_id: str = ""):
        message = f"Port {port} is not in the roster {sorted(roster_ports)}"
        if match_id:
            message = f"{message} (match {match_id})"
        details = {
            "port": port,
            "roster_ports": sorted(roster_ports),
            "match_id": match_id,
        }
        super().__init__(message, details)
        self.port = port


class OutOfOrderFramesError(MatchError):
    """Frame indices are not strictly increasing for a player."""

    kind = MatchErrorKind.OUT_OF_ORDER_FRAMES

    def __init__(self, port: int, previous_frame: int, frame: int, match_id: str = ""):
        message = (
            f"Frame {frame} for port {port} does not follow frame {previous_frame}"
        )
        if match_id:
            message = f"{message} (match {match_id})"
        details = {
            "port": port,
            "previous_frame": previous_frame,
            "frame": frame,
            "match_id": match_id,
        }
        super().__init__(message, details)
        self.port = port


class ReplayDecodeError(SlippiMovesError):
    """The decoder could not produce frame records for a replay."""

    kind = MatchErrorKind.DECODE_ERROR

    def __init__(self, path: str, reason: str | None = None):
        message = f"Failed to decode replay: {path}"
        if reason:
            message = f"{message} ({reason})"
        details = {
            "path": path,
            "reason": reason,
            "suggested_action": "Check if the file is a complete .slp replay",
        }
        super().__init__(message, details)
