"""Shared error codes and user-facing messages."""

from __future__ import annotations

INVALID_TRANSITION = "INVALID_TRANSITION"
ASSET_MISSING = "ASSET_MISSING"
PLAYBACK_FAILED = "PLAYBACK_FAILED"
PERSISTENCE_FAILED = "PERSISTENCE_FAILED"

ERROR_MESSAGES = {
    INVALID_TRANSITION: "That action is not available right now.",
    ASSET_MISSING: "A meditation sound could not be found and was skipped.",
    PLAYBACK_FAILED: "A meditation sound failed to play and was skipped.",
    PERSISTENCE_FAILED: "Session finished but could not be saved to history.",
}
