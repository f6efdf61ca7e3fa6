"""Auto-refresh scheduling."""

from weathercards.scheduler.refresh import RefreshScheduler

__all__ = ["RefreshScheduler"]
