"""Food log access service."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from nutrition_dashboard.domain.logs import FoodLogEntry, FoodLogRecord


class FoodLogRepository(Protocol):
    """Persistence interface for food logs."""

    def list_logs(self, user_id: UUID) -> list[FoodLogRecord]:
        """Return every food log for a user."""

    def get_log(self, user_id: UUID, log_id: str) -> FoodLogRecord | None:
        """Return a food log by id, if present."""

    def create_log(
        self, user_id: UUID, timestamp_millis: int, entry: FoodLogEntry
    ) -> FoodLogRecord:
        """Create a food log and return it."""

    def update_log(self, user_id: UUID, log_id: str, entry: FoodLogEntry) -> None:
        """Overwrite the values of an existing food log."""

    def delete_log(self, user_id: UUID, log_id: str) -> None:
        """Delete a food log."""


class LogNotFoundError(LookupError):
    """Raised when a food log does not exist for the user."""


@dataclass
class FoodLogService:
    """Service for reading and removing food logs."""

    repository: FoodLogRepository

    def list_logs(self, user_id: UUID) -> list[FoodLogRecord]:
        """Return all logs for a user, newest first."""
        logs = self.repository.list_logs(user_id)
        return sorted(logs, key=lambda log: log.timestamp_millis or 0, reverse=True)

    def get_log(self, user_id: UUID, log_id: str) -> FoodLogRecord:
        """Return a log or raise LogNotFoundError."""
        log = self.repository.get_log(user_id, log_id)
        if log is None:
            raise LogNotFoundError(log_id)
        return log

    def delete_log(self, user_id: UUID, log_id: str) -> None:
        """Delete a log after checking it exists."""
        self.get_log(user_id, log_id)
        self.repository.delete_log(user_id, log_id)
