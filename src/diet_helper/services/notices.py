"""Non-blocking user-facing notices."""

from dataclasses import dataclass, field
from datetime import UTC, datetime

SAVE_FAILED = "Failed to save data. Please try again."
LOAD_FAILED = "Failed to load data"


@dataclass(frozen=True)
class Notice:
    """A message waiting to be shown to the user."""

    level: str
    text: str
    created_at: datetime


@dataclass
class NoticeBoard:
    """Collects notices until the UI drains them."""

    notices: list[Notice] = field(default_factory=list)
    limit: int = 50

    def info(self, text: str) -> None:
        """Post an informational notice."""
        self._post("info", text)

    def error(self, text: str) -> None:
        """Post an error notice."""
        self._post("error", text)

    def drain(self) -> list[Notice]:
        """Return pending notices and forget them."""
        pending, self.notices = self.notices, []
        return pending

    def _post(self, level: str, text: str) -> None:
        self.notices.append(
            Notice(level=level, text=text, created_at=datetime.now(tz=UTC))
        )
        if len(self.notices) > self.limit:
            del self.notices[: len(self.notices) - self.limit]
