"""In-memory submission store.

Suitable for development and tests. Each instance is independent; the
caller creates one and hands it to the provider.
"""

import threading
from datetime import datetime, timezone
from typing import Optional

from taxxon_netfile.interfaces.types import StoredSubmission, SubmissionStatus


class InMemorySubmissionStore:
    """SubmissionStore backed by a dict keyed by confirmation number."""

    def __init__(self):
        self._submissions: dict[str, StoredSubmission] = {}
        self._lock = threading.Lock()

    def save(self, submission: StoredSubmission) -> None:
        with self._lock:
            self._submissions[submission.confirmation_number] = submission

    def get(self, confirmation_number: str) -> Optional[StoredSubmission]:
        with self._lock:
            return self._submissions.get(confirmation_number)

    def update_status(
        self,
        confirmation_number: str,
        status: SubmissionStatus,
        updated_at: Optional[datetime] = None,
    ) -> Optional[StoredSubmission]:
        with self._lock:
            submission = self._submissions.get(confirmation_number)
            if submission is None:
                return None
            updated = submission.model_copy(
                update={
                    "status": status,
                    "updated_at": updated_at or datetime.now(timezone.utc),
                }
            )
            self._submissions[confirmation_number] = updated
            return updated

    def __len__(self) -> int:
        return len(self._submissions)

    def __contains__(self, confirmation_number: str) -> bool:
        return confirmation_number in self._submissions
