"""Id and timestamp generation for rows created by the mutation handlers."""

import uuid
from datetime import datetime, timezone


class IdProvider:
    """Hands out ``<prefix>-<random hex>`` ids and ISO-8601 UTC timestamps.

    Subclass (or pass a stub with the same two methods) to get deterministic
    values in tests.
    """

    def new_id(self, prefix: str) -> str:
        return f"{prefix}-{uuid.uuid4().hex}"

    def now_iso(self) -> str:
        """Current UTC time as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
        now = datetime.now(timezone.utc)
        return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


default_ids = IdProvider()
