from __future__ import annotations

import json
import logging
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import Any, Dict, Optional

logger = logging.getLogger("audit")


@dataclass
class AuditEvent:
    """Structured representation of a session audit event.

    Never carries passwords or credential values: only the action, the
    outcome and the identity id/role when one is known.
    """

    timestamp: str
    action: str
    outcome: str
    user_id: Optional[str] = None
    role: Optional[str] = None
    extra: Optional[Dict[str, Any]] = None


class AuditService:
    def log_event(
        self,
        *,
        action: str,
        outcome: str,
        user_id: Optional[str] = None,
        role: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> AuditEvent:
        """Log a structured audit event and return it.

        - `action`: high-level verb, e.g. "login", "logout", "fetch_user".
        - `outcome`: "success", "failure" or "rejected".
        - `extra`: optional small dict of non-secret metadata.
        """

        event = AuditEvent(
            timestamp=datetime.now(timezone.utc).isoformat(),
            action=action,
            outcome=outcome,
            user_id=user_id,
            role=role,
            extra=extra,
        )

        try:
            logger.info(json.dumps(asdict(event)))
        except TypeError:
            # Something in extra is not JSON serializable.
            safe_event = asdict(event)
            safe_event["extra"] = None
            logger.info(json.dumps(safe_event))

        return event


audit_service = AuditService()
