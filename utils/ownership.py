"""
Ownership is the access-control relation: every record carries user_id and
only its owner may read, change or delete it.
"""

from typing import Any, Dict, Optional

from utils.exceptions import AuthorizationError, NotFoundError


def require_owned(
    record: Optional[Dict[str, Any]],
    user_id: str,
    label: str,
    record_id: str,
) -> Dict[str, Any]:
    """Return the record if it exists and belongs to user_id, raise otherwise."""
    if not record:
        raise NotFoundError(
            f"{label} not found",
            error_code=f"{label.upper().replace(' ', '_')}_NOT_FOUND",
            context={"id": record_id},
        )
    if str(record.get("user_id")) != str(user_id):
        raise AuthorizationError(context={"id": record_id})
    return record
