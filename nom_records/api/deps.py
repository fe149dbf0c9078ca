from typing import Optional
from fastapi import Query, Request

from nom_records.core.config import DuplicatePolicy


def get_duplicate_policy(
    request: Request,
    on_duplicate: Optional[DuplicatePolicy] = Query(
        None, description="How to treat a repeated submission: append, reject or merge"
    ),
) -> DuplicatePolicy:
    """Caller's choice first, then the configured default."""
    return on_duplicate or request.app.state.settings.DUPLICATE_POLICY
