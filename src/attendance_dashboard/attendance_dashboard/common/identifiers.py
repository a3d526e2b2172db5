from __future__ import annotations

import uuid


def new_id(prefix: str) -> str:
    """Generate a collection id such as ``emp_3f2a9c0d1b7e``."""
    return f"{prefix}_{uuid.uuid4().hex[:12]}"
