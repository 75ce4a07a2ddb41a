from datetime import date
from typing import Optional

from fastapi import Depends, Header

from classboard.core.clock import Clock, get_clock


def get_actor_id(x_actor_id: Optional[str] = Header(None)) -> str:
    """Who is making the change, for the audit log. Authentication happens upstream."""
    return (x_actor_id or "").strip() or "anonymous"


def get_today(clock: Clock = Depends(get_clock)) -> date:
    return clock.today()
