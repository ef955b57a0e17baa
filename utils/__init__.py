"""Utility modules for cross-cutting concerns."""

from utils.timezone import now_utc, to_epoch
from utils.user_context import (
    get_current_user_id,
    set_current_user_id,
    clear_current_user_id,
)
