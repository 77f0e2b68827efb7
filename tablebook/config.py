import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv("config.env")


def _as_bool(val: str | None, default: bool = False) -> bool:
    if val is None:
        return default
    return val.strip().lower() in {"1", "true", "yes", "y", "on"}


def _as_int(val: str | None, default: int) -> int:
    if val is None or not val.strip():
        return default
    return int(val)


@dataclass
class Settings:
    # Slot grid
    slot_interval_minutes: int = _as_int(os.getenv("SLOT_INTERVAL_MINUTES"), 30)
    min_lead_minutes: int = _as_int(os.getenv("MIN_LEAD_MINUTES"), 15)
    min_gap_minutes: int = _as_int(os.getenv("MIN_GAP_MINUTES"), 60)
    # No slot may start within this many minutes of closing
    min_stay_minutes: int = _as_int(os.getenv("MIN_STAY_MINUTES"), 60)
    pending_blocks_slots: bool = _as_bool(os.getenv("PENDING_BLOCKS_SLOTS"), True)

    # Floor plan status
    lookahead_minutes: int = _as_int(os.getenv("LOOKAHEAD_MINUTES"), 60)
    assumed_stay_minutes: int = _as_int(os.getenv("ASSUMED_STAY_MINUTES"), 90)
    conflict_warning_minutes: int = _as_int(os.getenv("CONFLICT_WARNING_MINUTES"), 6 * 60)

    # Pending request expiry
    pending_expiry_seconds: int = _as_int(os.getenv("PENDING_EXPIRY_SECONDS"), 180)
    expiry_sweep_seconds: int = _as_int(os.getenv("EXPIRY_SWEEP_SECONDS"), 30)
    expiry_sweep_enabled: bool = _as_bool(os.getenv("EXPIRY_SWEEP_ENABLED"), True)

    default_work_starts: str = os.getenv("DEFAULT_WORK_STARTS", "10:00")
    default_work_ends: str = os.getenv("DEFAULT_WORK_ENDS", "23:00")


settings = Settings()
