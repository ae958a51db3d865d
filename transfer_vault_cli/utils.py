from __future__ import annotations

import logging
from datetime import datetime

SIZE_UNITS = ("bytes", "KB", "MB", "GB", "TB", "PB", "EB")
SIZE_STEP = 1000


def setup_logging(level: str = "WARNING") -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def display_size(size_bytes: int) -> str:
    if size_bytes < SIZE_STEP:
        return f"{max(0, int(size_bytes))} bytes"
    value = float(size_bytes)
    unit = 0
    # Compare the rounded value so 999_950 renders as 1.0 MB, not 1000.0 KB.
    while round(value, 1) >= SIZE_STEP and unit < len(SIZE_UNITS) - 1:
        value /= SIZE_STEP
        unit += 1
    return f"{value:.1f} {SIZE_UNITS[unit]}"


def format_report_timestamp(moment: datetime | None = None) -> str:
    # e.g. "Mon Oct 5 14:03:22 CEST 2026"
    dt = (moment or datetime.now()).astimezone()
    parts = [f"{dt:%a}", f"{dt:%b}", str(dt.day), f"{dt:%H:%M:%S}", dt.tzname() or "", str(dt.year)]
    return " ".join(part for part in parts if part)
