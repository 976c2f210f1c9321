"""
CSV guest-list export.
"""

import csv
import io
from datetime import datetime
from typing import Optional

from evntos.models.event import Event
from evntos.models.registration import Registration

GUEST_LIST_HEADER = ["Name", "Email", "Contact Number", "Registered At"]
VERIFIED_LIST_HEADER = GUEST_LIST_HEADER + ["Checked In At"]


def _timestamp(value: Optional[datetime]) -> str:
    return value.isoformat() if value else ""


def guest_list_csv(registrations: list[Registration], verified: bool = False) -> str:
    """
    Header row bare, every data value double-quoted with inner quotes doubled.
    The verified variant adds a Checked In At column.
    """
    out = io.StringIO()
    header = VERIFIED_LIST_HEADER if verified else GUEST_LIST_HEADER
    out.write(",".join(header) + "\n")

    writer = csv.writer(out, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for reg in registrations:
        row = [reg.name, reg.email, reg.contact_number or "", _timestamp(reg.registered_at)]
        if verified:
            row.append(_timestamp(reg.checked_in_at))
        writer.writerow(row)
    return out.getvalue()


def guest_list_filename(event: Event, verified: bool = False) -> str:
    suffix = "verified-guest-list" if verified else "guest-list"
    return f"{event.slug}-{suffix}.csv"
