"""
Data access and CSV rendering for the export endpoints.

Callers must authorize before calling anything here; these helpers read
protected records unconditionally.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pandas as pd
from sqlalchemy import text

from outreach.config import ANONYMOUS_GUEST_NAME, DEFAULT_GUEST_LOCATION
from outreach.roles import Resource


GUEST_COLUMNS = [
    "Guest ID", "First Name", "Last Name", "Full Name", "Preferred Name",
    "Housing Status", "Age Group", "Gender", "Location", "Notes",
    "Bicycle Description", "Is Banned", "Ban Reason", "Banned Until", "Created At",
]

ATTENDANCE_COLUMNS = ["Date", "Guest ID", "Guest Name", "Meal Type", "Quantity", "Created At"]

# Resources with an export endpoint.
EXPORT_RESOURCES = (Resource.GUESTS, Resource.MEALS)


def _today() -> str:
    return datetime.now(timezone.utc).date().isoformat()


def iso_value(value: Any) -> Any:
    """ISO 8601 text for date/datetime values; anything else unchanged."""
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return value


# ── Queries ──────────────────────────────────────────────────────────

def fetch_guests(engine) -> List[Dict[str, Any]]:
    sql = text("SELECT * FROM guests ORDER BY full_name ASC")
    with engine.connect() as conn:
        return [dict(row) for row in conn.execute(sql).mappings().all()]


def fetch_attendance(
    engine,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    meal_type: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """Meal attendance rows joined with the guest's name, newest first."""
    clauses, params = [], {}
    if start_date:
        clauses.append("a.served_on >= :start_date")
        params["start_date"] = start_date
    if end_date:
        clauses.append("a.served_on <= :end_date")
        params["end_date"] = end_date
    if meal_type:
        clauses.append("a.meal_type = :meal_type")
        params["meal_type"] = meal_type

    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
    sql = text(f"""
        SELECT a.id, a.guest_id, a.quantity, a.served_on, a.meal_type, a.created_at,
               g.full_name AS guest_name
        FROM meal_attendance a
        LEFT JOIN guests g ON g.id = a.guest_id
        {where}
        ORDER BY a.served_on DESC, a.created_at DESC
    """)
    with engine.connect() as conn:
        return [dict(row) for row in conn.execute(sql, params).mappings().all()]


# ── CSV rendering ────────────────────────────────────────────────────

def is_banned(banned_until: Any, now: Optional[pd.Timestamp] = None) -> bool:
    """A guest is banned while ``banned_until`` lies in the future."""
    if banned_until is None or banned_until == "":
        return False
    ts = pd.to_datetime(banned_until, utc=True, errors="coerce")
    if pd.isna(ts):
        return False
    now = now if now is not None else pd.Timestamp.now(tz="UTC")
    return ts > now


def guests_frame(rows: List[Dict[str, Any]], now: Optional[pd.Timestamp] = None) -> pd.DataFrame:
    records = []
    for row in rows:
        records.append([
            row.get("external_id"),
            row.get("first_name"),
            row.get("last_name"),
            row.get("full_name"),
            row.get("preferred_name") or "",
            row.get("housing_status"),
            row.get("age_group"),
            row.get("gender"),
            row.get("location") or DEFAULT_GUEST_LOCATION,
            row.get("notes") or "",
            row.get("bicycle_description") or "",
            "Yes" if is_banned(row.get("banned_until"), now) else "No",
            row.get("ban_reason") or "",
            iso_value(row.get("banned_until")),
            iso_value(row.get("created_at")),
        ])
    return pd.DataFrame(records, columns=GUEST_COLUMNS, dtype=object)


def attendance_frame(rows: List[Dict[str, Any]]) -> pd.DataFrame:
    records = [
        [
            iso_value(row.get("served_on")),
            row.get("guest_id"),
            row.get("guest_name") or ANONYMOUS_GUEST_NAME,
            row.get("meal_type"),
            row.get("quantity"),
            iso_value(row.get("created_at")),
        ]
        for row in rows
    ]
    return pd.DataFrame(records, columns=ATTENDANCE_COLUMNS, dtype=object)


def to_csv(df: pd.DataFrame) -> str:
    return df.to_csv(index=False, lineterminator="\n")


def guests_filename() -> str:
    return f"guests_export_{_today()}.csv"


def attendance_filename(start_date: Optional[str] = None, end_date: Optional[str] = None) -> str:
    if start_date and end_date:
        return f"attendance_export_{start_date}_to_{end_date}.csv"
    return f"attendance_export_{_today()}.csv"
