"""
Reservation status history.
Append-only log of status changes stored beside the current status.
"""

from database import get_db
from utils.datetime_helpers import format_datetime, get_now


def record_status_history(cursor, reservation_id: int, status: str, changed_by: int = None,
                          note: str = None, changed_at=None) -> int:
    """
    Append one history entry inside the caller's transaction.

    The caller commits; entries are never updated or removed individually.

    Args:
        cursor: Active transaction cursor
        reservation_id: Reservation ID
        status: Status reached
        changed_by: User ID of the actor (None for system changes)
        note: Optional note
        changed_at: datetime of the change (default: now)

    Returns:
        int: New history entry ID
    """
    changed_at = changed_at or get_now()
    cursor.execute('''
        INSERT INTO reservation_status_history
        (reservation_id, status, changed_at, changed_by, note)
        VALUES (?, ?, ?, ?, ?)
    ''', (reservation_id, status, format_datetime(changed_at), changed_by, note or None))
    return cursor.lastrowid


def get_status_history(reservation_id: int) -> list:
    """
    Get status history for a reservation.

    Args:
        reservation_id: Reservation ID

    Returns:
        list: History entries, oldest first
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        SELECT h.id, h.status, h.changed_at, h.changed_by, h.note,
               u.full_name as changed_by_name
        FROM reservation_status_history h
        LEFT JOIN users u ON h.changed_by = u.id
        WHERE h.reservation_id = ?
        ORDER BY h.id
    ''', (reservation_id,))
    return [dict(row) for row in cursor.fetchall()]
