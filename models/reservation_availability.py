"""
Reservation conflict checking.
Answers whether a half-open interval [start, end) on a resource overlaps an
active reservation, and identifies the first conflicting one.
"""

from datetime import datetime

from database import get_db
from .resource import require_active_resource
from utils.datetime_helpers import format_datetime
from utils.exceptions import ConflictError, ValidationError
from utils.messages import MESSAGES

# Statuses that hold a resource for admission (create, edit, approve)
BLOCKING_STATUSES = ('pending', 'approved')


def intervals_overlap(start_a, end_a, start_b, end_b) -> bool:
    """
    Check whether two half-open intervals overlap.

    Back-to-back intervals (one ends exactly when the other starts) do not.
    """
    return start_a < end_b and start_b < end_a


def _as_stored(value) -> str:
    if isinstance(value, datetime):
        return format_datetime(value)
    return value


# =============================================================================
# CONFLICT LOOKUP
# =============================================================================

def get_overlapping_reservations(
    resource_id: int,
    start,
    end,
    statuses: tuple = BLOCKING_STATUSES,
    exclude_reservation_id: int = None,
    cursor=None
) -> list:
    """
    Get reservations on a resource that overlap [start, end).

    Args:
        resource_id: Resource ID
        start: Interval start (datetime or stored string)
        end: Interval end (datetime or stored string)
        statuses: Statuses considered blocking
        exclude_reservation_id: Reservation ID to ignore (for edits and approval)
        cursor: Cursor of an open transaction (optional)

    Returns:
        List of reservation dicts ordered by start time
    """
    if not statuses:
        return []

    if cursor is None:
        cursor = get_db().cursor()

    placeholders = ','.join('?' * len(statuses))
    query = f'''
        SELECT r.id, r.resource_id, r.title, r.start_time, r.end_time, r.status,
               r.requester_id, u.full_name as requester_name, u.username as requester_username
        FROM reservations r
        JOIN users u ON r.requester_id = u.id
        WHERE r.resource_id = ?
          AND r.status IN ({placeholders})
          AND r.start_time < ?
          AND r.end_time > ?
    '''
    params = [resource_id, *statuses, _as_stored(end), _as_stored(start)]

    if exclude_reservation_id is not None:
        query += ' AND r.id != ?'
        params.append(exclude_reservation_id)

    query += ' ORDER BY r.start_time, r.id'

    cursor.execute(query, params)
    return [dict(row) for row in cursor.fetchall()]


def find_conflicting_reservation(
    resource_id: int,
    start,
    end,
    exclude_reservation_id: int = None,
    statuses: tuple = BLOCKING_STATUSES,
    cursor=None
) -> dict:
    """
    Find the first reservation that blocks [start, end) on a resource.

    Returns:
        Reservation dict or None if the interval is free
    """
    overlapping = get_overlapping_reservations(
        resource_id, start, end,
        statuses=statuses,
        exclude_reservation_id=exclude_reservation_id,
        cursor=cursor
    )
    return overlapping[0] if overlapping else None


def has_conflict(resource_id: int, start, end, exclude_reservation_id: int = None) -> bool:
    """Check if [start, end) overlaps any blocking reservation."""
    return find_conflicting_reservation(
        resource_id, start, end, exclude_reservation_id=exclude_reservation_id
    ) is not None


def conflict_summary(reservation: dict) -> dict:
    """
    Summarize a conflicting reservation for error responses.

    Args:
        reservation: Reservation dict from get_overlapping_reservations

    Returns:
        dict with id, title, start_time, end_time, requester and status
    """
    if not reservation:
        return None
    return {
        'id': reservation['id'],
        'title': reservation['title'],
        'start_time': reservation['start_time'],
        'end_time': reservation['end_time'],
        'requester': reservation.get('requester_name') or reservation.get('requester_username'),
        'status': reservation['status'],
    }


def ensure_no_conflict(
    resource_id: int,
    start,
    end,
    exclude_reservation_id: int = None,
    cursor=None,
    message: str = None
) -> None:
    """
    Raise ConflictError if [start, end) overlaps a blocking reservation.

    Call inside the same transaction as the write that depends on it.
    """
    conflict = find_conflicting_reservation(
        resource_id, start, end,
        exclude_reservation_id=exclude_reservation_id,
        cursor=cursor
    )
    if conflict:
        raise ConflictError(message or MESSAGES['conflict'], conflict=conflict_summary(conflict))


# =============================================================================
# AVAILABILITY
# =============================================================================

def check_availability(
    resource_id: int,
    start: datetime,
    end: datetime,
    exclude_reservation_id: int = None
) -> dict:
    """
    Check whether a resource is free for [start, end).

    Args:
        resource_id: Resource ID (must be active)
        start: Interval start
        end: Interval end
        exclude_reservation_id: Reservation ID to ignore

    Returns:
        dict: {'available': bool, 'conflicting_reservation': dict or None}
    """
    require_active_resource(resource_id)

    if end <= start:
        raise ValidationError(MESSAGES['end_before_start'])

    conflict = find_conflicting_reservation(
        resource_id, start, end, exclude_reservation_id=exclude_reservation_id
    )
    return {
        'available': conflict is None,
        'conflicting_reservation': conflict_summary(conflict),
    }
