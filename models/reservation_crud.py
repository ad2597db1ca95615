"""
Reservation CRUD operations.
Handles creating, reading, editing and deleting reservations.
"""

from flask import current_app

from database import get_db, begin_immediate
from utils.datetime_helpers import format_datetime, get_now, parse_stored_datetime
from utils.exceptions import InvalidTransitionError, NotFoundError, ValidationError
from utils.messages import MESSAGES, HISTORY_NOTES
from utils.validators import parse_csv_list
from .reservation_availability import ensure_no_conflict
from .reservation_history import get_status_history, record_status_history
from .reservation_state import CANCELLED, COMPLETED, PENDING, REJECTED
from .reservation_validation import (
    build_reservation_fields, has_interval_change, resolve_interval, validate_interval
)
from .resource import TOUR_GUIDE, get_resource, require_active_resource

RESERVATION_SELECT = '''
    SELECT r.*,
           res.name as resource_name, res.kind as resource_kind,
           u.full_name as requester_name, u.username as requester_username,
           u.email as requester_email
    FROM reservations r
    JOIN resources res ON r.resource_id = res.id
    JOIN users u ON r.requester_id = u.id
'''

# Statuses a requester may delete; tours additionally allow completed
DELETABLE_STATUSES = (CANCELLED, REJECTED)
DELETABLE_TOUR_STATUSES = (CANCELLED, REJECTED, COMPLETED)


def serialize_reservation(row) -> dict:
    """Convert a reservation row to a JSON-ready dict."""
    reservation = dict(row)
    if 'equipment' in reservation:
        reservation['equipment'] = parse_csv_list(reservation['equipment'])
    return reservation


# =============================================================================
# READ
# =============================================================================

def get_reservation_by_id(reservation_id: int, with_history: bool = True) -> dict:
    """
    Get reservation by ID.

    Args:
        reservation_id: Reservation ID
        with_history: Include status_history (oldest first)

    Returns:
        Reservation dict or None if not found
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute(RESERVATION_SELECT + ' WHERE r.id = ?', (reservation_id,))
    row = cursor.fetchone()
    if not row:
        return None

    reservation = serialize_reservation(row)
    if with_history:
        reservation['status_history'] = get_status_history(reservation_id)
    return reservation


def require_reservation(reservation_id: int, with_history: bool = True) -> dict:
    """Get reservation by ID or raise NotFoundError."""
    reservation = get_reservation_by_id(reservation_id, with_history=with_history)
    if reservation is None:
        raise NotFoundError(MESSAGES['reservation_not_found'])
    return reservation


# =============================================================================
# CREATE
# =============================================================================

def create_reservation(requester_id: int, resource_id: int, data: dict,
                       document_path: str = None, now=None) -> dict:
    """
    Create a pending reservation.

    Validation runs first; the conflict check and insert then run under a
    write lock so two concurrent requests for overlapping intervals cannot
    both succeed.

    Args:
        requester_id: User ID of the requester
        resource_id: Resource ID
        data: Request data (interval, title, purpose, participants, ...)
        document_path: Stored supporting document (optional)
        now: Reference time (default: now)

    Returns:
        dict: Created reservation

    Raises:
        ResourceUnavailableError: Resource missing or inactive
        ValidationError: Invalid input
        ConflictError: Interval overlaps an active reservation
    """
    resource = require_active_resource(resource_id)
    now = now or get_now()

    start, end, duration = resolve_interval(resource, data)
    validate_interval(resource, start, end, now=now)
    fields = build_reservation_fields(resource, data)

    db = get_db()
    cursor = db.cursor()

    try:
        begin_immediate(db)
        ensure_no_conflict(resource_id, start, end, cursor=cursor)

        cursor.execute('''
            INSERT INTO reservations (
                resource_id, requester_id, title, purpose, start_time, end_time,
                duration_minutes, participants, status, contact_name, contact_phone,
                contact_email, equipment, notes, document_path, tour_type, age_group, language
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        ''', (
            resource_id, requester_id, fields['title'], fields.get('purpose'),
            format_datetime(start), format_datetime(end), duration,
            fields['participants'], PENDING,
            fields.get('contact_name') or None, fields.get('contact_phone') or None,
            fields.get('contact_email') or None, fields.get('equipment') or None,
            fields.get('notes') or None, document_path,
            fields.get('tour_type'), fields.get('age_group'), fields.get('language')
        ))
        reservation_id = cursor.lastrowid

        record_status_history(cursor, reservation_id, PENDING, requester_id,
                              HISTORY_NOTES['submitted'], changed_at=now)
        db.commit()

    except Exception:
        db.rollback()
        raise

    current_app.logger.info(
        'Reservation %s created on resource %s by user %s (%s - %s)',
        reservation_id, resource_id, requester_id, format_datetime(start), format_datetime(end)
    )
    return get_reservation_by_id(reservation_id)


# =============================================================================
# UPDATE
# =============================================================================

def update_pending_reservation(reservation_id: int, data: dict, document_path: str = None,
                               now=None) -> tuple:
    """
    Edit a reservation while it is still pending and has not started.

    Any change to the interval re-runs the conflict check against the new
    interval, excluding the reservation itself.

    Args:
        reservation_id: Reservation ID
        data: Fields to change
        document_path: Replacement supporting document (optional)
        now: Reference time (default: now)

    Returns:
        Tuple (reservation, replaced_document_path). The replaced path is set
        only when a new document superseded an old one.
    """
    reservation = require_reservation(reservation_id, with_history=False)
    now = now or get_now()

    if reservation['status'] != PENDING:
        raise InvalidTransitionError(MESSAGES['edit_only_pending'],
                                     current_status=reservation['status'])
    if parse_stored_datetime(reservation['start_time']) < now:
        raise ValidationError(MESSAGES['edit_after_start'])

    if 'resource_id' in data and str(data['resource_id']) != str(reservation['resource_id']):
        raise ValidationError(MESSAGES['resource_immutable'])

    resource = get_resource(reservation['resource_id'])
    updates = build_reservation_fields(resource, data, partial=True)

    interval = None
    if has_interval_change(data):
        merged = {
            'start_time': reservation['start_time'],
            'end_time': reservation['end_time'],
            'duration': reservation['duration_minutes'],
        }
        merged.update({k: v for k, v in data.items() if v not in (None, '')})
        if resource['kind'] == TOUR_GUIDE and (merged.get('date') or merged.get('time')):
            # A lone date or time keeps the other half of the stored start
            merged.setdefault('date', reservation['start_time'][:10])
            merged.setdefault('time', reservation['start_time'][11:16])
        start, end, duration = resolve_interval(resource, merged)
        validate_interval(resource, start, end, now=now)
        interval = (start, end)
        updates.update({
            'start_time': format_datetime(start),
            'end_time': format_datetime(end),
            'duration_minutes': duration,
        })

    if document_path:
        updates['document_path'] = document_path

    if not updates:
        return require_reservation(reservation_id), None

    db = get_db()
    cursor = db.cursor()

    try:
        begin_immediate(db)

        if interval:
            ensure_no_conflict(reservation['resource_id'], interval[0], interval[1],
                               exclude_reservation_id=reservation_id, cursor=cursor)

        assignments = [f'{field} = ?' for field in updates]
        assignments.append('updated_at = CURRENT_TIMESTAMP')
        values = list(updates.values()) + [reservation_id, PENDING]

        cursor.execute(f'''
            UPDATE reservations SET {", ".join(assignments)}
            WHERE id = ? AND status = ?
        ''', values)

        if cursor.rowcount != 1:
            raise InvalidTransitionError(MESSAGES['status_changed_concurrently'],
                                         current_status=reservation['status'])
        db.commit()

    except Exception:
        db.rollback()
        raise

    current_app.logger.info('Reservation %s updated (%s)', reservation_id, ', '.join(updates))

    replaced = reservation['document_path'] if document_path else None
    return require_reservation(reservation_id), replaced


# =============================================================================
# DELETE
# =============================================================================

def delete_reservation(reservation_id: int, force: bool = False) -> str:
    """
    Delete a reservation and its history.

    Requesters may only delete cancelled or rejected reservations (tours
    also completed ones); force=True skips the status gate for admins.

    Args:
        reservation_id: Reservation ID
        force: Skip the status gate

    Returns:
        str: Document path of the deleted reservation (or None)
    """
    reservation = require_reservation(reservation_id, with_history=False)

    if not force:
        if reservation['resource_kind'] == TOUR_GUIDE:
            allowed, message = DELETABLE_TOUR_STATUSES, MESSAGES['delete_not_allowed_tour']
        else:
            allowed, message = DELETABLE_STATUSES, MESSAGES['delete_not_allowed']
        if reservation['status'] not in allowed:
            raise InvalidTransitionError(message, current_status=reservation['status'])

    db = get_db()
    cursor = db.cursor()

    try:
        cursor.execute('DELETE FROM reservation_status_history WHERE reservation_id = ?',
                       (reservation_id,))
        cursor.execute('DELETE FROM reservations WHERE id = ?', (reservation_id,))
        db.commit()
    except Exception:
        db.rollback()
        raise

    current_app.logger.info('Reservation %s deleted (force=%s)', reservation_id, force)
    return reservation['document_path']
