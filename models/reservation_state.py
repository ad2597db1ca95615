"""
Reservation state management functions.
Handles the status lifecycle: transition rules, approval, rejection,
cancellation and completion, each recorded in the status history.
"""

from flask import current_app

from database import get_db, begin_immediate
from utils.datetime_helpers import get_now, parse_stored_datetime
from utils.exceptions import InvalidTransitionError, NotFoundError, ValidationError
from utils.messages import MESSAGES
from .reservation_availability import ensure_no_conflict
from .reservation_history import record_status_history


# =============================================================================
# CONSTANTS
# =============================================================================

PENDING = 'pending'
APPROVED = 'approved'
REJECTED = 'rejected'
CANCELLED = 'cancelled'
COMPLETED = 'completed'

RESERVATION_STATUSES = (PENDING, APPROVED, REJECTED, CANCELLED, COMPLETED)

VALID_TRANSITIONS = {
    PENDING: {APPROVED, REJECTED, CANCELLED},
    APPROVED: {COMPLETED, CANCELLED},
    REJECTED: set(),
    CANCELLED: set(),
    COMPLETED: set(),
}

TERMINAL_STATUSES = (REJECTED, CANCELLED, COMPLETED)

# Targets an admin may set through the generic status endpoint
ADMIN_TARGET_STATUSES = (APPROVED, REJECTED, COMPLETED)


# =============================================================================
# TRANSITION RULES
# =============================================================================

def get_allowed_transitions(status: str) -> set:
    """
    Get statuses reachable from a status.

    Args:
        status: Current status

    Returns:
        set: Allowed target statuses (empty for terminal or unknown statuses)
    """
    return set(VALID_TRANSITIONS.get(status, set()))


def is_terminal(status: str) -> bool:
    """Check if a status admits no further transitions."""
    return status in TERMINAL_STATUSES


def validate_status_transition(current_status: str, new_status: str) -> None:
    """
    Validate a status transition against the lifecycle.

    Args:
        current_status: Status the reservation is in
        new_status: Requested status

    Raises:
        ValidationError: If new_status is not a known status
        InvalidTransitionError: If the transition is not allowed
    """
    if new_status not in RESERVATION_STATUSES:
        raise ValidationError(MESSAGES['invalid_choice'].format(field='status'))

    allowed = get_allowed_transitions(current_status)
    if new_status in allowed:
        return

    if not allowed:
        raise InvalidTransitionError(
            MESSAGES['terminal_status'].format(current=current_status),
            current_status=current_status
        )

    raise InvalidTransitionError(
        MESSAGES['invalid_transition'].format(
            current=current_status,
            target=new_status,
            allowed=', '.join(sorted(allowed))
        ),
        current_status=current_status
    )


# =============================================================================
# TRANSITIONS
# =============================================================================

def _apply_transition(reservation_id: int, new_status: str, changed_by: int, note: str = '',
                      admin_note: str = None, extra_fields: dict = None,
                      check_conflict: bool = False, guard=None, now=None) -> dict:
    """
    Move a reservation to new_status and append a history entry.

    Runs under a write lock; the UPDATE only applies while the status is
    still the one that was validated.

    Args:
        reservation_id: Reservation ID
        new_status: Target status
        changed_by: User ID of the actor
        note: History note
        admin_note: Note stored on the reservation (optional)
        extra_fields: Additional columns to set (e.g. assigned_guide)
        check_conflict: Re-run the conflict check excluding this reservation
        guard: Callable(row, now) raising before the write (optional)
        now: Reference time (default: now)

    Returns:
        dict: Updated reservation
    """
    from .reservation_crud import get_reservation_by_id

    now = now or get_now()
    db = get_db()
    cursor = db.cursor()

    try:
        begin_immediate(db)

        cursor.execute('''
            SELECT id, resource_id, status, start_time, end_time
            FROM reservations WHERE id = ?
        ''', (reservation_id,))
        row = cursor.fetchone()
        if not row:
            raise NotFoundError(MESSAGES['reservation_not_found'])

        current_status = row['status']
        validate_status_transition(current_status, new_status)

        if guard is not None:
            guard(row, now)

        if check_conflict:
            ensure_no_conflict(
                row['resource_id'], row['start_time'], row['end_time'],
                exclude_reservation_id=reservation_id,
                cursor=cursor,
                message=MESSAGES['conflict_on_approve']
            )

        updates = ['status = ?', 'updated_at = CURRENT_TIMESTAMP']
        values = [new_status]

        if admin_note:
            updates.append('admin_note = ?')
            values.append(admin_note)

        for field, value in (extra_fields or {}).items():
            updates.append(f'{field} = ?')
            values.append(value)

        values.extend([reservation_id, current_status])
        cursor.execute(f'''
            UPDATE reservations SET {", ".join(updates)}
            WHERE id = ? AND status = ?
        ''', values)

        if cursor.rowcount != 1:
            raise InvalidTransitionError(
                MESSAGES['status_changed_concurrently'], current_status=current_status
            )

        record_status_history(cursor, reservation_id, new_status, changed_by, note, changed_at=now)
        db.commit()

    except Exception:
        db.rollback()
        raise

    current_app.logger.info(
        'Reservation %s: %s -> %s by user %s', reservation_id, current_status, new_status, changed_by
    )
    return get_reservation_by_id(reservation_id)


def approve_reservation(reservation_id: int, changed_by: int, admin_note: str = '',
                        assigned_guide: str = None, now=None) -> dict:
    """
    Approve a pending reservation.

    The conflict check is repeated so approval can never produce two
    overlapping approved reservations.

    Args:
        reservation_id: Reservation ID
        changed_by: Admin user ID
        admin_note: Optional note for the requester
        assigned_guide: Guide name (tours)

    Returns:
        dict: Updated reservation
    """
    extra = {}
    if assigned_guide and assigned_guide.strip():
        extra['assigned_guide'] = assigned_guide.strip()

    return _apply_transition(
        reservation_id, APPROVED, changed_by,
        note=admin_note, admin_note=admin_note,
        extra_fields=extra, check_conflict=True, now=now
    )


def reject_reservation(reservation_id: int, changed_by: int, admin_note: str = '', now=None) -> dict:
    """Reject a pending reservation."""
    return _apply_transition(
        reservation_id, REJECTED, changed_by,
        note=admin_note, admin_note=admin_note, now=now
    )


def complete_reservation(reservation_id: int, changed_by: int, admin_note: str = '', now=None) -> dict:
    """Mark an approved reservation as completed."""
    return _apply_transition(
        reservation_id, COMPLETED, changed_by,
        note=admin_note, admin_note=admin_note, now=now
    )


def _ensure_not_started(row, now):
    if parse_stored_datetime(row['start_time']) <= now:
        raise InvalidTransitionError(MESSAGES['cancel_after_start'], current_status=row['status'])


def cancel_reservation(reservation_id: int, changed_by: int, note: str = '', now=None) -> dict:
    """
    Cancel a pending or approved reservation that has not started.

    Args:
        reservation_id: Reservation ID
        changed_by: User ID of the requester
        note: History note
        now: Reference time (default: now)

    Returns:
        dict: Updated reservation
    """
    return _apply_transition(
        reservation_id, CANCELLED, changed_by,
        note=note, guard=_ensure_not_started, now=now
    )


def change_reservation_status(reservation_id: int, new_status: str, changed_by: int,
                              admin_note: str = '', assigned_guide: str = None, now=None) -> dict:
    """
    Admin status change: approve, reject or complete.

    Args:
        reservation_id: Reservation ID
        new_status: 'approved', 'rejected' or 'completed'
        changed_by: Admin user ID
        admin_note: Optional note
        assigned_guide: Guide name when approving a tour

    Returns:
        dict: Updated reservation

    Raises:
        ValidationError: Missing or unsupported status
        InvalidTransitionError: Transition not allowed from the current status
    """
    if not new_status:
        raise ValidationError(MESSAGES['status_required'])
    if new_status not in ADMIN_TARGET_STATUSES:
        raise ValidationError(MESSAGES['status_not_allowed'])

    if new_status == APPROVED:
        return approve_reservation(reservation_id, changed_by, admin_note,
                                   assigned_guide=assigned_guide, now=now)
    if new_status == REJECTED:
        return reject_reservation(reservation_id, changed_by, admin_note, now=now)
    return complete_reservation(reservation_id, changed_by, admin_note, now=now)
