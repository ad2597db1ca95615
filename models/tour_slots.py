"""
Tour slot generation.
Enumerates fixed-size slots inside a resource's operating window and keeps
those not covered by a blocking reservation.
"""

from datetime import date, datetime, timedelta

from flask import current_app

from utils.datetime_helpers import format_datetime, parse_stored_datetime
from utils.exceptions import ValidationError
from utils.messages import MESSAGES
from .reservation_availability import get_overlapping_reservations, intervals_overlap
from .reservation_validation import parse_date
from .resource import operating_window, require_active_resource


def iter_day_slots(open_dt: datetime, close_dt: datetime, slot_minutes: int):
    """
    Yield (start, end) slots of slot_minutes from open_dt up to close_dt.

    A trailing partial slot that would run past close_dt is not produced.
    """
    if slot_minutes <= 0:
        raise ValueError(f'slot_minutes must be positive, got {slot_minutes}')

    step = timedelta(minutes=slot_minutes)
    current = open_dt
    while current + step <= close_dt:
        yield current, current + step
        current += step


def get_available_slots(resource_id: int, target_date, slot_minutes: int = None,
                        blocking_statuses: tuple = None) -> list:
    """
    Get open slots for a resource on a date.

    Only reservations in blocking_statuses hide a slot; by default that is
    SLOT_BLOCKING_STATUSES from config (approved only), so pending requests
    stay visible to other requesters.

    Args:
        resource_id: Resource ID (must be active)
        target_date: date or 'YYYY-MM-DD'
        slot_minutes: Slot size (default: TOUR_SLOT_MINUTES)
        blocking_statuses: Statuses that hide a slot

    Returns:
        list: [{'start_time', 'end_time', 'duration'}] in chronological order
    """
    resource = require_active_resource(resource_id)
    if not isinstance(target_date, date):
        target_date = parse_date(target_date)

    if slot_minutes is None:
        slot_minutes = current_app.config['TOUR_SLOT_MINUTES']
    if blocking_statuses is None:
        blocking_statuses = tuple(current_app.config['SLOT_BLOCKING_STATUSES'])

    open_dt, close_dt = operating_window(resource, target_date)

    window_minutes = int((close_dt - open_dt).total_seconds() // 60)
    if not 0 < slot_minutes <= window_minutes:
        raise ValidationError(MESSAGES['invalid_slot_minutes'].format(max=window_minutes))

    busy = [
        (parse_stored_datetime(r['start_time']), parse_stored_datetime(r['end_time']))
        for r in get_overlapping_reservations(resource_id, open_dt, close_dt,
                                              statuses=blocking_statuses)
    ]

    return [
        {
            'start_time': format_datetime(start),
            'end_time': format_datetime(end),
            'duration': slot_minutes,
        }
        for start, end in iter_day_slots(open_dt, close_dt, slot_minutes)
        if not any(intervals_overlap(start, end, busy_start, busy_end)
                   for busy_start, busy_end in busy)
    ]
