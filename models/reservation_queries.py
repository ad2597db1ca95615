"""
Reservation query functions.
Handles listing, filtering, upcoming views and monthly calendars.
"""

import calendar
from datetime import date, datetime, timedelta

from database import get_db
from utils.datetime_helpers import format_datetime, get_now
from utils.exceptions import ValidationError
from utils.messages import MESSAGES
from .reservation_availability import BLOCKING_STATUSES
from .reservation_crud import RESERVATION_SELECT, serialize_reservation
from .resource import TOUR_GUIDE, get_resource
from .tour_slots import get_available_slots

MAX_PER_PAGE = 100
MIN_CALENDAR_YEAR = 1900
MAX_CALENDAR_YEAR = 2100


def _add_filters(query: str, params: list, status: str = None, kind: str = None,
                 resource_id: int = None, date_from: str = None, date_to: str = None,
                 search: str = None) -> str:
    if status:
        query += ' AND r.status = ?'
        params.append(status)

    if kind:
        query += ' AND res.kind = ?'
        params.append(kind)

    if resource_id:
        query += ' AND r.resource_id = ?'
        params.append(resource_id)

    if date_from:
        query += ' AND r.start_time >= ?'
        params.append(f'{date_from}T00:00:00')

    if date_to:
        query += ' AND r.start_time <= ?'
        params.append(f'{date_to}T23:59:59')

    if search:
        query += ''' AND (
            r.title LIKE ? OR r.purpose LIKE ? OR u.full_name LIKE ? OR u.username LIKE ?
        )'''
        search_param = f'%{search}%'
        params.extend([search_param] * 4)

    return query


def get_user_reservations(requester_id: int, status: str = None, kind: str = None) -> list:
    """
    Get a requester's reservations, newest first.

    Args:
        requester_id: User ID
        status: Status filter (optional)
        kind: Resource kind filter (optional)

    Returns:
        List of reservation dicts
    """
    db = get_db()
    cursor = db.cursor()

    params = [requester_id]
    query = _add_filters(RESERVATION_SELECT + ' WHERE r.requester_id = ?', params,
                         status=status, kind=kind)
    query += ' ORDER BY r.created_at DESC, r.id DESC'

    cursor.execute(query, params)
    return [serialize_reservation(row) for row in cursor.fetchall()]


def get_reservations_filtered(
    status: str = None,
    kind: str = None,
    resource_id: int = None,
    date_from: str = None,
    date_to: str = None,
    search: str = None,
    page: int = 1,
    per_page: int = 10
) -> dict:
    """
    Get filtered reservations with pagination (admin list view).

    Args:
        status: Status filter
        kind: Resource kind filter
        resource_id: Resource filter
        date_from: Start date filter (YYYY-MM-DD, inclusive)
        date_to: End date filter (YYYY-MM-DD, inclusive)
        search: Search term (title, purpose, requester)
        page: Page number
        per_page: Items per page

    Returns:
        dict: {items: list, total: int, page: int, per_page: int, pages: int}
    """
    db = get_db()
    cursor = db.cursor()

    page = max(page, 1)
    per_page = min(max(per_page, 1), MAX_PER_PAGE)
    params = []
    filters = dict(status=status, kind=kind, resource_id=resource_id,
                   date_from=date_from, date_to=date_to, search=search)

    count_query = _add_filters('''
        SELECT COUNT(*) as total
        FROM reservations r
        JOIN resources res ON r.resource_id = res.id
        JOIN users u ON r.requester_id = u.id
        WHERE 1=1
    ''', params, **filters)
    cursor.execute(count_query, params)
    total = cursor.fetchone()['total']

    params = []
    query = _add_filters(RESERVATION_SELECT + ' WHERE 1=1', params, **filters)
    query += ' ORDER BY r.created_at DESC, r.id DESC'
    query += ' LIMIT ? OFFSET ?'
    params.extend([per_page, (page - 1) * per_page])

    cursor.execute(query, params)

    return {
        'items': [serialize_reservation(row) for row in cursor.fetchall()],
        'total': total,
        'page': page,
        'per_page': per_page,
        'pages': (total + per_page - 1) // per_page
    }


def get_upcoming_reservations(days: int = 7, now: datetime = None) -> list:
    """
    Get approved reservations starting within the next days.

    Args:
        days: Look-ahead window in days
        now: Reference time (default: now)

    Returns:
        List of reservation dicts ordered by start time
    """
    now = now or get_now()
    db = get_db()
    cursor = db.cursor()
    cursor.execute(RESERVATION_SELECT + '''
        WHERE r.status = 'approved'
          AND r.start_time >= ?
          AND r.start_time <= ?
        ORDER BY r.start_time
    ''', (format_datetime(now), format_datetime(now + timedelta(days=days))))
    return [serialize_reservation(row) for row in cursor.fetchall()]


def get_resource_calendar(resource_id: int, year: int, month: int) -> list:
    """
    Get a month view of a resource's bookings.

    Each day lists its pending/approved reservations; for the tour guide
    it also counts the slots still open.

    Args:
        resource_id: Resource ID
        year: Calendar year
        month: Calendar month (1-12)

    Returns:
        list: One dict per day {date, reservations, available_slots?}
    """
    if not MIN_CALENDAR_YEAR <= year <= MAX_CALENDAR_YEAR:
        raise ValidationError(MESSAGES['invalid_year'].format(
            min=MIN_CALENDAR_YEAR, max=MAX_CALENDAR_YEAR
        ))
    if not 1 <= month <= 12:
        raise ValidationError(MESSAGES['invalid_choice'].format(field='month'))

    resource = get_resource(resource_id)
    first_day = date(year, month, 1)
    last_day = date(year, month, calendar.monthrange(year, month)[1])

    db = get_db()
    cursor = db.cursor()
    placeholders = ','.join('?' * len(BLOCKING_STATUSES))
    cursor.execute(f'''
        SELECT r.id, r.title, r.start_time, r.end_time, r.status, r.participants,
               u.full_name as requester_name
        FROM reservations r
        JOIN users u ON r.requester_id = u.id
        WHERE r.resource_id = ?
          AND r.status IN ({placeholders})
          AND r.start_time >= ?
          AND r.start_time <= ?
        ORDER BY r.start_time
    ''', (resource_id, *BLOCKING_STATUSES,
          f'{first_day.isoformat()}T00:00:00', f'{last_day.isoformat()}T23:59:59'))

    by_day = {}
    for row in cursor.fetchall():
        by_day.setdefault(row['start_time'][:10], []).append(dict(row))

    days = []
    current = first_day
    while current <= last_day:
        key = current.isoformat()
        entry = {'date': key, 'reservations': by_day.get(key, [])}
        if resource['kind'] == TOUR_GUIDE and resource['active']:
            entry['available_slots'] = len(get_available_slots(resource_id, current))
        days.append(entry)
        current += timedelta(days=1)

    return days
