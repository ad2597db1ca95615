"""
Reservation input validation.
Parses request data into a normalized interval and field set, enforcing
operating hours, duration limits, capacity and contact rules.
"""

import json
from datetime import date, datetime, timedelta

from flask import current_app

from utils.datetime_helpers import get_now, to_local_naive
from utils.exceptions import ValidationError
from utils.messages import MESSAGES
from utils.validators import (
    parse_csv_list, sanitize_input, validate_email, validate_phone
)
from .resource import TOUR_GUIDE, operating_window

TOUR_TYPES = ('general', 'academic', 'research', 'special')
AGE_GROUPS = ('children', 'teenagers', 'adults', 'seniors', 'mixed')
LANGUAGES = ('indonesia', 'english', 'acehnese')

MAX_TOUR_PARTICIPANTS = 50

INTERVAL_KEYS = ('start_time', 'end_time', 'duration', 'date', 'time')


# =============================================================================
# PARSING
# =============================================================================

def parse_datetime(value, field: str = 'start_time') -> datetime:
    """
    Parse an ISO 8601 datetime into naive local time.

    Offsets (including a trailing 'Z') are converted to the configured timezone.

    Raises:
        ValidationError: Missing or malformed value
    """
    if isinstance(value, datetime):
        return to_local_naive(value)
    if not value:
        raise ValidationError(MESSAGES['field_required'].format(field=field))

    text = str(value).strip()
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise ValidationError(MESSAGES['invalid_datetime'], field=field)
    return to_local_naive(parsed)


def parse_date(value) -> date:
    """Parse 'YYYY-MM-DD' into a date."""
    if isinstance(value, date):
        return value
    if not value:
        raise ValidationError(MESSAGES['field_required'].format(field='date'))
    try:
        return datetime.strptime(str(value).strip(), '%Y-%m-%d').date()
    except ValueError:
        raise ValidationError(MESSAGES['invalid_date'])


def _parse_int(value, field: str, message: str = None) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(message or MESSAGES['invalid_choice'].format(field=field))


def resolve_interval(resource: dict, data: dict) -> tuple:
    """
    Resolve the requested [start, end) for a resource.

    Rooms take explicit start_time and end_time. Tours take a start
    (start_time, or date plus time) and a duration in minutes.

    Args:
        resource: Resource dict
        data: Request data

    Returns:
        Tuple (start, end, duration_minutes); duration is None for rooms
    """
    if resource['kind'] == TOUR_GUIDE:
        if data.get('date') and data.get('time'):
            start = parse_datetime(f"{data['date']}T{data['time']}", 'time')
        else:
            start = parse_datetime(data.get('start_time'), 'start_time')

        duration = data.get('duration')
        if duration is None or duration == '':
            duration = current_app.config['TOUR_DEFAULT_DURATION_MINUTES']
        duration = _parse_int(duration, 'duration', MESSAGES['tour_duration'].format(
            min=current_app.config['TOUR_MIN_DURATION_MINUTES'],
            max=current_app.config['TOUR_MAX_DURATION_MINUTES']
        ))
        return start, start + timedelta(minutes=duration), duration

    start = parse_datetime(data.get('start_time'), 'start_time')
    end = parse_datetime(data.get('end_time'), 'end_time')
    return start, end, None


# =============================================================================
# INTERVAL RULES
# =============================================================================

def validate_interval(resource: dict, start: datetime, end: datetime, now: datetime = None,
                      check_past: bool = True) -> None:
    """
    Validate an interval against the resource's rules.

    Args:
        resource: Resource dict
        start: Interval start
        end: Interval end
        now: Reference time (default: now)
        check_past: Reject intervals starting before now

    Raises:
        ValidationError: On the first violated rule
    """
    if end <= start:
        raise ValidationError(MESSAGES['end_before_start'])

    if check_past and start < (now or get_now()):
        raise ValidationError(MESSAGES['in_the_past'])

    config = current_app.config
    if resource['kind'] == TOUR_GUIDE:
        minutes = (end - start).total_seconds() / 60
        min_minutes = config['TOUR_MIN_DURATION_MINUTES']
        max_minutes = config['TOUR_MAX_DURATION_MINUTES']
        if minutes < min_minutes or minutes > max_minutes:
            raise ValidationError(MESSAGES['tour_duration'].format(min=min_minutes, max=max_minutes))
    else:
        max_hours = config['ROOM_MAX_DURATION_HOURS']
        if end - start > timedelta(hours=max_hours):
            raise ValidationError(MESSAGES['max_duration'].format(hours=max_hours))

    if end.date() != start.date():
        raise ValidationError(MESSAGES['multi_day'])

    open_dt, close_dt = operating_window(resource, start.date())
    if start < open_dt or end > close_dt:
        raise ValidationError(MESSAGES['outside_hours'].format(
            start=resource['open_time'], end=resource['close_time']
        ))


def validate_participants(resource: dict, participants) -> int:
    """
    Validate participant count against the resource.

    Returns:
        int: Participant count
    """
    count = _parse_int(participants, 'participants', MESSAGES['invalid_participants'])
    if count < 1:
        raise ValidationError(MESSAGES['invalid_participants'])

    capacity = resource.get('capacity')
    if resource['kind'] == TOUR_GUIDE:
        capacity = MAX_TOUR_PARTICIPANTS
    if capacity and count > capacity:
        raise ValidationError(MESSAGES['over_capacity'].format(count=count, capacity=capacity))
    return count


# =============================================================================
# FIELDS
# =============================================================================

def _choice(data: dict, field: str, choices: tuple, default: str) -> str:
    value = sanitize_input(data.get(field)).lower() or default
    if value not in choices:
        raise ValidationError(MESSAGES['invalid_choice'].format(field=field))
    return value


def _extract_contact(data: dict) -> dict:
    """Read contact fields from a nested contact_person object or flat keys."""
    contact = data.get('contact_person')
    if isinstance(contact, str) and contact.strip():
        try:
            contact = json.loads(contact)
        except ValueError:
            raise ValidationError(MESSAGES['invalid_payload'])
    if not isinstance(contact, dict):
        contact = {}

    return {
        'contact_name': sanitize_input(contact.get('name', data.get('contact_name')), 100),
        'contact_phone': sanitize_input(contact.get('phone', data.get('contact_phone')), 20),
        'contact_email': sanitize_input(contact.get('email', data.get('contact_email')), 100),
    }


def validate_contact(data: dict, required: bool = False) -> dict:
    """
    Validate contact person fields.

    Args:
        data: Request data
        required: Name and phone must be present (tours)

    Returns:
        dict with contact_name, contact_phone, contact_email
    """
    contact = _extract_contact(data)

    if required and not (contact['contact_name'] and contact['contact_phone']):
        raise ValidationError(MESSAGES['contact_required'])
    if contact['contact_phone'] and not validate_phone(contact['contact_phone']):
        raise ValidationError(MESSAGES['invalid_phone'])
    if contact['contact_email'] and not validate_email(contact['contact_email']):
        raise ValidationError(MESSAGES['invalid_email'])
    return contact


def build_reservation_fields(resource: dict, data: dict, partial: bool = False) -> dict:
    """
    Validate and normalize the non-interval reservation fields.

    Args:
        resource: Resource dict
        data: Request data
        partial: Only validate keys present in data (edits)

    Returns:
        dict of column values
    """
    is_tour = resource['kind'] == TOUR_GUIDE
    fields = {}

    def present(*keys):
        return not partial or any(key in data for key in keys)

    if present('title'):
        title = sanitize_input(data.get('title'), max_length=200)
        if not title:
            raise ValidationError(MESSAGES['field_required'].format(field='title'))
        fields['title'] = title

    if present('purpose'):
        purpose = sanitize_input(data.get('purpose'), max_length=500)
        if not purpose and not is_tour:
            raise ValidationError(MESSAGES['field_required'].format(field='purpose'))
        fields['purpose'] = purpose

    if present('participants'):
        fields['participants'] = validate_participants(resource, data.get('participants', 1))

    if present('contact_person', 'contact_name', 'contact_phone', 'contact_email'):
        fields.update(validate_contact(data, required=is_tour))

    if present('notes'):
        fields['notes'] = sanitize_input(data.get('notes'), max_length=500)

    if is_tour:
        if present('tour_type'):
            fields['tour_type'] = _choice(data, 'tour_type', TOUR_TYPES, 'general')
        if present('age_group'):
            fields['age_group'] = _choice(data, 'age_group', AGE_GROUPS, 'adults')
        if present('language'):
            fields['language'] = _choice(data, 'language', LANGUAGES, 'indonesia')
    elif present('equipment'):
        equipment = data.get('equipment')
        if isinstance(equipment, str) and equipment.strip().startswith('['):
            try:
                equipment = json.loads(equipment)
            except ValueError:
                raise ValidationError(MESSAGES['invalid_payload'])
        fields['equipment'] = ','.join(parse_csv_list(equipment))

    return fields


def has_interval_change(data: dict) -> bool:
    """Check if request data touches the reservation interval."""
    return any(key in data for key in INTERVAL_KEYS)
