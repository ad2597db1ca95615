"""
Resource catalog API routes: listing, availability, slots and admin CRUD.
"""

from flask import request
from flask_login import login_required, current_user

from models.resource import (
    get_all_resources, get_resource, require_active_resource, get_tour_guide_resource,
    create_resource, update_resource, toggle_resource_status, delete_resource,
    UPDATABLE_FIELDS
)
from models.reservation import (
    check_availability, get_available_slots, get_resource_calendar,
    parse_date, resolve_interval
)
from utils.api_response import api_success
from utils.datetime_helpers import get_today
from utils.decorators import permission_required
from utils.exceptions import ValidationError
from utils.helpers import get_request_data, parse_bool, parse_int
from utils.messages import MESSAGES
from utils.permissions import has_permission


def _can_manage_resources() -> bool:
    return has_permission(current_user, 'resources.manage')


def _slots_response(resource: dict):
    target_date = parse_date(request.args.get('date'))
    if target_date < get_today():
        raise ValidationError(MESSAGES['past_date'])

    slots = get_available_slots(resource['id'], target_date,
                                slot_minutes=request.args.get('slot_minutes', type=int))
    return api_success(data={
        'resource_id': resource['id'],
        'date': target_date.isoformat(),
        'available_slots': slots,
    }, count=len(slots))


def register_routes(bp):
    """Register resource API routes on the blueprint."""

    # ============================================================================
    # PUBLIC CATALOG
    # ============================================================================

    @bp.route('/resources')
    def resources_list():
        """
        List catalog resources.

        Query params:
            kind: 'room' or 'tour-guide' (optional)
            include_inactive: Admins only (optional)
        """
        include_inactive = parse_bool(request.args.get('include_inactive', ''))
        active_only = not (include_inactive and _can_manage_resources())
        resources = get_all_resources(kind=request.args.get('kind') or None,
                                      active_only=active_only)
        return api_success(data=resources, count=len(resources))

    @bp.route('/resources/<int:resource_id>')
    def resources_detail(resource_id):
        """Get one resource; inactive resources are visible to admins only."""
        if _can_manage_resources():
            resource = get_resource(resource_id)
        else:
            resource = require_active_resource(resource_id)
        return api_success(data=resource)

    @bp.route('/resources/<int:resource_id>/check-availability', methods=['POST'])
    def resources_check_availability(resource_id):
        """
        Check whether an interval is free.

        Request body: start_time and end_time (rooms), or start_time / date+time
        and duration (tours); exclude_reservation_id (optional).
        """
        data = get_request_data()
        resource = require_active_resource(resource_id)
        start, end, _ = resolve_interval(resource, data)

        exclude_id = data.get('exclude_reservation_id')
        exclude_id = parse_int(exclude_id, 'exclude_reservation_id') if exclude_id else None

        result = check_availability(resource_id, start, end, exclude_reservation_id=exclude_id)
        return api_success(
            data=result,
            message=MESSAGES['available'] if result['available'] else MESSAGES['not_available'],
            available=result['available']
        )

    @bp.route('/resources/<int:resource_id>/available-slots')
    def resources_available_slots(resource_id):
        """Open slots on ?date=YYYY-MM-DD."""
        return _slots_response(require_active_resource(resource_id))

    @bp.route('/tours/available-slots')
    def tours_available_slots():
        """Open tour slots on ?date=YYYY-MM-DD."""
        return _slots_response(get_tour_guide_resource())

    @bp.route('/resources/<int:resource_id>/calendar')
    @login_required
    def resources_calendar(resource_id):
        """Month view (?year=&month=, default: current month)."""
        today = get_today()
        year = request.args.get('year', today.year, type=int)
        month = request.args.get('month', today.month, type=int)

        if not _can_manage_resources():
            require_active_resource(resource_id)
        days = get_resource_calendar(resource_id, year, month)
        return api_success(data={'year': year, 'month': month, 'days': days})

    # ============================================================================
    # ADMIN
    # ============================================================================

    @bp.route('/resources', methods=['POST'])
    @login_required
    @permission_required('resources.manage')
    def resources_create():
        """Create a resource."""
        data = get_request_data()
        if not data.get('name'):
            raise ValidationError(MESSAGES['field_required'].format(field='name'))

        fields = {k: v for k, v in data.items() if k not in ('name', 'kind', 'capacity')}
        resource_id = create_resource(
            data['name'], kind=data.get('kind', 'room'), capacity=data.get('capacity'), **fields
        )
        return api_success(data=get_resource(resource_id),
                           message=MESSAGES['resource_created'], status=201)

    @bp.route('/resources/<int:resource_id>', methods=['PUT'])
    @login_required
    @permission_required('resources.manage')
    def resources_update(resource_id):
        """Update resource fields (kind cannot change)."""
        data = get_request_data()
        update_resource(resource_id, **{k: v for k, v in data.items() if k in UPDATABLE_FIELDS})
        return api_success(data=get_resource(resource_id), message=MESSAGES['resource_updated'])

    @bp.route('/resources/<int:resource_id>/toggle-status', methods=['PATCH'])
    @login_required
    @permission_required('resources.manage')
    def resources_toggle_status(resource_id):
        """Activate/deactivate; deactivation cancels future reservations."""
        active, cancelled = toggle_resource_status(resource_id, changed_by=current_user.id)
        return api_success(
            data=get_resource(resource_id),
            message=MESSAGES['resource_activated'] if active else MESSAGES['resource_deactivated'],
            cancelled_reservations=cancelled
        )

    @bp.route('/resources/<int:resource_id>', methods=['DELETE'])
    @login_required
    @permission_required('resources.manage')
    def resources_delete(resource_id):
        """Delete a resource without reservation history."""
        delete_resource(resource_id)
        return api_success(message=MESSAGES['resource_deleted'])
