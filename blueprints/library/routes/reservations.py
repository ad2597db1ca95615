"""
Reservation API routes: requester lifecycle and admin moderation.
"""

from flask import request, current_app
from flask_login import login_required, current_user

from models.reservation import (
    require_reservation, create_reservation, update_pending_reservation, delete_reservation,
    cancel_reservation, change_reservation_status, get_status_history,
    get_user_reservations, get_reservations_filtered, get_upcoming_reservations
)
from utils.api_response import api_success, api_paginated
from utils.decorators import permission_required
from utils.exceptions import PermissionDeniedError, ValidationError
from utils.helpers import get_request_data, parse_int
from utils.messages import MESSAGES, HISTORY_NOTES
from utils.permissions import has_permission
from utils.uploads import save_document, delete_document
from utils.validators import validate_date_format

STATUS_MESSAGES = {
    'approved': MESSAGES['reservation_approved'],
    'rejected': MESSAGES['reservation_rejected'],
    'completed': MESSAGES['reservation_completed'],
}


def _require_owner(reservation: dict) -> None:
    if reservation['requester_id'] != current_user.id:
        raise PermissionDeniedError(MESSAGES['not_owner'])


def _require_owner_or_admin(reservation: dict) -> None:
    if reservation['requester_id'] != current_user.id and \
            not has_permission(current_user, 'reservations.view_all'):
        raise PermissionDeniedError(MESSAGES['not_owner'])


def register_routes(bp):
    """Register reservation API routes on the blueprint."""

    # ============================================================================
    # REQUESTER ROUTES
    # ============================================================================

    @bp.route('/reservations', methods=['POST'])
    @login_required
    @permission_required('reservations.create')
    def reservations_create():
        """
        Submit a reservation request (JSON or multipart with 'document').

        The reservation starts pending; the conflict check runs against
        pending and approved reservations on the same resource.
        """
        data = get_request_data()
        resource_id = parse_int(data.get('resource_id'), 'resource_id')

        document_path = save_document(request.files.get('document'))
        try:
            reservation = create_reservation(current_user.id, resource_id, data,
                                             document_path=document_path)
        except Exception:
            delete_document(document_path)
            raise

        return api_success(data=reservation, message=MESSAGES['reservation_created'], status=201)

    @bp.route('/reservations/mine')
    @login_required
    @permission_required('reservations.view_own')
    def reservations_mine():
        """List the current user's reservations (?status=&kind=)."""
        reservations = get_user_reservations(
            current_user.id,
            status=request.args.get('status') or None,
            kind=request.args.get('kind') or None
        )
        return api_success(data=reservations, count=len(reservations))

    @bp.route('/reservations/<int:reservation_id>')
    @login_required
    def reservations_detail(reservation_id):
        """Reservation detail with status history (owner or admin)."""
        reservation = require_reservation(reservation_id)
        _require_owner_or_admin(reservation)
        return api_success(data=reservation)

    @bp.route('/reservations/<int:reservation_id>/history')
    @login_required
    def reservations_history(reservation_id):
        """Status history, oldest first (owner or admin)."""
        reservation = require_reservation(reservation_id, with_history=False)
        _require_owner_or_admin(reservation)
        history = get_status_history(reservation_id)
        return api_success(data=history, count=len(history))

    @bp.route('/reservations/<int:reservation_id>', methods=['PUT'])
    @login_required
    def reservations_update(reservation_id):
        """Edit a pending reservation that has not started (owner only)."""
        reservation = require_reservation(reservation_id, with_history=False)
        _require_owner(reservation)

        data = get_request_data()
        document_path = save_document(request.files.get('document'))
        try:
            updated, replaced_document = update_pending_reservation(
                reservation_id, data, document_path=document_path
            )
        except Exception:
            delete_document(document_path)
            raise

        delete_document(replaced_document)
        return api_success(data=updated, message=MESSAGES['reservation_updated'])

    @bp.route('/reservations/<int:reservation_id>/cancel', methods=['PATCH'])
    @login_required
    def reservations_cancel(reservation_id):
        """Cancel a pending/approved reservation before it starts (owner only)."""
        reservation = require_reservation(reservation_id, with_history=False)
        _require_owner(reservation)

        data = get_request_data()
        note = (data.get('reason') or '').strip() or HISTORY_NOTES['cancelled_by_user']
        updated = cancel_reservation(reservation_id, current_user.id, note=note)
        return api_success(data=updated, message=MESSAGES['reservation_cancelled'])

    @bp.route('/reservations/<int:reservation_id>', methods=['DELETE'])
    @login_required
    def reservations_delete(reservation_id):
        """Delete a cancelled/rejected reservation (tours: also completed)."""
        reservation = require_reservation(reservation_id, with_history=False)
        _require_owner(reservation)

        document_path = delete_reservation(reservation_id)
        delete_document(document_path)
        return api_success(message=MESSAGES['reservation_deleted'])

    # ============================================================================
    # ADMIN ROUTES
    # ============================================================================

    @bp.route('/reservations')
    @login_required
    @permission_required('reservations.view_all')
    def reservations_list():
        """
        Paginated reservation list.

        Query params: status, kind, resource_id, date_from, date_to, search,
        page, per_page.
        """
        date_from = request.args.get('date_from') or None
        date_to = request.args.get('date_to') or None
        for value in (date_from, date_to):
            if value and not validate_date_format(value):
                raise ValidationError(MESSAGES['invalid_date'])

        result = get_reservations_filtered(
            status=request.args.get('status') or None,
            kind=request.args.get('kind') or None,
            resource_id=request.args.get('resource_id', type=int),
            date_from=date_from,
            date_to=date_to,
            search=request.args.get('search') or None,
            page=request.args.get('page', 1, type=int),
            per_page=request.args.get('per_page', current_app.config['ITEMS_PER_PAGE'], type=int)
        )
        return api_paginated(result)

    @bp.route('/reservations/upcoming')
    @login_required
    @permission_required('reservations.view_all')
    def reservations_upcoming():
        """Approved reservations starting in the next ?days= (default 7)."""
        days = request.args.get('days', 7, type=int)
        reservations = get_upcoming_reservations(days=days)
        return api_success(data=reservations, count=len(reservations))

    @bp.route('/reservations/<int:reservation_id>/status', methods=['PATCH'])
    @login_required
    @permission_required('reservations.manage')
    def reservations_change_status(reservation_id):
        """
        Approve, reject or complete a reservation.

        Request body: status, admin_note (optional), assigned_guide (tours, optional).
        """
        data = get_request_data()
        status = data.get('status')
        updated = change_reservation_status(
            reservation_id,
            status,
            current_user.id,
            admin_note=(data.get('admin_note') or '').strip(),
            assigned_guide=data.get('assigned_guide')
        )
        return api_success(data=updated, message=STATUS_MESSAGES[status])

    @bp.route('/reservations/admin/<int:reservation_id>', methods=['DELETE'])
    @login_required
    @permission_required('reservations.manage')
    def reservations_admin_delete(reservation_id):
        """Delete any reservation regardless of status."""
        document_path = delete_reservation(reservation_id, force=True)
        delete_document(document_path)
        current_app.logger.info('Reservation %s deleted by admin %s', reservation_id,
                                current_user.username)
        return api_success(message=MESSAGES['reservation_deleted_admin'])
