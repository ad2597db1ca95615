"""
Reservation data access functions.
Handles reservation CRUD, the status lifecycle, conflict checking and
tour slot availability.

This module re-exports all functions from the split modules:
- reservation_state.py: Status lifecycle and transitions
- reservation_crud.py: Create, read, update, delete operations
- reservation_queries.py: Listing, filtering and calendars
- reservation_availability.py: Interval conflict checking
- reservation_validation.py: Input parsing and interval rules
- tour_slots.py: Slot generation
"""

# =============================================================================
# RE-EXPORTS
# =============================================================================

# Status lifecycle
from .reservation_state import (
    # Constants
    PENDING,
    APPROVED,
    REJECTED,
    CANCELLED,
    COMPLETED,
    RESERVATION_STATUSES,
    VALID_TRANSITIONS,
    TERMINAL_STATUSES,
    # Rules
    get_allowed_transitions,
    is_terminal,
    validate_status_transition,
    # Transitions
    approve_reservation,
    reject_reservation,
    cancel_reservation,
    complete_reservation,
    change_reservation_status,
)

# History
from .reservation_history import (
    get_status_history,
)

# CRUD operations
from .reservation_crud import (
    get_reservation_by_id,
    require_reservation,
    create_reservation,
    update_pending_reservation,
    delete_reservation,
)

# Queries
from .reservation_queries import (
    get_user_reservations,
    get_reservations_filtered,
    get_upcoming_reservations,
    get_resource_calendar,
)

# Conflict checking
from .reservation_availability import (
    BLOCKING_STATUSES,
    intervals_overlap,
    find_conflicting_reservation,
    has_conflict,
    conflict_summary,
    check_availability,
)

# Validation
from .reservation_validation import (
    parse_datetime,
    parse_date,
    resolve_interval,
    validate_interval,
)

# Slots
from .tour_slots import (
    get_available_slots,
)
