"""
Tests for reservation creation, editing and deletion.
"""

import threading
import pytest
from datetime import timedelta

from conftest import at, iso


def _room_request(day, start_hour=9, end_hour=11, **fields):
    data = {
        'title': 'Bedah Buku',
        'purpose': 'Diskusi buku bersama komunitas',
        'participants': 10,
        'start_time': iso(at(day, start_hour)),
        'end_time': iso(at(day, end_hour)),
    }
    data.update(fields)
    return data


class TestCreateReservation:
    """Tests for create_reservation."""

    def test_creates_pending_with_history(self, app, catalog, future_day):
        from models.reservation import create_reservation

        with app.app_context():
            reservation = create_reservation(catalog['user_id'], catalog['room_id'],
                                             _room_request(future_day))

        assert reservation['status'] == 'pending'
        assert reservation['resource_name'] == 'Ruang Seminar Utama'
        assert reservation['start_time'] == iso(at(future_day, 9))
        assert [h['status'] for h in reservation['status_history']] == ['pending']

    def test_overlapping_request_conflicts(self, app, catalog, future_day, make_reservation):
        from models.reservation import create_reservation
        from utils.exceptions import ConflictError

        existing = make_reservation(start_hour=9, end_hour=11, status='approved')

        with app.app_context():
            with pytest.raises(ConflictError) as exc_info:
                create_reservation(catalog['user_id'], catalog['room_id'],
                                   _room_request(future_day, 10, 12))

        assert exc_info.value.conflict['id'] == existing['id']

    def test_back_to_back_request_succeeds(self, app, catalog, future_day, make_reservation):
        from models.reservation import create_reservation

        make_reservation(start_hour=9, end_hour=11, status='approved')

        with app.app_context():
            reservation = create_reservation(catalog['user_id'], catalog['room_id'],
                                             _room_request(future_day, 11, 13))

        assert reservation['status'] == 'pending'

    def test_rejected_window_can_be_rebooked(self, app, catalog, future_day, make_reservation):
        from models.reservation import create_reservation

        make_reservation(start_hour=9, end_hour=11, status='rejected')

        with app.app_context():
            reservation = create_reservation(catalog['user_id'], catalog['room_id'],
                                             _room_request(future_day, 9, 11))

        assert reservation['status'] == 'pending'

    @pytest.mark.parametrize('overrides', [
        {'start_time': None},
        {'start_time': 'besok pagi'},
        {'end_time': '2000-01-01T10:00:00'},
        {'title': ''},
        {'purpose': ''},
        {'participants': 0},
        {'participants': 101},
        {'participants': 'banyak'},
        {'contact_phone': '12345'},
        {'contact_email': 'bukan-email'},
    ])
    def test_invalid_input(self, app, catalog, future_day, overrides):
        from models.reservation import create_reservation
        from utils.exceptions import ValidationError

        with app.app_context():
            with pytest.raises(ValidationError):
                create_reservation(catalog['user_id'], catalog['room_id'],
                                   _room_request(future_day, **overrides))

    def test_end_before_start(self, app, catalog, future_day):
        from models.reservation import create_reservation
        from utils.exceptions import ValidationError

        with app.app_context():
            with pytest.raises(ValidationError):
                create_reservation(catalog['user_id'], catalog['room_id'],
                                   _room_request(future_day, 11, 9))

    def test_outside_operating_hours(self, app, catalog, future_day):
        from models.reservation import create_reservation
        from utils.exceptions import ValidationError

        with app.app_context():
            with pytest.raises(ValidationError):
                create_reservation(catalog['user_id'], catalog['room_id'],
                                   _room_request(future_day, 7, 9))
            with pytest.raises(ValidationError):
                create_reservation(catalog['user_id'], catalog['room_id'],
                                   _room_request(future_day, 16, 18))

    def test_full_operating_day(self, app, catalog, future_day):
        from models.reservation import create_reservation

        with app.app_context():
            reservation = create_reservation(catalog['user_id'], catalog['room_id'],
                                             _room_request(future_day, 8, 17))

        assert reservation['end_time'] == iso(at(future_day, 17))

    def test_past_start(self, app, catalog, future_day):
        from models.reservation import create_reservation
        from utils.exceptions import ValidationError

        with app.app_context():
            with pytest.raises(ValidationError):
                create_reservation(catalog['user_id'], catalog['room_id'],
                                   _room_request(future_day),
                                   now=at(future_day, 10))

    def test_timezone_offset_is_converted(self, app, catalog, future_day):
        """08:00Z is 15:00 in Asia/Jakarta (UTC+7)."""
        from models.reservation import create_reservation

        data = _room_request(future_day)
        data['start_time'] = f'{future_day.isoformat()}T08:00:00Z'
        data['end_time'] = f'{future_day.isoformat()}T09:00:00Z'

        with app.app_context():
            reservation = create_reservation(catalog['user_id'], catalog['room_id'], data)

        assert reservation['start_time'] == iso(at(future_day, 15))
        assert reservation['end_time'] == iso(at(future_day, 16))

    def test_inactive_resource(self, app, catalog, future_day):
        from models.reservation import create_reservation
        from models.resource import set_resource_active
        from utils.exceptions import ResourceUnavailableError

        with app.app_context():
            set_resource_active(catalog['room_id'], False)
            with pytest.raises(ResourceUnavailableError):
                create_reservation(catalog['user_id'], catalog['room_id'],
                                   _room_request(future_day))

    def test_equipment_list(self, app, catalog, future_day):
        from models.reservation import create_reservation

        with app.app_context():
            reservation = create_reservation(
                catalog['user_id'], catalog['room_id'],
                _room_request(future_day, equipment=['Proyektor', 'Mikrofon'])
            )

        assert reservation['equipment'] == ['Proyektor', 'Mikrofon']


class TestCreateTour:
    """Tour-specific rules."""

    def _tour_request(self, day, hour=10, **fields):
        data = {
            'title': 'Tur Perpustakaan',
            'date': day.isoformat(),
            'time': f'{hour:02d}:00',
            'participants': 20,
            'tour_type': 'academic',
            'age_group': 'teenagers',
            'language': 'english',
            'contact_person': {'name': 'Pak Hasan', 'phone': '+6281234567890'},
        }
        data.update(fields)
        return data

    def test_default_duration(self, app, catalog, future_day):
        from models.reservation import create_reservation

        with app.app_context():
            tour = create_reservation(catalog['user_id'], catalog['tour_id'],
                                      self._tour_request(future_day))

        assert tour['duration_minutes'] == 60
        assert tour['end_time'] == iso(at(future_day, 11))
        assert tour['tour_type'] == 'academic'
        assert tour['language'] == 'english'

    def test_blank_duration_uses_default(self, app, catalog, future_day):
        from models.reservation import create_reservation

        with app.app_context():
            tour = create_reservation(catalog['user_id'], catalog['tour_id'],
                                      self._tour_request(future_day, duration=''))

        assert tour['duration_minutes'] == 60

    def test_last_slot_ends_at_close(self, app, catalog, future_day):
        from models.reservation import create_reservation

        with app.app_context():
            tour = create_reservation(catalog['user_id'], catalog['tour_id'],
                                      self._tour_request(future_day, hour=16))

        assert tour['end_time'] == iso(at(future_day, 17))

    @pytest.mark.parametrize('overrides', [
        {'duration': 0},
        {'duration': '0'},
        {'duration': -30},
        {'duration': 20},
        {'duration': 240},
        {'participants': 51},
        {'tour_type': 'party'},
        {'language': 'klingon'},
        {'contact_person': {'name': 'Pak Hasan'}},
        {'contact_person': {'name': 'Pak Hasan', 'phone': '021-555'}},
    ])
    def test_invalid_tour(self, app, catalog, future_day, overrides):
        from models.reservation import create_reservation
        from utils.exceptions import ValidationError

        with app.app_context():
            with pytest.raises(ValidationError):
                create_reservation(catalog['user_id'], catalog['tour_id'],
                                   self._tour_request(future_day, **overrides))

    def test_overlapping_tour_conflicts(self, app, catalog, future_day, make_reservation):
        """One guide: a pending 10:00 tour blocks admission of a 10:30 tour."""
        from models.reservation import create_reservation
        from utils.exceptions import ConflictError

        make_reservation(resource_id=catalog['tour_id'], start_hour=10, end_hour=11)

        with app.app_context():
            with pytest.raises(ConflictError):
                create_reservation(catalog['user_id'], catalog['tour_id'],
                                   self._tour_request(future_day, hour=10, time='10:30'))


class TestUpdatePendingReservation:
    """Tests for update_pending_reservation."""

    def test_edit_fields(self, app, make_reservation):
        from models.reservation import update_pending_reservation

        reservation = make_reservation()

        with app.app_context():
            updated, replaced = update_pending_reservation(
                reservation['id'], {'title': 'Rapat Evaluasi', 'participants': 8}
            )

        assert updated['title'] == 'Rapat Evaluasi'
        assert updated['participants'] == 8
        assert updated['start_time'] == reservation['start_time']
        assert replaced is None

    def test_move_interval(self, app, future_day, make_reservation):
        from models.reservation import update_pending_reservation

        reservation = make_reservation(start_hour=9, end_hour=11)

        with app.app_context():
            updated, _ = update_pending_reservation(reservation['id'], {
                'start_time': iso(at(future_day, 10)),
                'end_time': iso(at(future_day, 12)),
            })

        assert updated['start_time'] == iso(at(future_day, 10))

    def test_tour_time_only_keeps_day(self, app, catalog, future_day, make_reservation):
        from models.reservation import update_pending_reservation

        tour = make_reservation(resource_id=catalog['tour_id'], start_hour=10, end_hour=11)

        with app.app_context():
            updated, _ = update_pending_reservation(tour['id'], {'time': '14:00'})

        assert updated['start_time'] == iso(at(future_day, 14))
        assert updated['end_time'] == iso(at(future_day, 15))

    def test_tour_date_only_keeps_time(self, app, catalog, future_day, make_reservation):
        from models.reservation import update_pending_reservation

        tour = make_reservation(resource_id=catalog['tour_id'], start_hour=10, end_hour=11)
        next_day = future_day + timedelta(days=1)

        with app.app_context():
            updated, _ = update_pending_reservation(tour['id'], {'date': next_day.isoformat()})

        assert updated['start_time'] == iso(at(next_day, 10))
        assert updated['duration_minutes'] == 60

    def test_move_into_conflict(self, app, future_day, make_reservation):
        from models.reservation import update_pending_reservation
        from utils.exceptions import ConflictError

        make_reservation(start_hour=13, end_hour=15, status='approved')
        reservation = make_reservation(start_hour=9, end_hour=11)

        with app.app_context():
            with pytest.raises(ConflictError):
                update_pending_reservation(reservation['id'], {
                    'start_time': iso(at(future_day, 12)),
                    'end_time': iso(at(future_day, 14)),
                })

    def test_only_pending_is_editable(self, app, make_reservation):
        from models.reservation import update_pending_reservation
        from utils.exceptions import InvalidTransitionError

        reservation = make_reservation(status='approved')

        with app.app_context():
            with pytest.raises(InvalidTransitionError):
                update_pending_reservation(reservation['id'], {'title': 'Baru'})

    def test_not_after_start(self, app, future_day, make_reservation):
        from models.reservation import update_pending_reservation
        from utils.exceptions import ValidationError

        reservation = make_reservation(start_hour=9, end_hour=11)

        with app.app_context():
            with pytest.raises(ValidationError):
                update_pending_reservation(reservation['id'], {'title': 'Baru'},
                                           now=at(future_day, 10))

    def test_resource_is_immutable(self, app, catalog, make_reservation):
        from models.reservation import update_pending_reservation
        from utils.exceptions import ValidationError

        reservation = make_reservation()

        with app.app_context():
            with pytest.raises(ValidationError):
                update_pending_reservation(reservation['id'],
                                           {'resource_id': catalog['small_room_id']})

    def test_replacing_document_returns_old_path(self, app, make_reservation):
        from models.reservation import update_pending_reservation

        reservation = make_reservation()

        with app.app_context():
            _, replaced = update_pending_reservation(reservation['id'], {},
                                                     document_path='uploads/a.pdf')
            updated, replaced = update_pending_reservation(reservation['id'], {},
                                                           document_path='uploads/b.pdf')

        assert replaced == 'uploads/a.pdf'
        assert updated['document_path'] == 'uploads/b.pdf'


class TestDeleteReservation:
    """Tests for delete_reservation."""

    def test_pending_cannot_be_deleted(self, app, make_reservation):
        from models.reservation import delete_reservation
        from utils.exceptions import InvalidTransitionError

        reservation = make_reservation()

        with app.app_context():
            with pytest.raises(InvalidTransitionError):
                delete_reservation(reservation['id'])

    def test_rejected_can_be_deleted(self, app, make_reservation):
        from models.reservation import delete_reservation, get_reservation_by_id
        from models.reservation_history import get_status_history

        reservation = make_reservation(status='rejected')

        with app.app_context():
            delete_reservation(reservation['id'])
            assert get_reservation_by_id(reservation['id']) is None
            assert get_status_history(reservation['id']) == []

    def test_completed_room_cannot_be_deleted(self, app, catalog, make_reservation):
        from models.reservation import complete_reservation, delete_reservation
        from utils.exceptions import InvalidTransitionError

        reservation = make_reservation(status='approved')

        with app.app_context():
            complete_reservation(reservation['id'], catalog['admin_id'])
            with pytest.raises(InvalidTransitionError):
                delete_reservation(reservation['id'])

    def test_completed_tour_can_be_deleted(self, app, catalog, make_reservation):
        from models.reservation import complete_reservation, delete_reservation

        tour = make_reservation(resource_id=catalog['tour_id'], start_hour=9, end_hour=10,
                                status='approved')

        with app.app_context():
            complete_reservation(tour['id'], catalog['admin_id'])
            delete_reservation(tour['id'])

    def test_force_ignores_status(self, app, make_reservation):
        from models.reservation import delete_reservation, get_reservation_by_id

        reservation = make_reservation(status='approved')

        with app.app_context():
            delete_reservation(reservation['id'], force=True)
            assert get_reservation_by_id(reservation['id']) is None


class TestConcurrentAdmission:
    """Two overlapping requests racing for the same interval."""

    def test_only_one_of_two_concurrent_requests_persists(self, app, catalog, future_day):
        from database import get_db
        from models.reservation import create_reservation
        from utils.exceptions import ConflictError

        barrier = threading.Barrier(2)
        outcomes = []

        def submit(title):
            with app.app_context():
                barrier.wait()
                try:
                    create_reservation(catalog['user_id'], catalog['room_id'],
                                       _room_request(future_day, 9, 11, title=title))
                    outcomes.append('created')
                except ConflictError:
                    outcomes.append('conflict')

        threads = [threading.Thread(target=submit, args=(f'Permintaan {i}',)) for i in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=30)

        assert sorted(outcomes) == ['conflict', 'created']

        with app.app_context():
            count = get_db().execute('''
                SELECT COUNT(*) as count FROM reservations
                WHERE resource_id = ? AND status IN ('pending', 'approved')
            ''', (catalog['room_id'],)).fetchone()['count']

        assert count == 1


class TestQueries:
    """Tests for listing helpers."""

    def test_user_reservations(self, app, catalog, make_reservation):
        from models.reservation import get_user_reservations

        make_reservation(start_hour=9, end_hour=10)
        make_reservation(start_hour=10, end_hour=11, status='approved')
        make_reservation(start_hour=11, end_hour=12, requester_id=catalog['admin_id'])

        with app.app_context():
            mine = get_user_reservations(catalog['user_id'])
            approved = get_user_reservations(catalog['user_id'], status='approved')

        assert len(mine) == 2
        assert len(approved) == 1

    def test_filtered_pagination(self, app, make_reservation):
        from models.reservation import get_reservations_filtered

        for hour in range(8, 16):
            make_reservation(start_hour=hour, end_hour=hour + 1)

        with app.app_context():
            page = get_reservations_filtered(page=2, per_page=5)
            by_status = get_reservations_filtered(status='approved')

        assert page['total'] == 8
        assert page['pages'] == 2
        assert len(page['items']) == 3
        assert by_status['total'] == 0

    def test_upcoming(self, app, future_day, make_reservation):
        from models.reservation import get_upcoming_reservations

        approved = make_reservation(status='approved')
        make_reservation(start_hour=13, end_hour=14)

        with app.app_context():
            upcoming = get_upcoming_reservations(days=7, now=at(future_day, 0) - timedelta(days=1))

        assert [r['id'] for r in upcoming] == [approved['id']]

    def test_resource_calendar(self, app, catalog, future_day, make_reservation):
        from models.reservation import get_resource_calendar

        make_reservation(resource_id=catalog['tour_id'], start_hour=10, end_hour=11,
                         status='approved')

        with app.app_context():
            days = get_resource_calendar(catalog['tour_id'], future_day.year, future_day.month)

        day = next(d for d in days if d['date'] == future_day.isoformat())
        assert len(day['reservations']) == 1
        assert day['available_slots'] == 8

    @pytest.mark.parametrize('year', [0, 1899, 2101, 10000])
    def test_resource_calendar_year_bounds(self, app, catalog, year):
        from models.reservation import get_resource_calendar
        from utils.exceptions import ValidationError

        with app.app_context():
            with pytest.raises(ValidationError):
                get_resource_calendar(catalog['room_id'], year, 1)

    def test_page_size_clamped(self, app, make_reservation):
        from models.reservation import get_reservations_filtered

        make_reservation()

        with app.app_context():
            low = get_reservations_filtered(per_page=0)
            high = get_reservations_filtered(per_page=1000)

        assert low['per_page'] == 1
        assert low['pages'] == 1
        assert high['per_page'] == 100
