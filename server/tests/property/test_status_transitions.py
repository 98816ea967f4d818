"""Property-based tests for tour lifecycle invariants."""

from datetime import date, timedelta
from uuid import uuid4

from hypothesis import given
from hypothesis import strategies as st

from tour_coordinator.models.staff import StaffMember, StaffRole
from tour_coordinator.models.tour import TourStatus
from tour_coordinator.services.lifecycle_service import LIFECYCLE_ORDER, can_transition

# Strategies for generating test data
statuses = st.sampled_from(list(TourStatus))
days = st.dates(min_value=date(2030, 1, 1), max_value=date(2030, 12, 31))
tour_ids = st.uuids()


@given(current=statuses, target=statuses)
def test_allowed_moves_only_go_forward(current, target):
    """Every allowed move strictly advances along the lifecycle."""
    if can_transition(current, target):
        assert LIFECYCLE_ORDER[target] > LIFECYCLE_ORDER[current]


@given(current=statuses, target=statuses)
def test_finished_tours_never_move(current, target):
    """Ended and Rejected tours are final."""
    if current in (TourStatus.ENDED, TourStatus.REJECTED):
        assert not can_transition(current, target)


@given(current=statuses)
def test_assignment_states_are_not_reachable_by_status_update(current):
    """Pending, Confirmed, Accepted and Rejected have dedicated operations."""
    for target in (TourStatus.PENDING, TourStatus.CONFIRMED, TourStatus.ACCEPTED, TourStatus.REJECTED):
        assert not can_transition(current, target)


@given(path=st.lists(statuses, max_size=10))
def test_any_walk_from_confirmed_reaches_ended_in_at_most_three_steps(path):
    """Following only allowed moves, a confirmed tour takes at most three steps."""
    current = TourStatus.CONFIRMED
    steps = 0
    for target in path:
        if can_transition(current, target):
            current = target
            steps += 1

    assert steps <= 3
    if current == TourStatus.ENDED:
        assert not any(can_transition(current, s) for s in TourStatus)


@given(
    operations=st.lists(
        st.tuples(days, st.booleans(), st.one_of(st.none(), tour_ids)),
        max_size=30,
    )
)
def test_daily_availability_tracks_assigned_tours_without_duplicates(operations):
    """Per-date overrides hold each tour at most once and drop it when freed."""
    staff = StaffMember(id=uuid4(), role=StaffRole.TOUR_GUIDE, daily_availability={})

    for day, is_available, tour_id in operations:
        staff.set_availability_for_date(day, is_available, tour_id)

        entry = staff.daily_availability[day.isoformat()]
        assert entry["is_available"] is is_available
        assert staff.is_available_for_date(day) is is_available
        assert len(entry["assigned_tours"]) == len(set(entry["assigned_tours"]))
        if tour_id is not None:
            assert (str(tour_id) in entry["assigned_tours"]) is (not is_available)


@given(day=days, offset=st.integers(min_value=1, max_value=30))
def test_days_without_override_are_available(day, offset):
    staff = StaffMember(id=uuid4(), role=StaffRole.SAFARI_DRIVER, daily_availability={})
    staff.set_availability_for_date(day, False)

    assert not staff.is_available_for_date(day)
    assert staff.is_available_for_date(day + timedelta(days=offset))
