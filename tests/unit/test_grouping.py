"""
Unit tests for exercise grouping and display numbering.

Covers first/last-in-group detection, numbering, group runs, structural
validation and the pure list edits (new group, append, remove, shared sets).
"""

import pytest

from domain.models import GroupType
from domain.services.grouping import (
    GroupingError,
    append_to_circuit,
    compute_numbering,
    count_group_headers,
    display_number,
    group_runs,
    is_first_in_group,
    is_last_in_group,
    new_group,
    remove_at,
    set_group_sets,
    validate_grouping,
)
from tests.fakes import make_exercise

pytestmark = pytest.mark.unit


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def superset_session():
    """[A, B(superset g1), C(superset g1), D]."""
    return [
        make_exercise("A", id="a"),
        make_exercise("B", id="b", group_type=GroupType.SUPERSET, group_id="g1"),
        make_exercise("C", id="c", group_type=GroupType.SUPERSET, group_id="g1"),
        make_exercise("D", id="d"),
    ]


@pytest.fixture
def circuit_session():
    """[Warmup, X, Y, Z (circuit g2), Cooldown]."""
    return [
        make_exercise("Warmup", id="w"),
        make_exercise("X", id="x", sets=4, group_type=GroupType.CIRCUIT, group_id="g2"),
        make_exercise("Y", id="y", sets=4, group_type=GroupType.CIRCUIT, group_id="g2"),
        make_exercise("Z", id="z", sets=4, group_type=GroupType.CIRCUIT, group_id="g2"),
        make_exercise("Cooldown", id="cd"),
    ]


# =============================================================================
# Numbering
# =============================================================================


class TestNumbering:
    """Tests for first/last-in-group detection and display numbers."""

    def test_empty_session_has_no_numbers(self):
        """Test that an empty list has no numbers."""
        assert compute_numbering([]) == []

    def test_superset_shares_one_number(self, superset_session):
        """Test that superset members share one display number."""
        assert compute_numbering(superset_session) == [1, 2, 2, 3]

    def test_first_and_last_in_group(self, superset_session):
        """Test first/last detection at group edges."""
        assert is_first_in_group(superset_session, 1) is True
        assert is_first_in_group(superset_session, 2) is False
        assert is_last_in_group(superset_session, 1) is False
        assert is_last_in_group(superset_session, 2) is True

    def test_ungrouped_is_its_own_unit(self, superset_session):
        """Test that an ungrouped exercise is both first and last."""
        assert is_first_in_group(superset_session, 0) is True
        assert is_last_in_group(superset_session, 0) is True
        assert is_first_in_group(superset_session, 3) is True
        assert is_last_in_group(superset_session, 3) is True

    def test_consecutive_ungrouped_are_numbered_separately(self):
        """Test that adjacent ungrouped exercises get their own numbers."""
        exercises = [make_exercise("A"), make_exercise("B"), make_exercise("C")]
        assert compute_numbering(exercises) == [1, 2, 3]

    def test_index_out_of_range_raises(self, superset_session):
        """Test that an out-of-range index raises IndexError."""
        with pytest.raises(IndexError):
            is_first_in_group(superset_session, 4)
        with pytest.raises(IndexError):
            display_number(superset_session, -1)

    def test_numbering_depends_only_on_prefix(self, superset_session):
        """Appending exercises never changes earlier numbers."""
        before = compute_numbering(superset_session)
        extended = superset_session + [
            make_exercise("E", group_type=GroupType.SUPERSET, group_id="g9"),
            make_exercise("F", group_type=GroupType.SUPERSET, group_id="g9"),
        ]
        assert compute_numbering(extended)[: len(before)] == before
        for index in range(len(superset_session)):
            assert display_number(extended, index) == before[index]

    def test_single_group_gets_one_number(self, circuit_session):
        """Test that a circuit counts as one unit."""
        members = circuit_session[1:4]
        assert compute_numbering(members) == [1, 1, 1]

    def test_same_id_different_type_is_not_same_group(self):
        """Test that group membership needs equal type as well as id."""
        exercises = [
            make_exercise("A", group_type=GroupType.SUPERSET, group_id="g1"),
            make_exercise("B", group_type=GroupType.CIRCUIT, group_id="g1"),
        ]
        assert compute_numbering(exercises) == [1, 2]


# =============================================================================
# Runs and Validation
# =============================================================================


class TestGroupRuns:
    """Tests for group_runs() and count_group_headers()."""

    def test_runs_cover_every_index(self, circuit_session):
        """Test that runs tile the list without gaps."""
        runs = group_runs(circuit_session)

        assert [(run.start, run.end) for run in runs] == [(0, 0), (1, 3), (4, 4)]
        assert [run.display_number for run in runs] == [1, 2, 3]
        assert runs[1].group_type == GroupType.CIRCUIT
        assert runs[1].size == 3
        assert runs[1].is_group is True
        assert runs[0].is_group is False

    def test_count_group_headers(self, superset_session, circuit_session):
        """Test that only grouped runs get a header."""
        assert count_group_headers(superset_session) == 1
        assert count_group_headers(circuit_session) == 1
        assert count_group_headers(superset_session + circuit_session) == 2
        assert count_group_headers([]) == 0


class TestValidateGrouping:
    """Tests for validate_grouping()."""

    def test_valid_sessions_pass(self, superset_session, circuit_session):
        """Test that well-formed sessions pass."""
        validate_grouping(superset_session)
        validate_grouping(circuit_session)
        validate_grouping([])

    def test_non_contiguous_group_rejected(self):
        """Test that an interleaved group is rejected."""
        exercises = [
            make_exercise("A", group_type=GroupType.SUPERSET, group_id="g1"),
            make_exercise("B"),
            make_exercise("C", group_type=GroupType.SUPERSET, group_id="g1"),
        ]
        with pytest.raises(GroupingError, match="not contiguous"):
            validate_grouping(exercises)

    def test_mixed_types_rejected(self):
        """Test that one group id with two types is rejected."""
        exercises = [
            make_exercise("A", group_type=GroupType.SUPERSET, group_id="g1"),
            make_exercise("B", group_type=GroupType.CIRCUIT, group_id="g1"),
        ]
        with pytest.raises(GroupingError, match="mixes"):
            validate_grouping(exercises)

    def test_grouping_error_is_value_error(self):
        """Test that GroupingError is a ValueError."""
        assert issubclass(GroupingError, ValueError)


# =============================================================================
# Edits
# =============================================================================


class TestNewGroup:
    """Tests for new_group()."""

    def test_superset_has_two_members(self):
        """Test that a new superset has two members."""
        members = new_group(GroupType.SUPERSET, session_id="s1")

        assert len(members) == 2
        assert len({m.group_id for m in members}) == 1
        assert all(m.group_type == GroupType.SUPERSET for m in members)
        assert all(m.session_id == "s1" and m.is_new for m in members)

    def test_circuit_has_three_members(self):
        """Test that a new circuit has three members."""
        members = new_group(GroupType.CIRCUIT, group_id="fixed")

        assert len(members) == 3
        assert {m.group_id for m in members} == {"fixed"}

    def test_fresh_ids_per_group(self):
        """Test that each new group gets its own id."""
        first = new_group(GroupType.SUPERSET)
        second = new_group(GroupType.SUPERSET)
        assert first[0].group_id != second[0].group_id


class TestAppendToCircuit:
    """Tests for append_to_circuit()."""

    def test_inserts_after_anchor_with_group_fields(self, circuit_session):
        """Test that the new member lands after the anchor with its group fields."""
        result = append_to_circuit(circuit_session, 2, make_exercise("New", sets=0))

        inserted = result[3]
        assert inserted.name == "New"
        assert inserted.group_id == "g2"
        assert inserted.group_type == GroupType.CIRCUIT
        assert inserted.sets == 4
        assert [e.name for e in result] == ["Warmup", "X", "Y", "New", "Z", "Cooldown"]

    def test_group_stays_contiguous_and_shares_number(self, circuit_session):
        """Test that the grown circuit stays one numbered unit."""
        result = append_to_circuit(circuit_session, 3, make_exercise("New"))

        validate_grouping(result)
        assert compute_numbering(result) == [1, 2, 2, 2, 2, 3]

    def test_input_is_not_mutated(self, circuit_session):
        """Test that the input list is left untouched."""
        before = list(circuit_session)
        append_to_circuit(circuit_session, 1, make_exercise("New"))
        assert circuit_session == before

    def test_keeps_own_sets_when_given(self, circuit_session):
        """Test that an explicit sets value is kept."""
        result = append_to_circuit(circuit_session, 1, make_exercise("New", sets=2))
        assert result[2].sets == 2

    def test_ungrouped_anchor_rejected(self, circuit_session):
        """Test that an ungrouped anchor raises GroupingError."""
        with pytest.raises(GroupingError, match="not in a group"):
            append_to_circuit(circuit_session, 0, make_exercise("New"))

    def test_superset_anchor_rejected(self, superset_session):
        """Test that a superset cannot grow."""
        with pytest.raises(GroupingError, match="only circuits"):
            append_to_circuit(superset_session, 1, make_exercise("New"))


class TestRemoveAndSets:
    """Tests for remove_at() and set_group_sets()."""

    def test_remove_renumbers_from_order(self, superset_session):
        """Test that numbers are recomputed after a removal."""
        result = remove_at(superset_session, 0)

        assert [e.id for e in result] == ["b", "c", "d"]
        assert compute_numbering(result) == [1, 1, 2]

    def test_remove_leaves_remaining_membership(self, superset_session):
        """Test that remaining members keep their group."""
        result = remove_at(superset_session, 1)

        assert result[1].group_id == "g1"
        assert compute_numbering(result) == [1, 2, 3]

    def test_set_group_sets_updates_whole_group(self, circuit_session):
        """Test that every member of the group gets the new sets."""
        result = set_group_sets(circuit_session, 2, 5)

        assert [e.sets for e in result] == [3, 5, 5, 5, 3]

    def test_set_group_sets_on_ungrouped_updates_one(self, circuit_session):
        """Test that an ungrouped exercise is updated alone."""
        result = set_group_sets(circuit_session, 0, 1)

        assert [e.sets for e in result] == [1, 4, 4, 4, 3]

    def test_negative_sets_rejected(self, circuit_session):
        """Test that negative sets raise."""
        with pytest.raises(ValueError):
            set_group_sets(circuit_session, 0, -1)
