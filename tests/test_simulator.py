import pytest

from wizard.domain import GoalDescriptor
from wizard.simulator import DEFAULT_REGION, REGION_BY_PREFIX, UNKNOWN_CODE, UNKNOWN_GOAL, region_for, simulate


def test_tokyo_prefix_and_last_segment():
    narrative = simulate("A > B > Cを予約したい", "1010021")
    assert REGION_BY_PREFIX["1"] in narrative
    assert "Cを予約したい" in narrative
    assert "A > B > Cを予約したい" in narrative
    assert "101-0021" in narrative


def test_osaka_prefix():
    assert region_for("5300001") == REGION_BY_PREFIX["5"]
    assert REGION_BY_PREFIX["5"] in simulate("X > Y", "5300001")


@pytest.mark.parametrize("code", ["0600001", "9800011", "3300063"])
def test_other_prefixes_get_generic_region(code):
    assert region_for(code) == DEFAULT_REGION


def test_is_deterministic():
    assert simulate("A > B", "1000001") == simulate("A > B", "1000001")


def test_degrades_on_malformed_input():
    narrative = simulate("", "abc")
    assert UNKNOWN_GOAL in narrative
    assert UNKNOWN_CODE in narrative
    assert DEFAULT_REGION in narrative


def test_empty_code():
    narrative = simulate("A > B", "")
    assert DEFAULT_REGION in narrative
    assert UNKNOWN_CODE in narrative
    assert "B" in narrative


def test_last_segment_keeps_angle_brackets_inside_a_choice():
    goal = GoalDescriptor(selections=["仕事の効率を上げたい", "A>Bの比較をしたい"], locality_code="1010021")
    narrative = simulate(goal.goal_path, goal.locality_code)
    assert "「A>Bの比較をしたい」" in narrative


def test_last_segment_accepts_unspaced_separator():
    assert "「Cを予約したい」" in simulate("A>B>Cを予約したい", "1010021")
