from itertools import product

import pytest

from src.qr_attendance.qr_attendance.core.enums import PadrinoTier
from src.qr_attendance.qr_attendance.core.exceptions import ValidationError
from src.qr_attendance.qr_attendance.eligibility.calculator.threshold_calculator import ThresholdEligibilityCalculator
from src.qr_attendance.qr_attendance.eligibility.thresholds import parse_tier_rules
from src.qr_attendance.qr_attendance.users.model import User


def _entries(attended: int, total: int) -> dict:
    return {f"ev{i}": {"scheduled": True, "attended": i < attended, "date": "2024-03-03"} for i in range(total)}


def _user(haciendas=(0, 0), workshops=(0, 0), meetings=(0, 0), meetings_key="meetings") -> User:
    events = {}
    for name, (attended, total) in (("haciendas", haciendas), ("workshops", workshops), (meetings_key, meetings)):
        if total:
            events[name] = _entries(attended, total)
    return User.from_dict("u1", {"name": "Ana", "events": events})


def test_no_events_is_red_with_zero_ratios():
    snapshot = ThresholdEligibilityCalculator().rank(_user())
    assert snapshot.tier == PadrinoTier.RED
    assert all(r.ratio == 0 for r in snapshot.ratios.values())


@pytest.mark.parametrize(
    "kwargs, expected",
    [
        ({"haciendas": (19, 20)}, PadrinoTier.ORANGE),
        ({"haciendas": (18, 20), "workshops": (5, 5), "meetings": (2, 2)}, PadrinoTier.RED),
        ({"haciendas": (20, 20), "workshops": (3, 5)}, PadrinoTier.GREEN),
        ({"haciendas": (20, 20), "workshops": (2, 5), "meetings": (2, 2)}, PadrinoTier.ORANGE),
        ({"haciendas": (20, 20), "workshops": (3, 5), "meetings": (2, 2)}, PadrinoTier.BLUE),
        ({"haciendas": (20, 20), "workshops": (3, 5), "meetings": (1, 2)}, PadrinoTier.GREEN),
    ],
)
def test_default_tiers(kwargs, expected):
    assert ThresholdEligibilityCalculator().rank(_user(**kwargs)).tier == expected


def test_group_meetings_count_as_meetings():
    user = _user(haciendas=(20, 20), workshops=(3, 5), meetings=(2, 2), meetings_key="groupMeetings")
    snapshot = ThresholdEligibilityCalculator().rank(user)
    assert snapshot.ratios["meetings"].total == 2
    assert snapshot.tier == PadrinoTier.BLUE


def test_unscheduled_entries_are_not_counted():
    user = User.from_dict(
        "u1",
        {"events": {"haciendas": {"a": {"scheduled": True, "attended": True}, "b": {"scheduled": False}}}},
    )
    ratio = ThresholdEligibilityCalculator().rank(user).ratios["haciendas"]
    assert (ratio.attended, ratio.total) == (1, 1)


def test_vacuous_category_is_satisfied_when_nothing_scheduled():
    user = _user(haciendas=(20, 20), workshops=(3, 5))
    assert ThresholdEligibilityCalculator().rank(user).tier == PadrinoTier.GREEN

    calculator = ThresholdEligibilityCalculator(vacuous_categories=["meetings"])
    assert calculator.rank(user).tier == PadrinoTier.BLUE


def test_tier_never_drops_when_attendance_grows():
    calculator = ThresholdEligibilityCalculator()
    totals = (4, 5, 2)
    for h, w, m in product(range(totals[0] + 1), range(totals[1] + 1), range(totals[2] + 1)):
        base = calculator.rank(_user((h, totals[0]), (w, totals[1]), (m, totals[2]))).tier.rank
        for dh, dw, dm in ((1, 0, 0), (0, 1, 0), (0, 0, 1)):
            nh, nw, nm = h + dh, w + dw, m + dm
            if nh > totals[0] or nw > totals[1] or nm > totals[2]:
                continue
            bumped = calculator.rank(_user((nh, totals[0]), (nw, totals[1]), (nm, totals[2]))).tier.rank
            assert bumped >= base


def test_configured_rules_replace_defaults():
    rules = parse_tier_rules({"orange": {"Workshop": 50}, "green": {"workshops": 50, "haciendas": 50}})
    calculator = ThresholdEligibilityCalculator(rules)

    assert calculator.rank(_user(workshops=(1, 2))).tier == PadrinoTier.ORANGE
    assert calculator.rank(_user(haciendas=(1, 2), workshops=(1, 2))).tier == PadrinoTier.GREEN


@pytest.mark.parametrize("raw", [{"red": {"haciendas": 10}}, {"purple": {}}, {"orange": {"haciendas": 150}}])
def test_invalid_rules_are_rejected(raw):
    with pytest.raises(ValidationError):
        parse_tier_rules(raw)


def test_snapshot_to_dict_rounds_ratios():
    snapshot = ThresholdEligibilityCalculator().rank(_user(haciendas=(2, 3)))
    data = snapshot.to_dict()
    assert data["tier"] == "red"
    assert data["ratios"]["haciendas"]["ratio"] == 66.7
    assert [r["category"] for r in data["requirements"]] == ["haciendas", "workshops", "meetings"]
