from datetime import date

import pytest

from services.attendance import (
    StatsCache, attendance_badge, compute_overall_stats, compute_subject_stats, compute_today_stats, weeks_between,
)

AS_OF = date(2024, 3, 20)


def rec(subject, day, status):
    return {"subject": subject, "date": day, "status": status}


def schedule(weekly_classes=3):
    return {"subject": "Signals", "weekly_classes": weekly_classes}


# --- subject stats ---

@pytest.mark.parametrize("n", [1, 3, 20])
def test_no_records_gives_zero_percent_and_at_least_one_week(n):
    stats = compute_subject_stats("Signals", schedule(n), [], as_of_date=AS_OF)
    assert stats.percentage == 0
    assert stats.expected >= n
    assert stats.total == 0


def test_no_records_anchors_on_start_of_month():
    # 1 Mar -> 20 Mar = 19 days = 2 whole weeks, +1
    stats = compute_subject_stats("Signals", schedule(2), [], as_of_date=AS_OF)
    assert stats.expected == 2 * 3


def test_anchor_is_earliest_record():
    records = [
        rec("Signals", date(2024, 3, 13), "present"),
        rec("Signals", date(2024, 3, 6), "absent"),
    ]
    stats = compute_subject_stats("Signals", schedule(2), records, as_of_date=AS_OF)
    # 6 Mar -> 20 Mar = 14 days = 2 weeks, +1
    assert stats.expected == 6
    assert (stats.present, stats.absent, stats.total) == (1, 1, 2)
    assert stats.percentage == 17  # 1/6 = 16.67


def test_late_counts_as_present_and_other_subjects_are_ignored():
    records = [
        rec("Signals", AS_OF, "late"),
        rec("Signals", AS_OF, "present"),
        rec("Digital Electronics", AS_OF, "absent"),
    ]
    stats = compute_subject_stats("Signals", schedule(2), records, as_of_date=AS_OF)
    assert stats.present == 2
    assert stats.absent == 0
    assert stats.total == 2
    assert stats.percentage == 100


def test_missing_schedule_gives_zeros():
    stats = compute_subject_stats("Signals", None, [rec("Signals", AS_OF, "present")], as_of_date=AS_OF)
    assert stats.as_dict() == {"present": 0, "absent": 0, "total": 0, "percentage": 0, "expected": 0}


def test_zero_weekly_classes_does_not_divide_by_zero():
    stats = compute_subject_stats("Signals", schedule(0), [rec("Signals", AS_OF, "present")], as_of_date=AS_OF)
    assert stats.expected == 0
    assert stats.percentage == 0


def test_extra_present_never_lowers_percentage():
    records = [rec("Signals", date(2024, 3, 4), "absent")]
    previous = compute_subject_stats("Signals", schedule(3), records, as_of_date=AS_OF).percentage
    for day in range(5, 20):
        records.append(rec("Signals", date(2024, 3, day), "present"))
        current = compute_subject_stats("Signals", schedule(3), records, as_of_date=AS_OF).percentage
        assert current >= previous
        previous = current


def test_weeks_between_truncates():
    assert weeks_between(date(2024, 3, 1), date(2024, 3, 7)) == 0
    assert weeks_between(date(2024, 3, 1), date(2024, 3, 8)) == 1
    assert weeks_between(date(2024, 3, 1), date(2024, 3, 21)) == 2


# --- today / overall ---

def test_today_two_scheduled_one_present():
    schedules = [{"subject": "Signals"}, {"subject": "Digital Electronics"}]
    records = [rec("Signals", AS_OF, "present")]
    assert compute_today_stats(schedules, records).as_dict() == {"percentage": 50, "present": 1, "total": 2}


def test_today_nothing_scheduled():
    assert compute_today_stats([], [rec("Signals", AS_OF, "present")]).percentage == 0


def test_overall_counts_every_record():
    records = [
        rec("Signals", AS_OF, "present"),
        rec("Signals", AS_OF, "late"),
        rec("Digital Electronics", AS_OF, "absent"),
    ]
    assert compute_overall_stats(records).as_dict() == {"percentage": 67, "present": 2, "total": 3}
    assert compute_overall_stats([]).percentage == 0


def test_half_rounds_up():
    records = [rec("Signals", AS_OF, "present")] + [rec("Signals", AS_OF, "absent")] * 7
    # 1/8 = 12.5
    assert compute_overall_stats(records).percentage == 13


@pytest.mark.parametrize("percentage,badge", [
    (100, "good"), (75, "good"), (74, "warning"), (50, "warning"), (49, "critical"), (0, "critical"),
])
def test_badge_thresholds(percentage, badge):
    assert attendance_badge(percentage) == badge


def test_stats_cache_invalidation():
    cache = StatsCache()
    calls = []

    def compute():
        calls.append(1)
        return len(calls)

    assert cache.get_or_compute(1, ("today",), compute) == 1
    assert cache.get_or_compute(1, ("today",), compute) == 1
    cache.invalidate(1)
    assert cache.get_or_compute(1, ("today",), compute) == 2


def test_stats_cache_does_not_keep_view_computed_across_a_write():
    cache = StatsCache()

    def compute_during_mark():
        cache.invalidate(1)
        return "before-mark"

    assert cache.get_or_compute(1, ("today",), compute_during_mark) == "before-mark"
    assert cache.get_or_compute(1, ("today",), lambda: "after-mark") == "after-mark"
    assert cache.get_or_compute(1, ("today",), lambda: "again") == "after-mark"


def test_stats_cache_drops_views_from_earlier_days():
    days = [date(2024, 3, 4)]
    cache = StatsCache(today=lambda: days[0])

    cache.get_or_compute(1, ("today", "3", days[0]), lambda: "monday")
    cache.get_or_compute(2, ("overall", "3", days[0]), lambda: "monday")
    assert len(cache._views) == 2

    days[0] = date(2024, 3, 5)
    assert cache.get_or_compute(1, ("today", "3", days[0]), lambda: "tuesday") == "tuesday"
    assert list(cache._views) == [1]
    assert list(cache._views[1]) == [("today", "3", date(2024, 3, 5))]
