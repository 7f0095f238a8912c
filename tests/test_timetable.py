import pytest

from services.timetable import TimetableDraft, TimetableSubject, generate_timetable


def subj(name, difficulty, id=None):
    return TimetableSubject(id=id or name, name=name, difficulty=difficulty)


def names(day):
    return [s.name for s in day.subjects]


def test_digital_electronics_and_signals_example():
    days = generate_timetable([subj("Digital Electronics", "hard"), subj("Signals", "easy")], 5)
    assert [d.day for d in days] == ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]
    assert [names(d) for d in days] == [
        ["Digital Electronics"], ["Digital Electronics"], ["Digital Electronics"], ["Signals"], [],
    ]


def test_harder_subjects_go_first_and_ties_keep_order():
    subjects = [subj("A", "easy"), subj("B", "medium"), subj("C", "hard"), subj("D", "easy")]
    days = generate_timetable(subjects, 7)
    flat = [s.name for d in days for s in d.subjects]
    assert flat == ["C", "C", "C", "B", "B", "A", "D"]


@pytest.mark.parametrize("difficulty,count", [("hard", 3), ("medium", 2), ("easy", 1)])
def test_frequency_per_difficulty(difficulty, count):
    for study_days in range(3, 8):
        days = generate_timetable([subj("Networks", difficulty)], study_days)
        assert sum(names(d).count("Networks") for d in days) == count


def test_is_deterministic():
    subjects = [subj("A", "hard"), subj("B", "medium"), subj("C", "easy"), subj("D", "hard")]
    assert generate_timetable(subjects, 4) == generate_timetable(subjects, 4)


def test_cap_holds_while_sessions_fit():
    subjects = [subj("A", "hard"), subj("B", "hard"), subj("C", "medium"), subj("D", "medium")]
    days = generate_timetable(subjects, 5)  # 10 sessions, capacity 10
    assert all(len(d.subjects) <= 2 for d in days)
    assert sum(len(d.subjects) for d in days) == 10


def test_full_target_scans_forward():
    # 3 days: A A A B B -> Mon A, Tue A, Wed A, Mon B, Tue B
    days = generate_timetable([subj("A", "hard"), subj("B", "medium")], 3)
    assert [names(d) for d in days] == [["A", "B"], ["A", "B"], ["A"]]

    # 2 days, 3 hard + 1 easy = 4 sessions: cursor targets fill exactly
    days = generate_timetable([subj("A", "hard"), subj("B", "easy")], 2)
    assert [names(d) for d in days] == [["A", "A"], ["A", "B"]]


def test_overflow_goes_over_the_cap_without_dropping():
    subjects = [subj("A", "hard"), subj("B", "hard")]  # 6 sessions, 1 day
    days = generate_timetable(subjects, 1)
    assert len(days) == 1
    assert names(days[0]) == ["A", "A", "A", "B", "B", "B"]


def test_invalid_inputs():
    with pytest.raises(ValueError):
        generate_timetable([subj("A", "hard")], 0)
    with pytest.raises(ValueError):
        generate_timetable([subj("A", "hard")], 8)
    with pytest.raises(ValueError):
        generate_timetable([subj("A", "impossible")], 3)


def test_draft_trims_names_and_skips_empty_ones():
    draft = TimetableDraft(study_days=3)
    assert draft.add_subject("   ") is None
    a = draft.add_subject("  Signals  ", "hard")
    b = draft.add_subject("Maths", "easy")
    assert a.name == "Signals"
    assert a.id != b.id

    assert [s.name for s in draft.subjects] == ["Signals", "Maths"]

    days = draft.generate()
    assert [names(d) for d in days] == [["Signals", "Maths"], ["Signals"], ["Signals"]]


def test_draft_generate_without_subjects_keeps_previous_result():
    draft = TimetableDraft()
    assert draft.generate() == []
