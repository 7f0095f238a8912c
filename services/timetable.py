"""
Study timetable generator.

Each subject gets a number of weekly study sessions from its difficulty
(hard=3, medium=2, easy=1). Sessions are dealt round-robin over the first
'study_days' weekdays starting Monday, at most 2 per day.
"""

import time
from dataclasses import dataclass, field
from typing import List

WEEKDAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
DIFFICULTIES = ("easy", "medium", "hard")
DIFFICULTY_FREQUENCY = {"hard": 3, "medium": 2, "easy": 1}
DIFFICULTY_ORDER = {"hard": 0, "medium": 1, "easy": 2}
MAX_SESSIONS_PER_DAY = 2
DEFAULT_STUDY_DAYS = 5


@dataclass(frozen=True)
class TimetableSubject:
    id: str
    name: str
    difficulty: str


@dataclass
class TimetableDay:
    day: str
    subjects: List[TimetableSubject] = field(default_factory=list)


def difficulty_frequency(difficulty: str) -> int:
    try:
        return DIFFICULTY_FREQUENCY[difficulty]
    except KeyError:
        raise ValueError(f"Unknown difficulty '{difficulty}'")


def generate_timetable(subjects: List[TimetableSubject], study_days: int) -> List[TimetableDay]:
    if not 1 <= study_days <= len(WEEKDAY_NAMES):
        raise ValueError("study_days must be between 1 and 7")

    pool = []
    for subject in subjects:
        pool.extend([subject] * difficulty_frequency(subject.difficulty))

    # sorted() is stable: same-difficulty subjects keep the order they were added in
    pool = sorted(pool, key=lambda s: DIFFICULTY_ORDER[s.difficulty])

    timetable = [TimetableDay(day=name) for name in WEEKDAY_NAMES[:study_days]]

    cursor = 0
    for subject in pool:
        target = cursor % study_days
        if len(timetable[target].subjects) >= MAX_SESSIONS_PER_DAY:
            for i in range(study_days):
                check = (cursor + i) % study_days
                if len(timetable[check].subjects) < MAX_SESSIONS_PER_DAY:
                    target = check
                    break
            # Every day full: stays on the original target, going over the cap
        timetable[target].subjects.append(subject)
        cursor += 1

    return timetable


class TimetableDraft:
    """Subjects being edited before 'Generate'. Lives only as long as the caller keeps it."""

    def __init__(self, study_days: int = DEFAULT_STUDY_DAYS):
        self.subjects: List[TimetableSubject] = []
        self.study_days = study_days
        self.generated: List[TimetableDay] = []
        self._seq = 0

    def add_subject(self, name: str, difficulty: str = "medium"):
        name = (name or "").strip()
        if not name:
            return None
        difficulty_frequency(difficulty)
        self._seq += 1
        subject = TimetableSubject(id=f"{int(time.time() * 1000)}-{self._seq}", name=name, difficulty=difficulty)
        self.subjects.append(subject)
        return subject

    def generate(self) -> List[TimetableDay]:
        if not self.subjects:
            return self.generated
        self.generated = generate_timetable(self.subjects, self.study_days)
        return self.generated
