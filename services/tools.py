"""Small student utilities: MAKAUT CGPA calculator and the help assistant."""

from dataclasses import asdict, dataclass


@dataclass
class MakautResult:
    percentage: float
    cgpa: float
    total_points: float
    total_credits: float

    def as_dict(self):
        return asdict(self)


def makaut_result(odd_points: float, even_points: float, odd_credits: float, even_credits: float) -> MakautResult:
    """MAKAUT conversion: CGPA = points / credits, percentage = (CGPA - 0.5) * 10."""
    odd_points = odd_points or 0
    even_points = even_points or 0
    odd_credits = odd_credits or 0
    even_credits = even_credits or 0

    if odd_credits == 0 and even_credits == 0:
        raise ValueError("Please enter valid credit values")

    total_points = odd_points + even_points
    total_credits = odd_credits + even_credits
    if total_credits <= 0:
        raise ValueError("Please enter valid credit values")

    cgpa = total_points / total_credits
    percentage = (cgpa - 0.5) * 10
    return MakautResult(
        percentage=round(percentage, 2),
        cgpa=round(cgpa, 2),
        total_points=total_points,
        total_credits=total_credits,
    )


# (keywords, answer) pairs, first match wins
HELP_TOPICS = [
    (("register", "sign up"),
     "To register: open Register, enter your college email, name, mobile number and semester, choose a password and submit."),
    (("login", "sign in"),
     "To login: enter your college email and password on the student login. You'll land on your dashboard."),
    (("resources", "materials"),
     "Available resources: Previous Year Question Papers, Notes, Syllabus, Lab Manuals, Organizers, Events and MAR Support, all organized by semester."),
    (("question paper", "pyq"),
     "Question Papers: Dashboard > Question Papers. Papers are grouped by subject folder. Use the PYQ Analyzer to find important topics."),
    (("notes", "study material"),
     "Notes: Dashboard > Notes. Notes are filtered by your semester and organized by subject."),
    (("attendance", "track"),
     "Attendance: add your subjects with their schedule, mark each class present, late or absent, and check today's and overall percentages."),
    (("profile", "account"),
     "Profile: update your name, mobile number and semester, and upload a profile photo (images up to 2MB)."),
    (("lab manual",),
     "Lab Manuals: Dashboard > Lab Manuals. Manuals for your semester plus the ones shared with all semesters."),
    (("event", "organizer"),
     "Events and Organizers: see departmental activities and organizer material for your semester."),
    (("timetable", "schedule"),
     "Study Timetable: add subjects with a difficulty, pick the number of study days and generate a weekly plan."),
    (("admin",),
     "Admin access is granted by the department. Admins manage resources, users and notifications."),
    (("semester", "change"),
     "Change Semester: go to Profile and update your semester. All resources follow the semester on your profile."),
    (("help", "support"),
     "Need help? Ask here, or contact your department administrator."),
]

HELP_FALLBACK = ("I can help you with: Registration, Login, Question Papers, Notes, Syllabus, Lab Manuals, "
                 "Attendance Tracking, Profile Management, Events, Organizers, Study Timetable, and Admin features. "
                 "What would you like to know?")


def help_answer(question: str) -> str:
    q = (question or "").lower()
    for keywords, answer in HELP_TOPICS:
        if any(k in q for k in keywords):
            return answer
    return HELP_FALLBACK
