from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel, Field
from typing import List, Literal, Optional
import os

import config
from services.timetable import DEFAULT_STUDY_DAYS, TimetableDraft

router = APIRouter(prefix="/api/v1/timetable", tags=["Study Timetable"])
templates = Jinja2Templates(directory=os.path.join(config.BASE_DIR, "templates"))


class SubjectIn(BaseModel):
    name: str
    difficulty: Literal["easy", "medium", "hard"] = "medium"


class TimetableRequest(BaseModel):
    subjects: List[SubjectIn] = []
    study_days: int = Field(DEFAULT_STUDY_DAYS, ge=1, le=7)
    title: Optional[str] = None


def _build(data: TimetableRequest):
    # Draft wahi rules lagata hai jo form pe: khali naam ignore, naam trim
    draft = TimetableDraft(study_days=data.study_days)
    for s in data.subjects:
        draft.add_subject(s.name, s.difficulty)
    if not draft.subjects:
        raise HTTPException(status_code=400, detail="Add at least one subject")
    return draft, draft.generate()


def _as_json(days) -> list:
    return [
        {
            "day": d.day,
            "subjects": [{"id": s.id, "name": s.name, "difficulty": s.difficulty} for s in d.subjects],
        }
        for d in days
    ]


@router.post("/generate")
def generate(data: TimetableRequest):
    draft, days = _build(data)
    return {
        "study_days": draft.study_days,
        "total_sessions": sum(len(d.subjects) for d in days),
        "timetable": _as_json(days),
    }


# Print view: plain HTML, browser se print/save as PDF
@router.post("/print", response_class=HTMLResponse)
def print_timetable(request: Request, data: TimetableRequest):
    draft, days = _build(data)
    return templates.TemplateResponse(request, "timetable_print.html", {
        "title": data.title or "Study Timetable",
        "study_days": draft.study_days,
        "timetable": days,
    })
