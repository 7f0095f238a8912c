from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from services.tools import help_answer, makaut_result

router = APIRouter(prefix="/api/v1/tools", tags=["Tools"])


class MakautRequest(BaseModel):
    odd_points: float = Field(0, ge=0)
    even_points: float = Field(0, ge=0)
    odd_credits: float = Field(0, ge=0)
    even_credits: float = Field(0, ge=0)


class HelpRequest(BaseModel):
    question: str = Field(..., min_length=1, max_length=500)


# MAKAUT CGPA -> percentage
@router.post("/makaut")
def makaut_calculator(data: MakautRequest):
    try:
        result = makaut_result(data.odd_points, data.even_points, data.odd_credits, data.even_credits)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return result.as_dict()


@router.post("/help")
def help_bot(data: HelpRequest):
    return {"question": data.question, "answer": help_answer(data.question)}
