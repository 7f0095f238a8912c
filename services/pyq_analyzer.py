"""
PYQ Analyzer (server function 'analyze-pyq')
Takes previous-year question text (or a base64 PDF), asks Gemini for a
structured analysis and returns it as {"analysis": {...}}.
"""

import base64
import binascii
import json
import re
from typing import List, Optional, Union

import requests
from pydantic import BaseModel, ConfigDict, ValidationError

import config

MIN_PDF_TEXT_CHARS = 50
GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

SYSTEM_PROMPT = """You are an AI exam intelligence system for Electronics & Communication Engineering.
Analyze the given Previous Year Questions and return ONLY valid JSON with:

1. A cleaned canonical version of each question
2. Topic tags for each (network-theory, signal-system, analog-electronics, digital-electronics, communication-system, electromagnetics, microprocessor, etc.)
3. An importance score (0.0-1.0)
4. Topic frequency and weightage
5. Overall difficulty estimate (easy/medium/hard)
6. Predict 5-12 most likely questions for next year with probability and reason.

Use these JSON keys: subjectName, questions[{question, topic, importance}],
topicWeightage[{topic, count, percentage}], difficulty,
predictedQuestions[{question, probability, reason, topic}], repeatedQuestions[{question, topic, importance}].

Return ONLY JSON. No explanations."""


class AnalysisError(Exception):
    pass


# ===========================
#          SCHEMAS
# ===========================

# Scores aate hain 0.9, "85%" ya "High" jaise; sab chalega
Score = Union[float, str]


class _Loose(BaseModel):
    model_config = ConfigDict(extra="allow")


class Question(_Loose):
    question: Optional[str] = None
    topic: Optional[str] = None
    importance: Optional[Score] = None


class TopicWeightage(_Loose):
    topic: Optional[str] = None
    count: Optional[Union[int, str]] = None
    percentage: Optional[Score] = None


class PredictedQuestion(_Loose):
    question: Optional[str] = None
    probability: Optional[Score] = None
    reason: Optional[str] = None
    topic: Optional[str] = None


class AnalysisResult(_Loose):
    subjectName: Optional[str] = None
    questions: Optional[List[Question]] = None
    topicWeightage: Optional[List[TopicWeightage]] = None
    difficulty: Optional[str] = None
    predictedQuestions: Optional[List[PredictedQuestion]] = None
    repeatedQuestions: Optional[List[Question]] = None


# ===========================
#      PDF TEXT SCRAPE
# ===========================

# Literal strings in content streams: (Hello World) with \) \( \\ escapes
_PDF_STRING = re.compile(rb"\(((?:\\.|[^\\()])*)\)", re.DOTALL)
_PDF_ESCAPES = {b"n": "\n", b"r": "\r", b"t": "\t", b"b": "\b", b"f": "\f", b"(": "(", b")": ")", b"\\": "\\"}


def _unescape_pdf_string(raw: bytes) -> str:
    out = []
    i = 0
    while i < len(raw):
        ch = raw[i:i + 1]
        if ch == b"\\" and i + 1 < len(raw):
            nxt = raw[i + 1:i + 2]
            octal = re.match(rb"[0-7]{1,3}", raw[i + 1:i + 4])
            if octal:
                out.append(chr(int(octal.group(0), 8)))
                i += 1 + len(octal.group(0))
                continue
            out.append(_PDF_ESCAPES.get(nxt, nxt.decode("latin-1")))
            i += 2
            continue
        out.append(ch.decode("latin-1"))
        i += 1
    return "".join(out)


def extract_text_from_pdf_bytes(data: bytes) -> str:
    """
    Best-effort scrape, not a PDF parser: collects the parenthesized
    strings of the raw file. Compressed streams yield nothing.
    """
    pieces = []
    for match in _PDF_STRING.finditer(data):
        text = _unescape_pdf_string(match.group(1))
        text = "".join(c for c in text if c.isprintable() or c in "\n\t")
        if text.strip():
            pieces.append(text.strip())
    return re.sub(r"[ \t]+", " ", " ".join(pieces)).strip()


# ===========================
#        MODEL CALL
# ===========================

def strip_code_fences(text: str) -> str:
    text = text.strip()
    if text.startswith("```json"):
        text = re.sub(r"```json\n?", "", text)
        text = re.sub(r"```\n?$", "", text)
    elif text.startswith("```"):
        text = re.sub(r"```\n?", "", text)
    return text.strip()


def parse_analysis(generated_text: str) -> dict:
    try:
        data = json.loads(strip_code_fences(generated_text))
    except json.JSONDecodeError as e:
        raise AnalysisError(f"Model returned invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise AnalysisError("Model returned JSON that is not an object")
    try:
        return AnalysisResult.model_validate(data).model_dump(exclude_none=True)
    except ValidationError as e:
        raise AnalysisError(f"Model returned an unexpected analysis shape: {e.error_count()} error(s)") from e


def call_gemini(text: str) -> str:
    if not config.GEMINI_API_KEY:
        raise AnalysisError("GEMINI_API_KEY is not configured")

    body = {
        "contents": [{
            "parts": [{"text": f"{SYSTEM_PROMPT}\n\nPrevious Year Questions to analyze:\n\n{text}"}]
        }],
        "generationConfig": {
            "temperature": 0.2,
            "topK": 40,
            "topP": 0.95,
            "maxOutputTokens": 8192,
        },
    }

    print("Calling Gemini API...")
    try:
        r = requests.post(
            GEMINI_URL.format(model=config.GEMINI_MODEL),
            params={"key": config.GEMINI_API_KEY},
            json=body,
            timeout=config.GEMINI_TIMEOUT,
        )
    except requests.RequestException as e:
        raise AnalysisError(f"Gemini API unreachable: {e}") from e

    if r.status_code != 200:
        print(f"Gemini API error: {r.status_code} {r.text[:300]}")
        raise AnalysisError(f"Gemini API error: {r.status_code}")

    try:
        generated = r.json()["candidates"][0]["content"]["parts"][0]["text"]
    except (ValueError, KeyError, IndexError, TypeError):
        generated = None
    if not generated:
        raise AnalysisError("No response from Gemini API")

    print("Gemini response received")
    return generated


def analyze_pyq(client, payload: dict) -> dict:
    text = payload.get("extractedText")

    if payload.get("isPdf") and payload.get("pdfBase64"):
        print("Extracting text from PDF base64...")
        try:
            pdf_bytes = base64.b64decode(payload["pdfBase64"], validate=True)
        except (binascii.Error, ValueError) as e:
            raise AnalysisError("pdfBase64 is not valid base64") from e
        text = extract_text_from_pdf_bytes(pdf_bytes)
        print(f"Extracted text length: {len(text)}")
        if len(text) < MIN_PDF_TEXT_CHARS:
            raise AnalysisError("Could not extract enough text from the PDF. Try uploading a text file instead.")

    if not text or not str(text).strip():
        raise AnalysisError("No text content extracted from document")

    return {"analysis": parse_analysis(call_gemini(str(text)))}
