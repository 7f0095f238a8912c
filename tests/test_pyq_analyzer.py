import base64
import json

import pytest

from services import pyq_analyzer
from services.pyq_analyzer import AnalysisError, extract_text_from_pdf_bytes, parse_analysis, strip_code_fences

ANALYSIS = {
    "subjectName": "Signals and Systems",
    "questions": [{"question": "State the sampling theorem.", "topic": "signal-system", "importance": 0.9}],
    "topicWeightage": [{"topic": "signal-system", "count": 4, "percentage": 100}],
    "difficulty": "medium",
    "predictedQuestions": [{"question": "Explain aliasing.", "probability": 0.8, "reason": "asked 3 times",
                            "topic": "signal-system"}],
}

QUESTIONS_TEXT = "1. State and prove the sampling theorem. 2. Find the Laplace transform of a unit step."


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


def gemini_reply(text):
    return FakeResponse(payload={"candidates": [{"content": {"parts": [{"text": text}]}}]})


@pytest.fixture
def fake_gemini(monkeypatch):
    calls = []

    def install(response):
        def fake_post(url, params=None, json=None, timeout=None):
            calls.append({"url": url, "params": params, "json": json})
            return response
        monkeypatch.setattr(pyq_analyzer.requests, "post", fake_post)
        return calls

    return install


def make_pdf(*strings):
    body = b" ".join(b"BT (" + s + b") Tj ET" for s in strings)
    return b"%PDF-1.4\n1 0 obj\n<< >>\nstream\n" + body + b"\nendstream\nendobj\n%%EOF"


# --- pure helpers ---

def test_pdf_scrape_collects_parenthesized_strings():
    pdf = make_pdf(b"Define convolution \\(linear\\)", b"Line\\none", b"caf\\351")
    text = extract_text_from_pdf_bytes(pdf)
    assert "Define convolution (linear)" in text
    assert "Line\none" in text
    assert "café" in text


def test_pdf_scrape_of_compressed_pdf_is_empty():
    assert extract_text_from_pdf_bytes(b"%PDF-1.7\nstream\nx\x9c\x03\x00endstream") == ""


def test_strip_code_fences():
    assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fences('```\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fences(' {"a": 1} ') == '{"a": 1}'


def test_parse_analysis_rejects_bad_output():
    with pytest.raises(AnalysisError):
        parse_analysis("Sure! Here are the topics...")
    with pytest.raises(AnalysisError):
        parse_analysis("[1, 2, 3]")
    with pytest.raises(AnalysisError):
        parse_analysis(json.dumps({"questions": "none found"}))


def test_parse_analysis_keeps_known_and_extra_keys():
    result = parse_analysis("```json\n" + json.dumps(dict(ANALYSIS, examPattern="5 of 8")) + "\n```")
    assert result["subjectName"] == "Signals and Systems"
    assert result["examPattern"] == "5 of 8"
    assert "repeatedQuestions" not in result


def test_parse_analysis_accepts_worded_scores_and_partial_items():
    result = parse_analysis(json.dumps({
        "predictedQuestions": [{"question": "Explain aliasing.", "probability": "High"}],
        "questions": [{"question": "Define a phasor.", "importance": "85%"}, {"topic": "network-theory"}],
        "topicWeightage": [{"topic": "network-theory", "count": "3", "percentage": 60}],
    }))
    assert result["predictedQuestions"] == [{"question": "Explain aliasing.", "probability": "High"}]
    assert result["questions"][0]["importance"] == "85%"
    assert result["questions"][1] == {"topic": "network-theory"}
    assert result["topicWeightage"][0]["percentage"] == 60


# --- function ---

def test_analyze_text(backend, fake_gemini):
    calls = fake_gemini(gemini_reply(json.dumps(ANALYSIS)))
    result = backend.invoke_function("analyze-pyq", {"extractedText": QUESTIONS_TEXT})

    assert result["analysis"]["difficulty"] == "medium"
    assert calls[0]["params"] == {"key": "test-key"}
    body = calls[0]["json"]
    assert body["generationConfig"] == {"temperature": 0.2, "topK": 40, "topP": 0.95, "maxOutputTokens": 8192}
    assert QUESTIONS_TEXT in body["contents"][0]["parts"][0]["text"]


def test_analyze_pdf_needs_enough_text(backend, fake_gemini):
    fake_gemini(gemini_reply(json.dumps(ANALYSIS)))
    short = base64.b64encode(make_pdf(b"Q1")).decode()
    with pytest.raises(AnalysisError):
        backend.invoke_function("analyze-pyq", {"pdfBase64": short, "isPdf": True})

    long_pdf = base64.b64encode(make_pdf(QUESTIONS_TEXT.encode())).decode()
    result = backend.invoke_function("analyze-pyq", {"pdfBase64": long_pdf, "isPdf": True})
    assert result["analysis"]["subjectName"] == "Signals and Systems"


def test_analyze_upstream_failures(backend, fake_gemini):
    fake_gemini(FakeResponse(status_code=429, text="quota"))
    with pytest.raises(AnalysisError):
        backend.invoke_function("analyze-pyq", {"extractedText": QUESTIONS_TEXT})

    fake_gemini(FakeResponse(payload={"candidates": []}))
    with pytest.raises(AnalysisError):
        backend.invoke_function("analyze-pyq", {"extractedText": QUESTIONS_TEXT})

    with pytest.raises(AnalysisError):
        backend.invoke_function("analyze-pyq", {"extractedText": "   "})


def test_missing_api_key(backend, monkeypatch):
    monkeypatch.setattr(pyq_analyzer.config, "GEMINI_API_KEY", "")
    with pytest.raises(AnalysisError):
        backend.invoke_function("analyze-pyq", {"extractedText": QUESTIONS_TEXT})


# --- HTTP ---

def test_upload_endpoint(client, student, fake_gemini):
    _, headers = student
    fake_gemini(gemini_reply("```json\n" + json.dumps(ANALYSIS) + "\n```"))

    r = client.post("/api/v1/pyq/analyze", files={"file": ("pyq.txt", QUESTIONS_TEXT.encode(), "text/plain")}, headers=headers)
    assert r.status_code == 200, r.text
    assert r.json()["analysis"]["topicWeightage"][0]["count"] == 4

    r = client.post("/api/v1/pyq/analyze", files={"file": ("pyq.docx", b"x", "application/octet-stream")}, headers=headers)
    assert r.status_code == 400


def test_upload_endpoint_maps_analysis_errors_to_502(client, student, fake_gemini):
    _, headers = student
    fake_gemini(gemini_reply("not json at all"))
    r = client.post("/api/v1/pyq/analyze", files={"file": ("pyq.txt", QUESTIONS_TEXT.encode(), "text/plain")}, headers=headers)
    assert r.status_code == 502


def test_function_endpoint_returns_error_body(client, student, fake_gemini):
    _, headers = student
    fake_gemini(gemini_reply("not json at all"))
    r = client.post("/functions/analyze-pyq", json={"extractedText": QUESTIONS_TEXT}, headers=headers)
    assert r.status_code == 500
    assert "error" in r.json()

    fake_gemini(gemini_reply(json.dumps(ANALYSIS)))
    r = client.post("/functions/analyze-pyq", json={"extractedText": QUESTIONS_TEXT}, headers=headers)
    assert r.status_code == 200
    assert r.json()["analysis"]["subjectName"] == "Signals and Systems"
