"""Tests for the quiz HTTP API (TestClient, scripted model)."""

import json

import pytest

import config
from lecturequiz.constants import ERR_EMPTY_QUIZ, ERR_UNEXPECTED
from lecturequiz.services.llm import LLMError


@pytest.fixture
def generated(client, lecture_text, generated_payload, summary_payload):
    """Client session holding a generated three-question quiz."""
    client.fake_llm.replies = [generated_payload, summary_payload]
    r = client.post("/api/quiz/generate", json={"lecture_text": lecture_text, "num_questions": 3})
    assert r.status_code == 200
    return r.json()


def _correct_and_wrong(state, qi):
    q = state["quiz"]["questions"][qi]
    correct = q["correctAnswerIndex"]
    wrong = (correct + 1) % len(q["options"])
    return correct, wrong


class TestPages:
    """Test HTML page and health."""

    def test_index(self, client) -> None:
        """Index renders the quiz page with security headers."""
        r = client.get("/")
        assert r.status_code == 200
        assert "Generate Quiz" in r.text
        assert r.headers["X-Frame-Options"] == "DENY"
        assert "default-src 'self'" in r.headers["Content-Security-Policy"]

    def test_health(self, client) -> None:
        """Health endpoint answers ok."""
        assert client.get("/health").json() == {"ok": True}


class TestGenerate:
    """Test POST /api/quiz/generate."""

    def test_success(self, generated) -> None:
        """Quiz, summary and an empty score come back."""
        assert len(generated["quiz"]["questions"]) == 3
        assert generated["quiz"]["summary"].startswith("Plants")
        assert generated["answers"] == {}
        assert generated["score"]["totalCount"] == 3
        assert generated["score"]["answeredCount"] == 0

    def test_shuffle_keeps_correct_answers(self, generated) -> None:
        """Shuffled quiz still points at the generated correct options."""
        expected = {
            "Where does photosynthesis take place?": "Chloroplasts",
            "Which gas is released when water is split?": "Oxygen",
            "Chlorophyll absorbs light.": "True",
        }
        for q in generated["quiz"]["questions"]:
            assert q["options"][q["correctAnswerIndex"]] == expected[q["question"]]

    def test_true_false_order_kept(self, generated) -> None:
        """True/false options are not reordered."""
        tf = [q for q in generated["quiz"]["questions"] if q["question"] == "Chlorophyll absorbs light."]
        assert tf[0]["options"] == ["True", "False"]

    def test_short_text(self, client) -> None:
        """Short lecture text is a 400 with the length message."""
        r = client.post("/api/quiz/generate", json={"lecture_text": "too short"})
        assert r.status_code == 400
        assert "at least 50" in r.json()["error"]
        assert client.fake_llm.calls == []

    def test_empty_generation(self, client, lecture_text) -> None:
        """No usable questions is a 422 with the refine message."""
        client.fake_llm.replies = [json.dumps({"questions": []}), "garbage"]
        r = client.post("/api/quiz/generate", json={"lecture_text": lecture_text})
        assert r.status_code == 422
        assert r.json()["error"] == ERR_EMPTY_QUIZ

    def test_model_failure(self, client, lecture_text) -> None:
        """Model errors surface as the generic message."""
        client.fake_llm.replies = [LLMError("down")]
        r = client.post("/api/quiz/generate", json={"lecture_text": lecture_text})
        assert r.status_code == 502
        assert r.json()["error"] == ERR_UNEXPECTED

    def test_unexpected_error_is_json(self, client, lecture_text) -> None:
        """Any other failure is a 500 with the generic message, quiz untouched."""
        client.fake_llm.replies = [RuntimeError("boom")]
        r = client.post("/api/quiz/generate", json={"lecture_text": lecture_text})
        assert r.status_code == 500
        assert r.json() == {"error": ERR_UNEXPECTED}
        assert client.get("/api/quiz").status_code == 404

    def test_regenerate_resets_answers(self, client, generated, lecture_text, generated_payload) -> None:
        """A new quiz starts a new attempt."""
        client.post("/api/quiz/answer", json={"question_index": 0, "option_index": 0})
        client.fake_llm.replies = [generated_payload, ""]
        r = client.post("/api/quiz/generate", json={"lecture_text": lecture_text})
        assert r.status_code == 200
        assert r.json()["answers"] == {}


class TestAnswer:
    """Test POST /api/quiz/answer."""

    def test_correct_then_state(self, client, generated) -> None:
        """A correct answer is scored and visible via GET."""
        correct, _ = _correct_and_wrong(generated, 0)
        r = client.post("/api/quiz/answer", json={"question_index": 0, "option_index": correct})
        body = r.json()
        assert r.status_code == 200
        assert body["is_correct"] is True
        assert body["score"]["correctCount"] == 1

        state = client.get("/api/quiz").json()
        assert state["answers"] == {"0": correct}
        assert state["score"]["answeredCount"] == 1

    def test_wrong(self, client, generated) -> None:
        """A wrong answer reveals the correct index."""
        correct, wrong = _correct_and_wrong(generated, 1)
        body = client.post("/api/quiz/answer", json={"question_index": 1, "option_index": wrong}).json()
        assert body["is_correct"] is False
        assert body["correct_index"] == correct

    def test_reanswer_conflict(self, client, generated) -> None:
        """Answering twice is a 409."""
        client.post("/api/quiz/answer", json={"question_index": 0, "option_index": 0})
        r = client.post("/api/quiz/answer", json={"question_index": 0, "option_index": 1})
        assert r.status_code == 409

    def test_bad_payload(self, client, generated) -> None:
        """Out-of-range or non-integer indices are a 400."""
        assert client.post("/api/quiz/answer", json={"question_index": 7, "option_index": 0}).status_code == 400
        assert client.post("/api/quiz/answer", json={"question_index": "0", "option_index": 0}).status_code == 400
        assert client.post("/api/quiz/answer", json={"question_index": 0}).status_code == 400

    def test_complete_high_tier(self, client, generated) -> None:
        """Answering all correctly completes with the high tier."""
        body = None
        for qi in range(3):
            correct, _ = _correct_and_wrong(generated, qi)
            body = client.post("/api/quiz/answer", json={"question_index": qi, "option_index": correct}).json()
        assert body["score"]["isComplete"] is True
        assert body["score"]["percentage"] == 100.0
        assert body["score"]["tier"] == "high"

    def test_no_quiz(self, client) -> None:
        """Answering without a quiz is a 404."""
        r = client.post("/api/quiz/answer", json={"question_index": 0, "option_index": 0})
        assert r.status_code == 404


class TestExplain:
    """Test POST /api/quiz/explain."""

    def test_explanation_cached(self, client, generated) -> None:
        """Second request for the same question does not call the model."""
        client.fake_llm.replies = [json.dumps({"explanation": "Because chloroplasts hold chlorophyll."})]
        calls_before = len(client.fake_llm.calls)

        first = client.post("/api/quiz/explain", json={"question_index": 0}).json()
        second = client.post("/api/quiz/explain", json={"question_index": 0}).json()

        assert first["explanation"] == "Because chloroplasts hold chlorophyll."
        assert first["cached"] is False
        assert second["cached"] is True
        assert len(client.fake_llm.calls) == calls_before + 1

    def test_prompt_has_correct_answer(self, client, generated) -> None:
        """The explanation prompt names the correct option."""
        client.fake_llm.replies = ["plain text explanation"]
        q = generated["quiz"]["questions"][1]
        body = client.post("/api/quiz/explain", json={"question_index": 1}).json()
        assert body["explanation"] == "plain text explanation"
        prompt = client.fake_llm.calls[-1]["prompt"]
        assert q["options"][q["correctAnswerIndex"]] in prompt

    def test_bad_index(self, client, generated) -> None:
        """Unknown question index is a 400."""
        assert client.post("/api/quiz/explain", json={"question_index": 10}).status_code == 400

    def test_model_failure(self, client, generated) -> None:
        """Model errors are a 502."""
        client.fake_llm.replies = [LLMError("down")]
        assert client.post("/api/quiz/explain", json={"question_index": 0}).status_code == 502

    def test_unexpected_error_is_json(self, client, generated) -> None:
        """Non-model failures are a JSON 500 and nothing is cached."""
        client.fake_llm.replies = [RuntimeError("boom")]
        r = client.post("/api/quiz/explain", json={"question_index": 0})
        assert r.status_code == 500
        assert "error" in r.json()

        client.fake_llm.replies = ["second try"]
        assert client.post("/api/quiz/explain", json={"question_index": 0}).json()["cached"] is False


class TestRetryAndReset:
    """Test retry and reset."""

    def test_retry_keeps_order(self, client, generated) -> None:
        """Retry clears answers with the same question order."""
        client.post("/api/quiz/answer", json={"question_index": 0, "option_index": 0})
        body = client.post("/api/quiz/retry").json()
        assert body["answers"] == {}
        assert body["quiz"] == generated["quiz"]

    def test_reset(self, client, generated) -> None:
        """Reset drops the quiz."""
        assert client.post("/api/quiz/reset").json() == {"ok": True}
        assert client.get("/api/quiz").status_code == 404

    def test_retry_without_quiz(self, client) -> None:
        """Retry with no quiz is a 404."""
        assert client.post("/api/quiz/retry").status_code == 404


class TestUpload:
    """Test POST /api/quiz/upload."""

    def test_txt(self, client, lecture_text) -> None:
        """Text files come back as extracted text."""
        r = client.post("/api/quiz/upload", files={"file": ("notes.txt", lecture_text.encode(), "text/plain")})
        body = r.json()
        assert r.status_code == 200
        assert body["text"] == lecture_text
        assert body["chars"] == len(lecture_text)

    def test_unsupported(self, client) -> None:
        """Unsupported types are a 400."""
        r = client.post("/api/quiz/upload", files={"file": ("a.exe", b"MZ", "application/octet-stream")})
        assert r.status_code == 400

    def test_too_little_text(self, client) -> None:
        """Near-empty documents are a 400."""
        r = client.post("/api/quiz/upload", files={"file": ("a.txt", b"tiny", "text/plain")})
        assert r.status_code == 400

    def test_too_large(self, client, monkeypatch, lecture_text) -> None:
        """Uploads past MAX_UPLOAD_BYTES are rejected."""
        monkeypatch.setattr(config, "MAX_UPLOAD_BYTES", 60)
        r = client.post("/api/quiz/upload", files={"file": ("notes.txt", lecture_text.encode(), "text/plain")})
        assert r.status_code == 400
        assert "too large" in r.json()["error"]


class TestCsrfGuard:
    """Test the same-origin guard."""

    def test_foreign_origin_blocked(self, client) -> None:
        """Cross-site POSTs are rejected."""
        r = client.post("/api/quiz/reset", headers={"origin": "https://evil.example"})
        assert r.status_code == 403

    def test_same_origin_allowed(self, client) -> None:
        """Same-host POSTs pass."""
        r = client.post("/api/quiz/reset", headers={"origin": "http://testserver"})
        assert r.status_code == 200
