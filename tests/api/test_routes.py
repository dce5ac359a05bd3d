import json
import unittest
from datetime import date
from unittest.mock import AsyncMock, MagicMock, patch

from fastapi.testclient import TestClient

from nora_api.ai.llm_client import LLMClientError, LLMRateLimitError
from nora_api.api.dependencies import get_llm_client, get_quota_gate, get_transcriber
from nora_api.config import settings
from nora_api.main import create_app
from nora_api.usage import InMemoryUsageStore, QuotaGate


DAY = date(2026, 3, 14)
FREE = {"tier": "free", "deviceType": "Android"}
PREMIUM = {"tier": "premium", "deviceType": "iOS"}
FAMILY = {"tier": "family"}


class RouteTestCase(unittest.TestCase):
    def setUp(self):
        self.app = create_app()

        self.gate = QuotaGate(InMemoryUsageStore(), clock=lambda: DAY)
        self.llm = MagicMock()
        self.llm.complete = AsyncMock(return_value="Tap the gear icon to open Settings.")
        self.transcriber = MagicMock()
        self.transcriber.transcribe = AsyncMock(return_value="How do I make a video call?")

        self.app.dependency_overrides[get_quota_gate] = lambda: self.gate
        self.app.dependency_overrides[get_llm_client] = lambda: self.llm
        self.app.dependency_overrides[get_transcriber] = lambda: self.transcriber

        self.client = TestClient(self.app, raise_server_exceptions=False)

    def chat(self, user_id="alice", context=FREE, message="How do I call my son?"):
        return self.client.post(
            "/api/chat",
            json={"message": message, "userId": user_id, "userContext": context},
        )

    def upload(self, path, field, user_id="alice", context=FREE, content=b"\x89PNG data", **form):
        return self.client.post(
            path,
            files={field: ("file.bin", content, "image/png")},
            data={"userId": user_id, "userContext": json.dumps(context), **form},
        )


class TestHealth(RouteTestCase):
    def test_health(self):
        response = self.client.get("/health")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "ok")
        self.assertIn("timestamp", response.json())


class TestChatRoute(RouteTestCase):
    def test_reply_with_usage(self):
        response = self.chat()

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["response"], "Tap the gear icon to open Settings.")
        self.assertFalse(body["needsSteps"])
        self.assertEqual(body["severity"], "info")
        self.assertEqual(body["usage"], {
            "today": {"messages": 1, "limit": 20, "remaining": 19},
            "cost": "0.0080",
        })

    def test_twentieth_message_accepted_twenty_first_rejected(self):
        for _ in range(19):
            self.assertEqual(self.chat().status_code, 200)

        twentieth = self.chat()
        self.assertEqual(twentieth.status_code, 200)
        self.assertEqual(twentieth.json()["usage"]["today"]["remaining"], 0)

        rejected = self.chat()
        self.assertEqual(rejected.status_code, 429)
        body = rejected.json()
        self.assertTrue(body["upgradePrompt"])
        self.assertEqual(body["limit"], 20)
        self.assertEqual(body["current"], 20)
        self.assertIn("Upgrade to Premium", body["message"])
        self.assertEqual(self.llm.complete.await_count, 20)

    def test_premium_is_unlimited(self):
        for _ in range(25):
            response = self.chat(user_id="bob", context=PREMIUM)
            self.assertEqual(response.status_code, 200)

        usage = response.json()["usage"]
        self.assertEqual(usage["today"], {"messages": 25, "limit": "unlimited", "remaining": "unlimited"})
        self.assertEqual(usage["cost"], "0.6250")
        self.assertEqual(self.llm.complete.call_args.kwargs["model"], settings.OPENAI_ADVANCED_MODEL)

    def test_missing_message(self):
        response = self.client.post("/api/chat", json={"userId": "alice"})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Message is required"})

    def test_malformed_history_turns_are_dropped(self):
        response = self.client.post(
            "/api/chat",
            json={
                "message": "And then?",
                "userId": "alice",
                "userContext": FREE,
                "history": [
                    {"role": "assistant", "content": None},
                    {"role": "user", "content": "How do I open the camera?"},
                    "not a turn",
                ],
            },
        )

        self.assertEqual(response.status_code, 200)
        messages = self.llm.complete.call_args.kwargs["messages"]
        self.assertEqual(messages[1:], [
            {"role": "user", "content": "How do I open the camera?"},
            {"role": "user", "content": "And then?"},
        ])

    def test_context_as_json_string(self):
        response = self.client.post(
            "/api/chat",
            json={"message": "hello", "userId": "bob", "userContext": json.dumps(PREMIUM)},
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["usage"]["today"]["limit"], "unlimited")
        self.assertEqual(self.llm.complete.call_args.kwargs["model"], settings.OPENAI_ADVANCED_MODEL)

    def test_history_not_a_list(self):
        response = self.client.post(
            "/api/chat",
            json={"message": "hello", "userId": "alice", "history": {"role": "user"}},
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "History must be a JSON list of messages"})

    def test_invalid_body_uses_error_shape(self):
        response = self.client.post("/api/chat", json={"message": 42, "userId": "alice"})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Invalid request body"})

    def test_missing_context_defaults_to_free_anonymous(self):
        response = self.client.post("/api/chat", json={"message": "hello"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["usage"]["today"]["limit"], 20)
        self.assertEqual(self.gate.today("anonymous").text_messages, 1)

    def test_user_id_from_context(self):
        self.client.post(
            "/api/chat",
            json={"message": "hello", "userContext": {"userId": "carol", "tier": "free"}},
        )

        self.assertEqual(self.gate.today("carol").text_messages, 1)

    def test_provider_rate_limit(self):
        self.llm.complete.side_effect = LLMRateLimitError("slow down", retry_after="7")

        response = self.chat()

        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.headers["retry-after"], "7")
        self.assertIn("rate limit", response.json()["error"])

    def test_provider_rate_limit_default_retry_after(self):
        self.llm.complete.side_effect = LLMRateLimitError("slow down")

        response = self.chat()

        self.assertEqual(response.headers["retry-after"], "30")

    def test_provider_failure(self):
        self.llm.complete.side_effect = LLMClientError("boom")

        response = self.chat()

        self.assertEqual(response.status_code, 500)
        self.assertIn("having trouble", response.json()["error"])

    def test_unexpected_error(self):
        self.llm.complete.side_effect = RuntimeError("bug")

        response = self.chat()

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"error": "Something went wrong"})

    def test_tracking_failure_does_not_block(self):
        broken = MagicMock()
        broken.get_or_create.side_effect = ConnectionError("store down")
        self.gate = QuotaGate(broken, clock=lambda: DAY)

        response = self.chat()

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["response"], "Tap the gear icon to open Settings.")
        self.assertNotIn("usage", response.json())


class TestVoiceRoute(RouteTestCase):
    def send(self, content=b"voice bytes", **kwargs):
        return self.client.post(
            "/api/transcribe-voice",
            files={"audio": ("clip.m4a", content, "audio/m4a")},
            data={
                "userId": "alice",
                "userContext": json.dumps(FREE),
                "history": json.dumps([{"role": "user", "content": "hi"}]),
                **kwargs,
            },
        )

    def test_transcribes_and_replies(self):
        response = self.send()

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["transcription"], "How do I make a video call?")
        self.assertEqual(body["response"], "Tap the gear icon to open Settings.")
        self.assertEqual(body["usage"]["today"]["messages"], 1)
        self.assertEqual(body["usage"]["cost"], "0.0310")
        self.assertEqual(self.gate.today("alice").voice_messages, 1)

        kwargs = self.transcriber.transcribe.call_args.kwargs
        self.assertEqual(kwargs["filename"], "clip.m4a")
        messages = self.llm.complete.call_args.kwargs["messages"]
        self.assertIn("Device: Android.", messages[0]["content"])
        self.assertEqual(messages[1], {"role": "user", "content": "hi"})

    def test_voice_counts_toward_free_cap(self):
        for _ in range(20):
            self.chat()

        response = self.send()

        self.assertEqual(response.status_code, 429)
        self.transcriber.transcribe.assert_not_awaited()

    def test_missing_audio(self):
        response = self.client.post(
            "/api/transcribe-voice",
            data={"userId": "alice", "userContext": json.dumps(FREE)},
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Audio file is required"})

    def test_empty_audio(self):
        response = self.send(content=b"")

        self.assertEqual(response.status_code, 400)

    def test_bad_history(self):
        response = self.send(history="not json")

        self.assertEqual(response.status_code, 400)

    def test_upload_too_large(self):
        with patch.object(settings, "UPLOAD_MAX_BYTES", 4):
            response = self.send(content=b"way too many bytes")

        self.assertEqual(response.status_code, 413)


class TestVisionRoutes(RouteTestCase):
    def test_free_screenshot_rejected_without_counting(self):
        response = self.upload("/api/analyze-screenshot", "image")

        self.assertEqual(response.status_code, 403)
        body = response.json()
        self.assertTrue(body["requiresPremium"])
        self.assertIn("Screenshot Analysis", body["message"])
        self.assertEqual(self.gate.today("alice").screenshot_analyses, 0)
        self.llm.complete.assert_not_awaited()

    def test_free_scam_rejected(self):
        response = self.upload("/api/analyze-scam", "image")

        self.assertEqual(response.status_code, 403)
        self.assertTrue(response.json()["requiresPremium"])
        self.assertEqual(self.gate.today("alice").scam_detections, 0)

    def test_premium_screenshot(self):
        self.llm.complete.return_value = "Tap the blue Connect button."

        response = self.upload(
            "/api/analyze-screenshot", "image",
            user_id="bob", context=PREMIUM, question="What now?",
        )

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["analysis"], "Tap the blue Connect button.")
        self.assertEqual(body["feature"], "screenshot-analysis")
        self.assertEqual(body["usage"]["cost"], "0.0450")
        self.assertEqual(self.gate.today("bob").screenshot_analyses, 1)

    def test_premium_scam(self):
        self.llm.complete.return_value = "This is a scam. Never reply."

        response = self.upload("/api/analyze-scam", "image", user_id="bob", context=PREMIUM)

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["severity"], "danger")
        self.assertTrue(body["isDangerous"])
        self.assertEqual(body["feature"], "scam-detection")

    def test_premium_missing_image(self):
        response = self.client.post(
            "/api/analyze-screenshot",
            data={"userId": "bob", "userContext": json.dumps(PREMIUM)},
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Screenshot image is required"})

    def test_family_lacks_image_features(self):
        response = self.upload("/api/analyze-scam", "image", user_id="dora", context=FAMILY)

        self.assertEqual(response.status_code, 403)
        self.assertTrue(response.json()["requiresPremium"])
        self.llm.complete.assert_not_awaited()

    def test_vision_failure(self):
        self.llm.complete.side_effect = LLMClientError("boom")

        response = self.upload("/api/analyze-scam", "image", user_id="bob", context=PREMIUM)

        self.assertEqual(response.status_code, 500)
        self.assertIn("trouble analyzing", response.json()["error"])


class TestSafetyRoute(RouteTestCase):
    def test_analyze(self):
        self.llm.complete.return_value = "DANGEROUS: this is a fraud attempt."

        response = self.client.post("/api/analyze-safety", json={"content": "You won a prize!"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {
            "analysis": "DANGEROUS: this is a fraud attempt.",
            "isSafe": True,
            "severity": "danger",
        })

    def test_missing_content(self):
        response = self.client.post("/api/analyze-safety", json={})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Content is required"})


class TestUsageRoute(RouteTestCase):
    def test_reports_today_without_consuming(self):
        self.chat()
        self.chat()

        first = self.client.get("/api/usage/alice")
        second = self.client.get("/api/usage/alice")

        self.assertEqual(first.status_code, 200)
        self.assertEqual(first.json(), second.json())
        body = first.json()
        self.assertEqual(body["date"], "2026-03-14")
        self.assertEqual(body["textMessages"], 2)
        self.assertEqual(body["usage"]["today"]["remaining"], 18)

    def test_premium_view(self):
        body = self.client.get("/api/usage/bob", params={"tier": "premium"}).json()

        self.assertEqual(body["tier"], "premium")
        self.assertEqual(body["usage"]["today"]["limit"], "unlimited")


if __name__ == "__main__":
    unittest.main()
