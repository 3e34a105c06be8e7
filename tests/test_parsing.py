"""Tests for refinery.utils.parsing: strip_fences, response_text, invoke_with_retry."""

from unittest.mock import patch, MagicMock

import httpx
import pytest

from refinery.utils.parsing import response_text, strip_draft_fences, strip_fences, invoke_with_retry


# --- strip_fences ---

class TestStripFences:
    def test_strip_json_fences(self):
        text = '```json\n{"key": "value"}\n```'
        assert strip_fences(text) == '{"key": "value"}'

    def test_strip_plain_fences(self):
        text = '```\nA plain draft.\n```'
        assert strip_fences(text) == "A plain draft."

    def test_no_fences_returns_stripped(self):
        assert strip_fences("  A draft.  ") == "A draft."


# --- strip_draft_fences ---

class TestStripDraftFences:
    def test_wrapping_fence_removed(self):
        assert strip_draft_fences("```markdown\nA draft.\n```") == "A draft."

    def test_wrapping_fence_without_tag_removed(self):
        assert strip_draft_fences("  ```\nA draft.\n```  ") == "A draft."

    def test_embedded_code_block_kept(self):
        draft = (
            "Loops made simple.\n```python\nfor x in xs:\n    print(x)\n```\n"
            "Try it in your next project today!"
        )
        assert strip_draft_fences(draft) == draft

    def test_draft_starting_and_ending_with_blocks_kept(self):
        draft = "```py\na = 1\n```\nThen:\n```py\nb = 2\n```"
        assert strip_draft_fences(draft) == draft

    def test_no_fences_returns_stripped(self):
        assert strip_draft_fences("  A draft.  ") == "A draft."


# --- response_text ---

class TestResponseText:
    def test_string_content(self):
        response = MagicMock()
        response.content = "hello"
        assert response_text(response) == "hello"

    def test_block_content_keeps_text_blocks_only(self):
        response = MagicMock()
        response.content = [
            {"type": "text", "text": "hello "},
            {"type": "tool_use", "name": "x"},
            "world",
        ]
        assert response_text(response) == "hello world"


# --- invoke_with_retry ---

class TestInvokeWithRetry:
    def _mock_llm(self, side_effect):
        llm = MagicMock()
        llm.invoke.side_effect = side_effect
        return llm

    @patch("refinery.config._config", {"llm_max_retries": 3})
    def test_succeeds_on_first_try(self):
        response = MagicMock()
        response.content = "draft"
        llm = self._mock_llm([response])

        result = invoke_with_retry(llm, [{"role": "user", "content": "hi"}])

        assert result.content == "draft"
        assert llm.invoke.call_count == 1

    @patch("refinery.config._config", {"llm_max_retries": 3})
    def test_retries_on_connect_error(self):
        response = MagicMock()
        response.content = "draft"
        llm = self._mock_llm([
            httpx.ConnectError("connection refused"),
            response,
        ])

        result = invoke_with_retry(llm, [{"role": "user", "content": "hi"}])

        assert result.content == "draft"
        assert llm.invoke.call_count == 2

    @patch("refinery.config._config", {"llm_max_retries": 3})
    def test_retries_on_503(self):
        response_503 = httpx.Response(503, request=httpx.Request("POST", "https://api.example.com"))
        response = MagicMock()
        response.content = "draft"
        llm = self._mock_llm([
            httpx.HTTPStatusError("unavailable", request=response_503.request, response=response_503),
            response,
        ])

        result = invoke_with_retry(llm, [{"role": "user", "content": "hi"}])

        assert result.content == "draft"
        assert llm.invoke.call_count == 2

    @patch("refinery.config._config", {"llm_max_retries": 1})
    def test_raises_after_max_retries(self):
        llm = self._mock_llm([
            httpx.ReadTimeout("fail 1"),
            httpx.ReadTimeout("fail 2"),
        ])

        with pytest.raises(httpx.ReadTimeout):
            invoke_with_retry(llm, [{"role": "user", "content": "hi"}])

        assert llm.invoke.call_count == 2  # 1 initial + 1 retry

    @patch("refinery.config._config", {"llm_max_retries": 3})
    def test_does_not_retry_on_auth_error(self):
        response_401 = httpx.Response(401, request=httpx.Request("POST", "https://api.example.com"))
        llm = self._mock_llm([
            httpx.HTTPStatusError("unauthorized", request=response_401.request, response=response_401),
        ])

        with pytest.raises(httpx.HTTPStatusError):
            invoke_with_retry(llm, [{"role": "user", "content": "hi"}])

        assert llm.invoke.call_count == 1  # no retry for 401
