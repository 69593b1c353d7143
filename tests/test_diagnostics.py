"""Tests for header merging and curl reconstruction."""

from __future__ import annotations

import logging

import pytest

from bawharness.diagnostics import BANNER, log_curl, merge_headers, render_curl


class TestMergeHeaders:
    def test_json_default_first(self):
        merged = merge_headers({"Authorization": "Basic abc"})
        assert list(merged) == ["Content-Type", "Authorization"]
        assert merged["Content-Type"] == "application/json"

    def test_none_values_skipped(self):
        merged = merge_headers({"Authorization": "Basic abc", "X-Missing": None})
        assert "X-Missing" not in merged

    def test_values_coerced_to_str(self):
        merged = merge_headers({"X-Retry": 3, "X-Flag": True})
        assert merged["X-Retry"] == "3"
        assert merged["X-Flag"] == "True"

    def test_auth_overrides_default(self):
        merged = merge_headers({"Content-Type": "application/json; charset=utf-8"})
        assert merged["Content-Type"] == "application/json; charset=utf-8"
        assert len(merged) == 1


class TestRenderCurl:
    def test_get_has_no_body(self):
        cmd = render_curl("GET", "https://h/x", {"Accept": "application/json"}, {"ignored": 1})
        assert cmd == 'curl -X GET "https://h/x" \\\n -H "Accept: application/json"'
        assert "-d" not in cmd

    def test_post_with_payload(self):
        cmd = render_curl(
            "POST",
            "https://h/bpm/user-tasks/1/complete",
            {"Content-Type": "application/json", "BPMCSRFToken": "tok"},
            {"output": [{"name": "tareaAprobada", "data": True}]},
        )
        lines = cmd.split("\n")
        assert lines[0] == 'curl -X POST "https://h/bpm/user-tasks/1/complete" \\'
        assert lines[1] == ' -H "Content-Type: application/json" \\'
        assert lines[2] == ' -H "BPMCSRFToken: tok" \\'
        assert lines[3] == """  -d '{"output":[{"name":"tareaAprobada","data":true}]}'"""

    def test_post_without_payload(self):
        cmd = render_curl("POST", "https://h/x", {"Accept": "application/json"})
        assert "-d" not in cmd

    def test_single_quote_escaped(self):
        cmd = render_curl("POST", "https://h/x", {}, {"a": "b's value"})
        assert """-d '{"a":"b'\\''s value"}'""" in cmd

    def test_no_headers(self):
        assert render_curl("GET", "https://h/x", {}) == 'curl -X GET "https://h/x"'

    def test_url_kept_verbatim(self):
        cmd = render_curl("GET", "https://h/rest/PR/REST%20Service/x", {})
        assert '"https://h/rest/PR/REST%20Service/x"' in cmd


class TestLogCurl:
    def test_block_is_bannered(self, caplog: pytest.LogCaptureFixture):
        caplog.set_level(logging.INFO, logger="bawharness.diagnostics")
        log_curl('curl -X GET "https://h/x"')

        assert len(caplog.records) == 1
        message = caplog.records[0].getMessage()
        assert message.index(BANNER) < message.index("curl -X GET")
        assert "[BAW API] CURL COMMAND:" in message
