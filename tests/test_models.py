"""Tests for mbox_ingest.models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from mbox_ingest.models import MboxParseOptions, MboxParseResult, ParsedEmail, SkipReason


def _email(**overrides) -> ParsedEmail:
    defaults = dict(
        message_id="m-1",
        from_address="alice@example.com",
        to_address="bob@example.com",
        subject="Hi",
        date="2025-06-02T12:00:00.000Z",
        text_content="hello",
        content_hash="abc",
    )
    defaults.update(overrides)
    return ParsedEmail(**defaults)


class TestParsedEmail:
    def test_dump_uses_wire_names(self):
        data = _email().model_dump(by_alias=True)
        assert data["from"] == "alice@example.com"
        assert data["to"] == "bob@example.com"

    def test_accepts_aliases(self):
        email = ParsedEmail.model_validate(
            {
                "message_id": "m",
                "from": "a@b.com",
                "to": "c@d.com",
                "subject": "s",
                "date": "d",
                "text_content": "t",
                "content_hash": "h",
            }
        )
        assert email.from_address == "a@b.com"

    def test_frozen(self):
        with pytest.raises(ValidationError):
            _email().subject = "changed"


class TestMboxParseOptions:
    def test_defaults(self):
        opts = MboxParseOptions()
        assert opts.max_emails == 100
        assert opts.min_content_length == 50
        assert opts.only_from_email is None
        assert opts.on_progress is None

    def test_rejects_zero_cap(self):
        with pytest.raises(ValidationError):
            MboxParseOptions(max_emails=0)

    def test_rejects_negative_length(self):
        with pytest.raises(ValidationError):
            MboxParseOptions(min_content_length=-1)

    def test_progress_callback_kept(self):
        calls = []
        opts = MboxParseOptions(on_progress=lambda p, n, s: calls.append(p))
        opts.on_progress(5, 0, "x")
        assert calls == [5]
        assert "on_progress" not in opts.model_dump()


class TestMboxParseResult:
    def test_empty(self):
        result = MboxParseResult()
        assert result.emails == []
        assert result.skipped_reasons == {}

    def test_skip_reason_values(self):
        assert {r.value for r in SkipReason} == {
            "empty_content",
            "content_too_short",
            "duplicate_content",
            "not_from_user",
        }
