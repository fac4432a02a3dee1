"""Unit tests for the recipient list store and upload parsing."""

from __future__ import annotations

import logging

import pytest

from relaygate.core.recipients import RecipientListStore, parse_recipients
from relaygate.errors import NotFoundError


class TestParseRecipients:
    def test_blank_lines_discarded(self):
        assert parse_recipients("+1555\n\n+1556\n") == ("+1555", "+1556")

    def test_bytes_payload(self):
        assert parse_recipients(b"+1555\r\n+1556\r\n") == ("+1555", "+1556")

    def test_whitespace_only_lines_and_padding(self):
        assert parse_recipients("  +1555  \n \t \n+1556") == ("+1555", "+1556")

    def test_order_preserved_and_duplicates_kept(self):
        assert parse_recipients("c\na\nb\na\n") == ("c", "a", "b", "a")

    def test_bom_stripped(self):
        assert parse_recipients("\ufeff+1555\n".encode("utf-8")) == ("+1555",)

    def test_invalid_utf8_does_not_raise(self):
        assert len(parse_recipients(b"+1555\n\xff\xfe\n")) == 2

    def test_invalid_utf8_logs_one_warning(self, caplog):
        caplog.set_level(logging.WARNING, logger="relaygate.core.recipients")
        parse_recipients(b"+1555\n\xff\xfe\n\xff\n")
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert "not valid UTF-8" in warnings[0].getMessage()

    def test_utf16_upload_warns_about_nul(self, caplog):
        caplog.set_level(logging.WARNING, logger="relaygate.core.recipients")
        parse_recipients("+1555\n+1556\n".encode("utf-16-le"))
        assert "NUL characters" in caplog.text

    def test_clean_upload_logs_no_warning(self, caplog):
        caplog.set_level(logging.WARNING, logger="relaygate.core.recipients")
        parse_recipients(b"+1555\n+1556\n")
        assert [r for r in caplog.records if r.name == "relaygate.core.recipients"] == []

    def test_empty_payload(self):
        assert parse_recipients("") == ()


class TestRecipientListStore:
    def test_nothing_uploaded(self, store: RecipientListStore):
        assert store.get_current() is None
        with pytest.raises(NotFoundError):
            store.require_current()

    def test_upload_becomes_current(self, store: RecipientListStore):
        recipients = store.set_from_upload("+1555\n\n+1556\n", uploaded_by=42)
        assert list(recipients.addresses) == ["+1555", "+1556"]
        assert recipients.uploaded_by == "42"
        assert store.require_current() is recipients

    def test_last_upload_wins(self, store: RecipientListStore):
        first = store.set_from_upload("+1\n", uploaded_by="a")
        second = store.set_from_upload("+2\n+3\n", uploaded_by="b")
        assert store.get_current() is second
        # The earlier list object is untouched.
        assert first.addresses == ("+1",)

    def test_empty_upload_is_a_legal_list(self, store: RecipientListStore):
        recipients = store.set_from_upload("\n\n")
        assert len(recipients) == 0
        assert store.get_current() is not None

    def test_clear(self, store: RecipientListStore):
        store.set_from_upload("+1\n")
        store.clear()
        assert store.get_current() is None
