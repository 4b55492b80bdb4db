"""Tests for account entries, the account manager and its lock."""

from __future__ import annotations

import logging
import threading
import time

import pytest

from cloud_mcp.accounts import AccountEntry, AccountManager, ReadWriteLock
from cloud_mcp.errors import AccountError, ConfigError
from cloud_mcp.linode.client import DEFAULT_API_URL
from cloud_mcp.observability import TokenRedactionFilter


class TestAccountEntry:
    def test_defaults_base_url(self, make_entry):
        entry = make_entry("main")
        assert entry.api_base_url == DEFAULT_API_URL
        assert entry.client.base_url == DEFAULT_API_URL

    def test_custom_base_url(self, make_entry):
        entry = make_entry("alt", api_url="http://localhost:8080/v4")
        assert entry.client.base_url == "http://localhost:8080/v4"

    @pytest.mark.parametrize("url", ["ftp://api.linode.com/v4", "api.linode.com/v4", "https://"])
    def test_malformed_url(self, url):
        with pytest.raises(ConfigError, match="malformed api url"):
            AccountEntry.create("bad", "Bad", "secret-token", url)

    def test_empty_token(self):
        with pytest.raises(ConfigError, match="token must not be empty"):
            AccountEntry.create("bad", "Bad", "")

    def test_token_not_in_repr(self, make_entry):
        entry = make_entry("main", token="super-secret-token-value")
        assert "super-secret-token-value" not in repr(entry)

    def test_token_registered_for_redaction(self, make_entry):
        make_entry("main", token="redact-me-please-123")
        record = logging.LogRecord(
            "cloud-mcp", logging.INFO, "", 0, "token is %s", ("redact-me-please-123",), None
        )
        TokenRedactionFilter().filter(record)
        assert record.getMessage() == "token is ***"


class TestAccountManager:
    def test_list_sorted_with_current_flag(self, accounts):
        summaries = accounts.list()
        assert [s.name for s in summaries] == ["integration", "secondary"]
        assert [s.is_current for s in summaries] == [True, False]
        assert summaries[0].label == "HTTP Test Integration Account"

    def test_get_current(self, accounts):
        assert accounts.get_current().name == "integration"

    def test_empty_manager_has_no_current(self):
        with pytest.raises(AccountError, match="no current account"):
            AccountManager().get_current()

    def test_switch(self, accounts):
        entry = accounts.switch("secondary")
        assert entry.name == "secondary"
        assert accounts.current_name == "secondary"
        assert accounts.get_current() is entry

    def test_switch_unknown_keeps_current(self, accounts):
        with pytest.raises(AccountError, match="unknown account nope"):
            accounts.switch("nope")
        assert accounts.current_name == "integration"

    def test_get_unknown(self, accounts):
        with pytest.raises(AccountError, match="unknown account ghost"):
            accounts.get("ghost")

    def test_add_and_duplicate(self, accounts, make_entry):
        accounts.add(make_entry("third"))
        assert len(accounts) == 3
        with pytest.raises(AccountError, match="account third already configured"):
            accounts.add(make_entry("third"))

    def test_add_does_not_change_current(self, accounts, make_entry):
        accounts.add(make_entry("third"))
        assert accounts.current_name == "integration"

    def test_unknown_default_rejected(self, make_entry):
        with pytest.raises(ConfigError, match="default account 'x' is not configured"):
            AccountManager([make_entry("a")], current="x")

    def test_duplicate_entries_rejected(self, make_entry):
        with pytest.raises(ConfigError, match="configured twice"):
            AccountManager([make_entry("a"), make_entry("a")])

    def test_resolved_entry_survives_switch(self, accounts):
        resolved = accounts.get_current()
        accounts.switch("secondary")
        assert resolved.name == "integration"
        assert resolved.client is accounts.get("integration").client

    def test_new_entry_is_not_added(self, accounts):
        entry = accounts.new_entry("pending", "Pending", "pending-token-123")
        assert entry.name == "pending"
        with pytest.raises(AccountError):
            accounts.get("pending")

    def test_concurrent_switches_and_reads(self, accounts):
        errors: list[Exception] = []

        def writer(name: str):
            try:
                for _ in range(200):
                    accounts.switch(name)
            except Exception as e:
                errors.append(e)

        def reader():
            try:
                for _ in range(200):
                    assert accounts.get_current().name in ("integration", "secondary")
                    assert len(accounts.list()) == 2
            except Exception as e:
                errors.append(e)

        threads = [
            threading.Thread(target=writer, args=("integration",)),
            threading.Thread(target=writer, args=("secondary",)),
            *[threading.Thread(target=reader) for _ in range(4)],
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10)
        assert not errors
        assert accounts.current_name in ("integration", "secondary")


class TestReadWriteLock:
    def test_readers_share(self):
        lock = ReadWriteLock()
        with lock.read():
            with lock.read():
                pass

    def test_writer_excludes_readers(self):
        lock = ReadWriteLock()
        order: list[str] = []
        writer_in = threading.Event()

        def writer():
            with lock.write():
                writer_in.set()
                time.sleep(0.05)
                order.append("write")

        def reader():
            writer_in.wait()
            with lock.read():
                order.append("read")

        tw = threading.Thread(target=writer)
        tr = threading.Thread(target=reader)
        tw.start()
        tr.start()
        tw.join()
        tr.join()
        assert order == ["write", "read"]
