"""
Multi-account management.

An ``AccountEntry`` binds one Linode client to a name, label and token. The
``AccountManager`` owns every entry plus the name of the current one. Tool
calls resolve the current entry once and keep that reference for the rest of
the call, so a concurrent switch never changes the account a running call
talks to.

Locking: ``switch`` and ``add`` take the write side of a reader/writer lock,
``list``, ``get`` and ``get_current`` take the read side. Every held region is
a dict lookup or assignment; provider I/O always happens after release.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
import logging
import threading
from typing import TYPE_CHECKING

import httpx

from cloud_mcp.config import check_api_url
from cloud_mcp.errors import AccountError, ConfigError
from cloud_mcp.linode.client import DEFAULT_API_URL, LinodeClient
from cloud_mcp.observability import register_secret

if TYPE_CHECKING:
    from cloud_mcp.config import CloudMcpConfig

logger = logging.getLogger("cloud-mcp.accounts")


class ReadWriteLock:
    """Writer-preferring reader/writer lock.

    Shared by asyncio tasks and worker threads alike; holders never await
    while holding it.
    """

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            while self._writer or self._readers:
                self._cond.wait()
            self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


@dataclass(frozen=True)
class AccountEntry:
    """One credentialed account. Immutable; the client is built once."""

    name: str
    label: str
    token: str = field(repr=False)
    api_base_url: str
    client: LinodeClient = field(repr=False, compare=False)

    @classmethod
    def create(
        cls,
        name: str,
        label: str,
        token: str,
        api_base_url: str = "",
        *,
        timeout: float = 30.0,
        page_size: int = 100,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> AccountEntry:
        """Validate inputs and construct the entry with its client.

        Raises:
            ConfigError: empty name or token, or malformed base URL.
        """
        if not name:
            raise ConfigError("account name must not be empty")
        if not token:
            raise ConfigError(f"account {name}: token must not be empty")
        base_url = api_base_url or DEFAULT_API_URL
        check_api_url(base_url)
        register_secret(token)
        client = LinodeClient(
            token, base_url, timeout=timeout, page_size=page_size, transport=transport
        )
        return cls(
            name=name, label=label or name, token=token, api_base_url=base_url, client=client
        )


@dataclass(frozen=True)
class AccountSummary:
    name: str
    label: str
    is_current: bool


class AccountManager:
    """Owns account entries and the current-account pointer."""

    def __init__(
        self,
        entries: list[AccountEntry] | None = None,
        current: str = "",
        *,
        timeout: float = 30.0,
        page_size: int = 100,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._lock = ReadWriteLock()
        self._timeout = timeout
        self._page_size = page_size
        self._transport = transport
        self._entries: dict[str, AccountEntry] = {}
        self._current = ""
        for entry in entries or []:
            if entry.name in self._entries:
                raise ConfigError(f"account {entry.name} configured twice")
            self._entries[entry.name] = entry
        if current:
            if current not in self._entries:
                raise ConfigError(f"default account {current!r} is not configured")
            self._current = current

    @classmethod
    def from_config(
        cls, config: CloudMcpConfig, *, transport: httpx.AsyncBaseTransport | None = None
    ) -> AccountManager:
        """Build every configured account; the default account becomes current."""
        linode = config.linode
        entries = [
            AccountEntry.create(
                acct.name,
                acct.label,
                acct.resolve_token(),
                acct.api_url,
                timeout=linode.request_timeout,
                page_size=linode.page_size,
                transport=transport,
            )
            for acct in sorted(linode.accounts.values(), key=lambda a: a.name)
        ]
        manager = cls(
            entries,
            current=linode.default_account,
            timeout=linode.request_timeout,
            page_size=linode.page_size,
            transport=transport,
        )
        logger.info(f"Loaded {len(entries)} account(s), current={manager.current_name or '-'}")
        return manager

    def new_entry(self, name: str, label: str, token: str, api_base_url: str = "") -> AccountEntry:
        """Build an entry with this manager's client settings (not yet added)."""
        return AccountEntry.create(
            name,
            label,
            token,
            api_base_url,
            timeout=self._timeout,
            page_size=self._page_size,
            transport=self._transport,
        )

    @property
    def current_name(self) -> str:
        with self._lock.read():
            return self._current

    def list(self) -> list[AccountSummary]:
        with self._lock.read():
            return [
                AccountSummary(name, entry.label, name == self._current)
                for name, entry in sorted(self._entries.items())
            ]

    def get(self, name: str) -> AccountEntry:
        with self._lock.read():
            entry = self._entries.get(name)
        if entry is None:
            raise AccountError(f"unknown account {name}")
        return entry

    def get_current(self) -> AccountEntry:
        with self._lock.read():
            entry = self._entries.get(self._current) if self._current else None
        if entry is None:
            raise AccountError("no current account")
        return entry

    def switch(self, name: str) -> AccountEntry:
        """Make ``name`` current. No network I/O; callers verify afterwards."""
        previous = ""
        with self._lock.write():
            entry = self._entries.get(name)
            if entry is not None:
                previous, self._current = self._current, name
        if entry is None:
            raise AccountError(f"unknown account {name}")
        logger.info(f"Switched account {previous or '-'} -> {name}")
        return entry

    def add(self, entry: AccountEntry) -> None:
        with self._lock.write():
            duplicate = entry.name in self._entries
            if not duplicate:
                self._entries[entry.name] = entry
        if duplicate:
            raise AccountError(f"account {entry.name} already configured")
        logger.info(f"Added account {entry.name}")

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._entries)

    async def aclose(self) -> None:
        with self._lock.read():
            entries = list(self._entries.values())
        for entry in entries:
            await entry.client.aclose()
