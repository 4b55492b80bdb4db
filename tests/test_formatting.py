"""Tests for the shared text formatting helpers."""

from __future__ import annotations

from cloud_mcp import formatting as fmt


def test_listing_header_and_blocks():
    text = fmt.listing([1, 2], "widget", lambda i: fmt.record_header(i, f"w{i}"))
    assert text == "Found 2 widget(s):\n\nID: 1 | w1\n\nID: 2 | w2"


def test_listing_empty():
    assert fmt.listing([], "volume", str) == "No volumes found."
    assert fmt.listing([], "IP address", str, plural="IP addresses") == "No IP addresses found."


def test_fields_indent_and_separator():
    assert fmt.fields(("Status", "running"), ("Region", "us-east")) == (
        "  Status: running | Region: us-east"
    )
    assert fmt.fields(("A", 1), indent=2) == "    A: 1"


def test_lists():
    assert fmt.joined(["a", "b"]) == "a, b"
    assert fmt.bracketed(["192.168.1.1"]) == "[192.168.1.1]"
    assert fmt.bracketed([]) == "[]"


def test_timestamp_seconds_precision():
    assert fmt.timestamp("2024-01-02T03:04:05.678901") == "2024-01-02T03:04:05"
    assert fmt.timestamp("2024-01-02T03:04:05Z") == "2024-01-02T03:04:05+00:00"
    assert fmt.timestamp("") == "-"
    assert fmt.timestamp("yesterday") == "yesterday"


def test_flags():
    assert fmt.enabled(True) == "Enabled"
    assert fmt.enabled(False) == "Disabled"
    assert fmt.flag(True) == "true"
    assert fmt.flag(False) == "false"


def test_units():
    assert fmt.mb(1024) == "1024 MB"
    assert fmt.gb(1000) == "1000 GB"
    assert fmt.mb_to_gb(25600) == "25 GB"
    assert fmt.mb_to_gb(1536) == "1.50 GB"
    assert fmt.conn_per_sec(0) == "0 conn/sec"
    assert fmt.size_bytes(512) == "512 bytes"
    assert fmt.size_bytes(1536) == "1.50 KB"
    assert fmt.size_bytes(5 * 1024**3) == "5 GB"


def test_details_and_sections():
    text = fmt.details(
        "Volume",
        "ID: 1",
        "",
        fmt.section("Attachment", "Linode: 5", ""),
    )
    assert text == "Volume Details:\nID: 1\n\nAttachment:\n  Linode: 5"


def test_or_dash():
    assert fmt.or_dash("") == "-"
    assert fmt.or_dash(None) == "-"
    assert fmt.or_dash(0) == "0"
    assert fmt.or_dash("x") == "x"
