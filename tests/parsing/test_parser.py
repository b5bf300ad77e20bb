from __future__ import annotations

import base64

import pytest

from gmail_inbox.models import Header, MessagePart
from gmail_inbox.parsing.parser import (
    decode_base64url,
    encode_base64url,
    extract_body,
    get_header,
    parse_address,
    parse_date,
    strip_html,
)


# --- get_header ---

def test_get_header_is_case_insensitive_and_first_match_wins() -> None:
    headers = [
        Header("subject", "first"),
        Header("Subject", "second"),
        Header("From", "a@b.c"),
    ]
    assert get_header(headers, "SUBJECT") == "first"
    assert get_header(headers, "from") == "a@b.c"


def test_get_header_missing_returns_empty_string() -> None:
    assert get_header([], "Date") == ""
    assert get_header([Header("From", "x")], "List-Unsubscribe") == ""


# --- decode_base64url ---

def test_decode_base64url_handles_missing_padding_and_urlsafe_alphabet() -> None:
    text = "Grüße?>>> ~~~"
    encoded = base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii").rstrip("=")
    assert "=" not in encoded
    assert decode_base64url(encoded) == text


def test_decode_base64url_accepts_standard_alphabet() -> None:
    encoded = base64.b64encode("subjects??>>".encode("utf-8")).decode("ascii")
    assert decode_base64url(encoded) == "subjects??>>"


def test_decode_base64url_roundtrip() -> None:
    text = "Line one\r\nLine two with ümlauts and emoji \U0001F600"
    assert decode_base64url(encode_base64url(text)) == text


@pytest.mark.parametrize("bad", ["not base64!!", "abcde", "@@@@"])
def test_decode_base64url_returns_malformed_input_unchanged(bad: str) -> None:
    assert decode_base64url(bad) == bad


def test_decode_base64url_empty() -> None:
    assert decode_base64url("") == ""


# --- extract_body ---

def _leaf(mime: str, text: str) -> MessagePart:
    return MessagePart(mime_type=mime, body_data=encode_base64url(text))


def test_extract_body_multipart_alternative() -> None:
    payload = MessagePart(
        mime_type="multipart/alternative",
        parts=(_leaf("text/plain", "Hello"), _leaf("text/html", "<p>Hello</p>")),
    )
    body = extract_body(payload)
    assert body.text == "Hello"
    assert body.html == "<p>Hello</p>"


def test_extract_body_is_independent_of_part_order() -> None:
    payload = MessagePart(
        mime_type="multipart/alternative",
        parts=(_leaf("text/html", "<p>Hello</p>"), _leaf("text/plain", "Hello")),
    )
    body = extract_body(payload)
    assert (body.text, body.html) == ("Hello", "<p>Hello</p>")


def test_extract_body_root_level_body_without_parts() -> None:
    assert extract_body(_leaf("text/plain", "just text")).text == "just text"

    body = extract_body(_leaf("text/html", "<b>x</b>"))
    assert body.html == "<b>x</b>"
    assert body.text == ""


def test_extract_body_ignores_root_body_of_other_types() -> None:
    body = extract_body(_leaf("application/pdf", "%PDF"))
    assert body.text == ""
    assert body.html == ""


def test_extract_body_walks_nested_parts() -> None:
    payload = MessagePart(
        mime_type="multipart/mixed",
        parts=(
            MessagePart(
                mime_type="multipart/alternative",
                parts=(_leaf("text/plain", "nested"), _leaf("text/html", "<i>nested</i>")),
            ),
            _leaf("application/pdf", "attachment"),
        ),
    )
    body = extract_body(payload)
    assert body.text == "nested"
    assert body.html == "<i>nested</i>"


def test_extract_body_policy_last_vs_first() -> None:
    payload = MessagePart(
        mime_type="multipart/mixed",
        parts=(
            _leaf("text/plain", "outer"),
            MessagePart(mime_type="multipart/alternative", parts=(_leaf("text/plain", "inner"),)),
        ),
    )
    assert extract_body(payload).text == "inner"
    assert extract_body(payload, policy="first").text == "outer"


@pytest.mark.parametrize("policy", ["last", "first"])
def test_extract_body_parts_override_root_body(policy: str) -> None:
    payload = MessagePart(
        mime_type="text/plain",
        body_data=encode_base64url("root"),
        parts=(_leaf("text/plain", "child"),),
    )
    assert extract_body(payload, policy=policy).text == "child"


@pytest.mark.parametrize("policy", ["last", "first"])
def test_extract_body_root_body_fills_slot_no_part_filled(policy: str) -> None:
    payload = MessagePart(
        mime_type="text/plain",
        body_data=encode_base64url("root"),
        parts=(_leaf("text/html", "<p>child</p>"),),
    )
    body = extract_body(payload, policy=policy)
    assert body.text == "root"
    assert body.html == "<p>child</p>"


def test_strip_html_keeps_single_spaces_between_blocks() -> None:
    assert strip_html("<p>one</p>\n \n<p>two</p>") == "one two"


def test_extract_body_skips_parts_without_data() -> None:
    payload = MessagePart(
        mime_type="multipart/alternative",
        parts=(MessagePart(mime_type="text/plain"), _leaf("text/html", "<p>only html</p>")),
    )
    body = extract_body(payload)
    assert body.text == ""
    assert body.html == "<p>only html</p>"


def test_extract_body_none_payload() -> None:
    body = extract_body(None)
    assert body.text == ""
    assert body.html == ""


def test_extract_body_rejects_unknown_policy() -> None:
    with pytest.raises(ValueError):
        extract_body(MessagePart(), policy="middle")


# --- parse_address ---

def test_parse_address_display_name_and_address() -> None:
    sender = parse_address('"Jane Doe" <jane@x.com>')
    assert sender.name == "Jane Doe"
    assert sender.email == "jane@x.com"


def test_parse_address_plain_address() -> None:
    sender = parse_address("plain@x.com")
    assert sender.name == "plain@x.com"
    assert sender.email == "plain@x.com"


def test_parse_address_empty_name_falls_back_to_address() -> None:
    sender = parse_address("<solo@x.com>")
    assert sender.name == "solo@x.com"
    assert sender.email == "solo@x.com"

    quoted = parse_address('"" <quoted@x.com>')
    assert quoted.name == "quoted@x.com"


def test_parse_address_unquoted_name() -> None:
    sender = parse_address("GitHub <noreply@github.com>")
    assert sender.name == "GitHub"
    assert sender.email == "noreply@github.com"


# --- strip_html ---

def test_strip_html_decodes_entities() -> None:
    assert strip_html("<p>Hi &amp; bye</p>") == "Hi & bye"


def test_strip_html_drops_style_blocks() -> None:
    assert strip_html("<style>.a{color:red}</style><b>Text</b>") == "Text"


def test_strip_html_drops_script_blocks_across_lines() -> None:
    html = "<SCRIPT type='text/javascript'>\nvar x = 1;\n</SCRIPT><div>Body</div>"
    assert strip_html(html) == "Body"


def test_strip_html_only_known_entities() -> None:
    text = strip_html("&lt;a&gt; &quot;q&quot; &#39;s&#39; &rsquo; &ldquo;x&rdquo; &copy;")
    assert text == "<a> \"q\" 's' ' \"x\" &copy;"


def test_strip_html_collapses_whitespace() -> None:
    assert strip_html("<div>a</div>\n\n\n<div>b&nbsp;&nbsp;c</div>") == "a b c"


@pytest.mark.parametrize("empty", ["", None])
def test_strip_html_empty(empty) -> None:
    assert strip_html(empty) == ""


# --- parse_date ---

def test_parse_date_rfc2822_to_utc() -> None:
    iso, ts = parse_date("Mon, 01 Jan 2024 12:30:00 +0200")
    assert iso == "2024-01-01T10:30:00.000Z"
    assert ts == 1704105000000


def test_parse_date_iso_fallback() -> None:
    iso, ts = parse_date("2024-01-01T10:30:00Z")
    assert iso == "2024-01-01T10:30:00.000Z"
    assert ts == 1704105000000


@pytest.mark.parametrize("bad", ["", "not a date", "yesterday-ish"])
def test_parse_date_invalid_returns_none(bad: str) -> None:
    assert parse_date(bad) is None
