from datetime import datetime

import pytest

from multisite_abilities.utils.formatting import (
    format_datetime,
    is_email,
    sanitize_content,
    sanitize_email,
    sanitize_key,
    sanitize_text_field,
    sanitize_textarea_field,
    sanitize_title,
    sanitize_user,
    strip_all_tags,
    ucwords_from_slug,
)


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("<b>Bold</b> move", "Bold move"),
        ("<script>alert(1)</script>Safe", "Safe"),
        ("  padded  ", "padded"),
    ],
)
def test_strip_all_tags(raw, expected) -> None:
    assert strip_all_tags(raw) == expected


def test_sanitize_text_field_collapses_lines_and_octets() -> None:
    assert sanitize_text_field("Line one\nLine   two %20 <i>x</i>") == "Line one Line two x"


def test_sanitize_textarea_field_keeps_lines() -> None:
    assert sanitize_textarea_field("First  line\n<b>Second</b>\tline ") == "First line\nSecond line"


@pytest.mark.parametrize(
    "raw,expected",
    [("BlogName", "blogname"), (" page_on_front ", "page_on_front"), ("bad key!", "badkey"), ("", "")],
)
def test_sanitize_key(raw, expected) -> None:
    assert sanitize_key(raw) == expected


@pytest.mark.parametrize(
    "raw,expected",
    [("My Site.org", "my-site-org"), ("Café Olé", "cafe-ole"), ("  --Hello--  ", "hello"), ("***", "")],
)
def test_sanitize_title(raw, expected) -> None:
    assert sanitize_title(raw) == expected


@pytest.mark.parametrize(
    "raw,expected",
    [
        (" admin@example.com ", "admin@example.com"),
        ("first.last+tag@sub.example.org", "first.last+tag@sub.example.org"),
        ("no-at-sign", ""),
        ("a@b", ""),
        ("user@localhost", ""),
    ],
)
def test_sanitize_email(raw, expected) -> None:
    assert sanitize_email(raw) == expected
    assert is_email(raw) is bool(expected)


def test_sanitize_user_strict() -> None:
    assert sanitize_user("jo<b>hn</b> doe!", strict=True) == "john doe"
    assert sanitize_user("jöhn", strict=True) == "jhn"
    assert sanitize_user("jöhn") == "jöhn"


class TestSanitizeContent:
    MARKUP = (
        '<p onclick="steal()">Hi</p><script>alert(1)</script>'
        '<iframe src="https://x.example"></iframe><a href="javascript:alert(1)">x</a>'
    )

    def test_unfiltered_keeps_markup(self):
        assert sanitize_content(self.MARKUP, unfiltered=True) == self.MARKUP

    def test_filtered_removes_active_content(self):
        cleaned = sanitize_content(self.MARKUP, unfiltered=False)

        assert "<script" not in cleaned
        assert "<iframe" not in cleaned
        assert "onclick" not in cleaned
        assert "javascript:" not in cleaned
        assert cleaned.startswith("<p>Hi</p>")

    def test_block_comments_survive_filtering(self):
        markup = "<!-- wp:paragraph --><p>Text</p><!-- /wp:paragraph -->"
        assert sanitize_content(markup, unfiltered=False) == markup


def test_ucwords_from_slug() -> None:
    assert ucwords_from_slug("call-to-action") == "Call To Action"
    assert ucwords_from_slug("hero") == "Hero"


def test_format_datetime() -> None:
    assert format_datetime(datetime(2024, 5, 1, 9, 3, 7)) == "2024-05-01 09:03:07"
    assert format_datetime(None) is None
