"""Unit tests for comment markers."""

from github_pr_review_commenter.markers import (
    BOT_IDENTIFIER,
    COMMENT_MARKERS,
    CommentMarkers,
    add_markers,
    has_bot_marker,
    has_role_marker,
    normalize_body,
)


def test_marker_literals() -> None:
    assert COMMENT_MARKERS.bot_identifier == "<!-- github-pr-review-commenter -->"
    assert COMMENT_MARKERS.role_marker("inline") == "<!-- github-pr-review-commenter:inline -->"
    assert COMMENT_MARKERS.role_marker("summary") == "<!-- github-pr-review-commenter:summary -->"


def test_add_markers_layout() -> None:
    body = add_markers("content", "inline")

    assert body == f"{BOT_IDENTIFIER}\n<!-- github-pr-review-commenter:inline -->\n\ncontent"


def test_marker_detection() -> None:
    assert has_bot_marker(add_markers("x", "summary")) is True
    assert has_bot_marker("plain human comment") is False
    assert has_bot_marker(None) is False
    assert has_role_marker(add_markers("x", "summary"), "summary") is True
    assert has_role_marker(add_markers("x", "summary"), "inline") is False


def test_role_marker_alone_is_not_bot_authored() -> None:
    assert has_role_marker("<!-- github-pr-review-commenter:inline -->\nquoted", "inline") is False


def test_custom_markers() -> None:
    markers = CommentMarkers(bot_identifier="<!-- other-bot -->")

    body = add_markers("x", "inline", markers)

    assert has_bot_marker(body, markers) is True
    assert has_bot_marker(body) is False


def test_normalize_body() -> None:
    assert normalize_body("a  \r\nb\r\n\r\n") == "a\nb"
    assert normalize_body("a\nb") == normalize_body("a\r\nb")
