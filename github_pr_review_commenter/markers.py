"""
Comment markers

The markers are hidden HTML comments written at the top of every body this
service posts. They are the only state that survives between runs: a comment
is "ours" if and only if its body carries the bot marker. The literals must
never change or be reused, otherwise earlier comments stop being recognised.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict

CommentRole = Literal["inline", "summary"]

BOT_IDENTIFIER = "<!-- github-pr-review-commenter -->"
INLINE_MARKER = "<!-- github-pr-review-commenter:inline -->"
SUMMARY_MARKER = "<!-- github-pr-review-commenter:summary -->"


class CommentMarkers(BaseModel):
    """Immutable set of marker literals, injected wherever comments are read or written"""

    model_config = ConfigDict(frozen=True)

    bot_identifier: str = BOT_IDENTIFIER
    inline_marker: str = INLINE_MARKER
    summary_marker: str = SUMMARY_MARKER

    def role_marker(self, role: CommentRole) -> str:
        return self.inline_marker if role == "inline" else self.summary_marker


COMMENT_MARKERS = CommentMarkers()


def has_bot_marker(body: str | None, markers: CommentMarkers = COMMENT_MARKERS) -> bool:
    """Return True if a comment body was written by this service"""
    return bool(body) and markers.bot_identifier in body


def has_role_marker(body: str | None, role: CommentRole, markers: CommentMarkers = COMMENT_MARKERS) -> bool:
    """Return True if a body carries both the bot marker and the given role marker"""
    return has_bot_marker(body, markers) and markers.role_marker(role) in body


def add_markers(content: str, role: CommentRole, markers: CommentMarkers = COMMENT_MARKERS) -> str:
    """Prefix rendered content with the bot and role markers"""
    return f"{markers.bot_identifier}\n{markers.role_marker(role)}\n\n{content}"


def normalize_body(body: str) -> str:
    """Normalise a body for equality checks; GitHub may return CRLF line endings"""
    return "\n".join(line.rstrip() for line in body.replace("\r\n", "\n").split("\n")).strip()
