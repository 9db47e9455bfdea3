"""
Data models for the GitHub PR Review Commenter
"""

from .file_change import FileChange
from .code_issue import CodeIssue
from .review_comment import CommentRecord, CommentSide, MatchKind, ResolvedLocation
from .pull_request import PullRequestRef
from .review_result import ReviewResult, determine_review_status

__all__ = [
    "FileChange",
    "CodeIssue",
    "CommentRecord",
    "CommentSide",
    "MatchKind",
    "ResolvedLocation",
    "PullRequestRef",
    "ReviewResult",
    "determine_review_status",
]
