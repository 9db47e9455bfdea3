"""Comment body rendering.

Rendering is pure: bodies depend only on the issues passed in and the
rendering options, never on placement or remote state.
"""

import re
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from ..models import CodeIssue, PullRequestRef, ResolvedLocation, ReviewResult

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

# Past this many issues the detailed summary points at the inline comments instead
MAX_DETAILED_ISSUES = 15

ISSUE_ICONS = {
    "error": "❌",
    "warning": "⚠️",
    "info": "ℹ️",
}

SEVERITY_ICONS = {
    "high": "🚨",
    "medium": "⚠️",
    "low": "ℹ️",
}

STATUS_ICONS = {
    "passed": "✅",
    "needs_attention": "⚠️",
}

CATEGORY_ICONS = {
    "bug": "🐛",
    "security": "🔒",
    "performance": "⚡",
    "rule_violation": "📏",
    "best_practice": "💡",
    "maintainability": "🔧",
    "documentation": "📝",
    "architecture": "🏗️",
    "i18n": "🌍",
    "api_design": "🔌",
    "data_flow": "🌊",
    "business_logic": "💼",
}

CATEGORY_NAMES = {
    "bug": "Bugs",
    "security": "Security Issues",
    "performance": "Performance Issues",
    "rule_violation": "Rule Violations",
    "best_practice": "Best Practices",
    "maintainability": "Maintainability",
    "documentation": "Documentation & Typos",
    "architecture": "Architecture & Design",
    "i18n": "Internationalization",
    "api_design": "API Design",
    "data_flow": "Data Flow & State",
    "business_logic": "Business Logic",
}

LANGUAGES = {
    "ts": "typescript",
    "tsx": "typescript",
    "js": "javascript",
    "jsx": "javascript",
    "py": "python",
    "java": "java",
    "go": "go",
    "rs": "rust",
    "cpp": "cpp",
    "cc": "cpp",
    "cxx": "cpp",
    "c": "c",
    "cs": "csharp",
    "php": "php",
    "rb": "ruby",
    "swift": "swift",
    "kt": "kotlin",
    "vue": "vue",
    "svelte": "svelte",
    "html": "html",
    "css": "css",
    "scss": "scss",
    "sass": "scss",
    "json": "json",
    "yaml": "yaml",
    "yml": "yaml",
    "xml": "xml",
    "sql": "sql",
    "sh": "bash",
    "bash": "bash",
}

CODE_PATTERNS = [
    re.compile(r"^\s*[A-Za-z_$][\w$]*\s*[=:]", re.MULTILINE),
    re.compile(r"^\s*[A-Za-z_$][\w$.]*\s*\(", re.MULTILINE),
    re.compile(r"^\s*[{}\[\]]", re.MULTILINE),
    re.compile(r"^\s*(import|export|from|function|def|class|interface|type|const|let|var|return)\s+", re.MULTILINE),
    re.compile(r"^\s*(if|while|for)\s*\(", re.MULTILINE),
    re.compile(r";\s*$", re.MULTILINE),
    re.compile(r"^\s*<[A-Za-z]", re.MULTILINE),
]

ADVICE_PATTERNS = re.compile(
    r"\b(consider|recommend|suggest|should|could|might|try|avoid|ensure|make sure|be careful|note that|remember to|don't forget)\b",
    re.IGNORECASE,
)


def issue_icon(issue_type: str) -> str:
    return ISSUE_ICONS.get(issue_type, "🔍")


def severity_icon(severity: str) -> str:
    return SEVERITY_ICONS.get(severity, "ℹ️")


def category_icon(category: str) -> str:
    return CATEGORY_ICONS.get(category, "🔍")


def category_name(category: str) -> str:
    return CATEGORY_NAMES.get(category, "Other")


def language_from_filename(filename: str | None) -> str:
    """Code fence language for a file, by extension."""
    if not filename or "." not in filename:
        return "text"
    return LANGUAGES.get(filename.rsplit(".", 1)[-1].lower(), "text")


def is_code_suggestion(suggestion: str) -> bool:
    """Guess whether a suggestion is a code snippet rather than prose advice."""
    if not any(pattern.search(suggestion) for pattern in CODE_PATTERNS):
        return False
    # One-line advice such as "Note: consider ..." trips the assignment pattern
    if "\n" not in suggestion.strip() and ADVICE_PATTERNS.search(suggestion):
        return False
    return True


def group_issues_by_category(issues: list[CodeIssue]) -> dict[str, list[CodeIssue]]:
    grouped: dict[str, list[CodeIssue]] = {}
    for issue in issues:
        grouped.setdefault(issue.category, []).append(issue)
    return grouped


def _build_environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=False,
        undefined=StrictUndefined,
    )
    env.globals.update(
        issue_icon=issue_icon,
        severity_icon=severity_icon,
        category_icon=category_icon,
        category_name=category_name,
    )
    return env


class CommentRenderer:
    """Render inline and summary comment bodies from issues."""

    def __init__(self, enable_suggestions: bool = True, summary_format: str = "detailed") -> None:
        self.enable_suggestions = enable_suggestions
        self.summary_format = summary_format
        self.env = _build_environment()

    def _suggestion_parts(self, issue: CodeIssue) -> tuple[str | None, str | None]:
        """Split a suggestion into (code, text); at most one is set."""
        if not self.enable_suggestions:
            return None, None
        if issue.fixed_code:
            return issue.fixed_code.rstrip(), None
        if not issue.suggestion:
            return None, None
        if is_code_suggestion(issue.suggestion):
            return issue.suggestion.rstrip(), None
        return None, issue.suggestion.strip()

    def render_inline(self, location: ResolvedLocation, issues: list[CodeIssue]) -> str:
        """Render the body for all issues placed at one location.

        Args:
        ----
            location: Where the comment will be anchored
            issues: Issues at that location, primary first

        Returns:
        -------
            Markdown body without markers

        """
        if not issues:
            return "## 🤖 Code Review Finding\n\nNo issues detected."

        primary = issues[0]
        suggestion_code, suggestion_text = self._suggestion_parts(primary)

        template = self.env.get_template("inline_comment.md.j2")
        return template.render(
            location=location,
            primary=primary,
            secondary=issues[1:],
            suggestion_code=suggestion_code,
            suggestion_text=suggestion_text,
            language=language_from_filename(primary.file),
        ).strip() + "\n"

    def render_summary(self, result: ReviewResult, pull_request: PullRequestRef, inline_comments: int = 0) -> str:
        """Render the pull request summary body.

        Args:
        ----
            result: Review result for the whole pull request
            pull_request: Pull request the links should point into
            inline_comments: Number of inline comment locations this run

        Returns:
        -------
            Markdown body without markers

        """

        def file_url(issue: CodeIssue) -> str:
            if not issue.file:
                return pull_request.files_url
            return pull_request.file_url(issue.file, issue.line)

        template = self.env.get_template("summary_comment.md.j2")
        return template.render(
            result=result,
            status_icon=STATUS_ICONS.get(result.status, "🔍"),
            status_label=result.status.replace("_", " ").upper(),
            summary_format=self.summary_format,
            inline_comments=inline_comments,
            issues_by_category=group_issues_by_category(result.issues),
            max_detailed_issues=MAX_DETAILED_ISSUES,
            enable_suggestions=self.enable_suggestions,
            file_url=file_url,
        ).strip() + "\n"
