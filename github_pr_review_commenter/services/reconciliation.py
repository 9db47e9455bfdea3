"""Reconciliation of desired inline comments against previously posted ones.

A desired comment and an existing one match when they sit on the same file and
line. Matches are updated in place (or skipped when the body is unchanged),
everything else is created. Existing comments without a desired counterpart are
left alone; this service never deletes feedback.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

from ..markers import COMMENT_MARKERS, CommentMarkers, has_bot_marker, normalize_body
from ..models import CommentRecord, CommentSide
from ..utils import LoggerMixin


class CommentStore(Protocol):
    """Remote store of inline review comments. The only place network I/O happens."""

    def list_existing_marked_comments(self) -> list[CommentRecord]: ...

    def create_comment(self, file: str, line: int, side: CommentSide, body: str) -> int: ...

    def update_comment(self, comment_id: int, body: str) -> None: ...


class ActionKind(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    UNCHANGED = "unchanged"


@dataclass(frozen=True)
class ReconciliationAction:
    """What to do for one desired comment."""

    kind: ActionKind
    desired: CommentRecord
    existing: CommentRecord | None = None

    @property
    def target_id(self) -> int | None:
        return self.existing.id if self.existing else None


@dataclass
class ReconciliationPlan:
    actions: list[ReconciliationAction] = field(default_factory=list)
    # Marked comments no desired comment maps to; reported, never touched
    stale: list[CommentRecord] = field(default_factory=list)

    def count(self, kind: ActionKind) -> int:
        return sum(1 for action in self.actions if action.kind == kind)

    @property
    def write_count(self) -> int:
        return sum(1 for action in self.actions if action.kind != ActionKind.UNCHANGED)


@dataclass
class ReconciliationReport:
    created: list[CommentRecord] = field(default_factory=list)
    updated: list[CommentRecord] = field(default_factory=list)
    unchanged: list[CommentRecord] = field(default_factory=list)
    failed: list[dict[str, Any]] = field(default_factory=list)
    stale: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "created": len(self.created),
            "updated": len(self.updated),
            "unchanged": len(self.unchanged),
            "failed": list(self.failed),
            "stale": self.stale,
        }


def filter_marked_comments(comments: list[CommentRecord], markers: CommentMarkers = COMMENT_MARKERS) -> list[CommentRecord]:
    """Keep only comments this service wrote; human and third-party comments are invisible."""
    return [comment for comment in comments if has_bot_marker(comment.body, markers)]


def plan_reconciliation(
    desired: list[CommentRecord],
    existing: list[CommentRecord],
    markers: CommentMarkers = COMMENT_MARKERS,
) -> ReconciliationPlan:
    """Decide create/update/unchanged for every desired comment.

    Args:
    ----
        desired: Comments computed by this run, without ids
        existing: Comments fetched from the store
        markers: Marker literals used to recognise this service's comments

    Returns:
    -------
        ReconciliationPlan with one action per desired comment, in order

    """
    existing_by_location: dict[tuple[str, int], CommentRecord] = {}
    for comment in filter_marked_comments(existing, markers):
        # First existing comment at a location wins
        existing_by_location.setdefault(comment.location_key, comment)

    plan = ReconciliationPlan()
    matched: set[tuple[str, int]] = set()

    for record in desired:
        match = existing_by_location.get(record.location_key)
        if match is None:
            plan.actions.append(ReconciliationAction(ActionKind.CREATE, record))
            continue

        matched.add(record.location_key)
        if normalize_body(match.body) == normalize_body(record.body):
            plan.actions.append(ReconciliationAction(ActionKind.UNCHANGED, record, match))
        else:
            plan.actions.append(ReconciliationAction(ActionKind.UPDATE, record, match))

    plan.stale = [comment for key, comment in existing_by_location.items() if key not in matched]
    return plan


class ReconciliationEngine(LoggerMixin):
    """Converge a store's marked inline comments towards the desired set."""

    def __init__(self, store: CommentStore, markers: CommentMarkers = COMMENT_MARKERS) -> None:
        self.store = store
        self.markers = markers

    def apply(self, plan: ReconciliationPlan) -> ReconciliationReport:
        """Issue the plan's writes one at a time.

        A failing location is logged and recorded; the remaining locations are
        still processed. Nothing is rolled back.
        """
        report = ReconciliationReport(stale=len(plan.stale))

        for action in plan.actions:
            record = action.desired

            if action.kind == ActionKind.UNCHANGED:
                self.logger.debug("Comment %s at %s:%d is up to date", action.target_id, record.file, record.line)
                report.unchanged.append(action.existing)
                continue

            try:
                if action.kind == ActionKind.UPDATE:
                    self.store.update_comment(action.target_id, record.body)
                    self.logger.info("Updated inline comment %s at %s:%d", action.target_id, record.file, record.line)
                    report.updated.append(record.model_copy(update={"id": action.target_id}))
                else:
                    comment_id = self.store.create_comment(record.file, record.line, record.side, record.body)
                    self.logger.info("Created inline comment %s at %s:%d", comment_id, record.file, record.line)
                    report.created.append(record.model_copy(update={"id": comment_id}))
            except Exception as e:
                self.logger.exception("Failed to %s inline comment at %s:%d", action.kind.value, record.file, record.line)
                report.failed.append({
                    "file": record.file,
                    "line": record.line,
                    "action": action.kind.value,
                    "error": str(e),
                })

        if plan.stale:
            self.logger.info("Leaving %d earlier comments without a current finding untouched", len(plan.stale))

        return report

    def reconcile(self, desired: list[CommentRecord], existing: list[CommentRecord] | None = None) -> ReconciliationReport:
        """Plan against ``existing`` (fetched from the store when omitted) and apply."""
        if not desired:
            self.logger.info("No inline comments to publish")
            return ReconciliationReport()

        if existing is None:
            existing = self.store.list_existing_marked_comments()

        plan = plan_reconciliation(desired, existing, self.markers)
        self.logger.info(
            "Reconciliation plan: %d create, %d update, %d unchanged",
            plan.count(ActionKind.CREATE),
            plan.count(ActionKind.UPDATE),
            plan.count(ActionKind.UNCHANGED),
        )
        return self.apply(plan)
