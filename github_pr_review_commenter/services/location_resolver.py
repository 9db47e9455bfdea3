"""Mapping requested issue lines onto commentable diff lines."""

from ..models import MatchKind, ResolvedLocation
from ..utils import get_logger
from .diff_indexer import AddressableLineSet

logger = get_logger(__name__)

# Never anchor a comment further than this from the line it was meant for
MAX_LINE_DISTANCE = 5

# Requests at or below this line are treated as being about the whole file
FILE_LEVEL_MAX_LINE = 5


def find_nearest_line(requested_line: int, addressable: AddressableLineSet, max_distance: int = MAX_LINE_DISTANCE) -> int | None:
    """Return the addressable line closest to ``requested_line`` within ``max_distance``.

    Ties keep the candidate seen first in patch order.
    """
    closest_line = None
    min_distance = None

    for candidate in addressable:
        distance = abs(candidate - requested_line)
        if distance > max_distance:
            continue
        if min_distance is None or distance < min_distance:
            min_distance = distance
            closest_line = candidate

    return closest_line


def resolve_location(
    file: str,
    requested_line: int,
    addressable: AddressableLineSet,
    max_distance: int = MAX_LINE_DISTANCE,
    file_level_max_line: int = FILE_LEVEL_MAX_LINE,
) -> ResolvedLocation | None:
    """Resolve a requested (file, line) to a line GitHub will accept.

    Args:
    ----
        file: Path of the file in the pull request
        requested_line: Line number claimed by the issue producer
        addressable: Addressable lines of the file's patch
        max_distance: Largest allowed distance for a nearby match
        file_level_max_line: Highest requested line that may fall back to the first addressable line

    Returns:
    -------
        The resolved location, or None when no placement is acceptable

    """
    if not addressable:
        logger.warning("No addressable lines in diff for %s", file)
        return None

    if requested_line in addressable:
        return ResolvedLocation(
            file=file,
            line=requested_line,
            requested_line=requested_line,
            match_kind=MatchKind.EXACT,
        )

    nearest = find_nearest_line(requested_line, addressable, max_distance)
    if nearest is not None:
        logger.info(
            "Adjusted comment location for %s from line %d to %d (distance: %d)",
            file,
            requested_line,
            nearest,
            abs(nearest - requested_line),
        )
        return ResolvedLocation(
            file=file,
            line=nearest,
            requested_line=requested_line,
            match_kind=MatchKind.NEARBY,
        )

    if requested_line <= file_level_max_line:
        first_line = addressable.first
        logger.info("Using first addressable line %d for file-level issue in %s at line %d", first_line, file, requested_line)
        return ResolvedLocation(
            file=file,
            line=first_line,
            requested_line=requested_line,
            match_kind=MatchKind.FILE_LEVEL_FALLBACK,
        )

    logger.warning("No suitable comment location found for %s:%d", file, requested_line)
    return None
