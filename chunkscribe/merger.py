"""Stitches consecutive chunk transcripts, dropping the words repeated by the audio overlap.

Chunks overlap in time, so the tail of one transcript is usually repeated at
the head of the next. The merge compares whitespace-collapsed text, because
the service rarely reproduces spacing and line breaks identically, and only
removes text when a long enough common run is found. When it cannot locate the
repeated region with confidence it keeps both texts in full: a few duplicated
words are easy to edit out later, silently lost words are not.
"""

import logging

from .utils import collapse_whitespace

logger = logging.getLogger(__name__)

MIN_MATCH_CHARS = 40
MAX_MATCH_CHARS = 500
SCAN_SLACK_CHARS = 20

def find_overlap(
    prev_collapsed: str,
    next_collapsed: str,
    min_match_chars: int = MIN_MATCH_CHARS,
    max_match_chars: int = MAX_MATCH_CHARS,
) -> str:
    """
    Returns the longest suffix of `prev_collapsed` that is also a prefix of `next_collapsed`.

    Only candidates between `min_match_chars` and `max_match_chars` long are
    considered, longest first. Returns an empty string when none matches.
    """
    longest = min(max_match_chars, len(prev_collapsed), len(next_collapsed))
    for size in range(longest, min_match_chars - 1, -1):
        suffix = prev_collapsed[-size:]
        if next_collapsed.startswith(suffix):
            return suffix
    return ""

def _cut_position(text: str, collapsed_prefix: str, scan_slack_chars: int) -> int:
    """
    Finds where `collapsed_prefix` ends inside the uncollapsed `text`.

    Returns the index just past the shortest prefix of `text` whose collapsed
    form equals `collapsed_prefix`, or -1 if the scan gives up.
    """
    limit = len(collapsed_prefix) + scan_slack_chars
    for i in range(len(text)):
        collapsed = collapse_whitespace(text[:i + 1])
        if collapsed == collapsed_prefix:
            return i + 1
        if len(collapsed) > limit:
            break
    return -1

def merge_with_overlap(
    prev_text: str,
    next_text: str,
    min_match_chars: int = MIN_MATCH_CHARS,
    max_match_chars: int = MAX_MATCH_CHARS,
    scan_slack_chars: int = SCAN_SLACK_CHARS,
) -> str:
    """
    Appends `next_text` to the merged transcript `prev_text`, removing the duplicated overlap.

    Args:
        prev_text: The transcript merged so far (may be empty).
        next_text: Raw transcript of the following chunk.
        min_match_chars: Shortest collapsed overlap accepted as a confident match.
        max_match_chars: Longest collapsed overlap searched for.
        scan_slack_chars: How far past the match length the scan over the
                          original `next_text` may run before giving up.

    Returns:
        The updated merged transcript. Without a confident match this is
        `prev_text + "\\n" + next_text`, so no content is ever dropped.
    """
    if not prev_text:
        return next_text
    if not next_text.strip():
        return prev_text

    overlap = find_overlap(
        collapse_whitespace(prev_text),
        collapse_whitespace(next_text),
        min_match_chars=min_match_chars,
        max_match_chars=max_match_chars,
    )
    if not overlap:
        logger.debug("No confident overlap found, concatenating chunk transcripts.")
        return prev_text + "\n" + next_text

    cut = _cut_position(next_text, overlap, scan_slack_chars)
    if cut < 0:
        logger.debug(
            f"Overlap of {len(overlap)} chars could not be mapped back onto the raw text, concatenating."
        )
        return prev_text + "\n" + next_text

    logger.debug(f"Removed {len(overlap)} collapsed chars of duplicated overlap.")
    return prev_text + "\n" + next_text[cut:].lstrip()
