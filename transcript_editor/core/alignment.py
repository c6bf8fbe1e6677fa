"""Re-alignment of edited text against the original timed words.

WHY: Once a human retypes part of a paragraph (or pastes a whole new
transcript), the displayed tokens no longer correspond one-to-one with
the STT words that carry timestamps. Every export that needs timing
would otherwise be wrong. Re-alignment maps each edited token back onto
the reference words so timing survives the edit: unchanged words keep
their timestamps, changed words borrow them, new words are interpolated.

HOW: Word-level edit distance with unit costs for substitution,
insertion and deletion:
  1. Tokenize the edited text on whitespace.
  2. Match the common prefix and suffix directly (exact for unit costs).
  3. Fill a DP table over the remaining middle (|ref| x |hyp| cells). Each
     cell holds (cost, diagonal steps); ties on cost go to the path with
     more diagonal steps, and backtracking prefers the diagonal, which
     keeps edited tokens on the timing of the word in the same position.
  4. Walk the backtrace and classify every token as matched, substituted,
     inserted or deleted.
  5. Interpolate inserted runs evenly between the neighbouring aligned
     words.

RULES:
- Comparison is case-insensitive and ignores leading/trailing punctuation;
  the output text is always the edited token ("new text wins")
- Matched and substituted tokens reuse the reference word's id and timing
- Inserted tokens get fresh ids and timing inside
  [previous aligned end, next aligned start]
- Deleted reference words are dropped
- Never raises; empty text yields an empty word list
- A large token-count mismatch adds an AlignmentBestEffort warning
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from typing import List, Optional, Sequence, Tuple

from transcript_editor.config import ALIGNMENT_MISMATCH_RATIO
from transcript_editor.core.ir import Document, Paragraph, Word, next_word_id
from transcript_editor.core.results import AlignmentBestEffort

logger = logging.getLogger(__name__)

_EDGE_PUNCT_RE = re.compile(r"^[^\w]+|[^\w]+$", re.UNICODE)

# Backpointer moves
_DIAG = 0
_UP = 1  # consume a reference word only (deletion)
_LEFT = 2  # consume a hypothesis token only (insertion)

MATCHED = "matched"
SUBSTITUTED = "substituted"
INSERTED = "inserted"


@dataclass(frozen=True)
class AlignedToken:
    """One output token and how it was aligned."""

    word: Word
    kind: str  # matched / substituted / inserted


@dataclass(frozen=True)
class AlignmentResult:
    """Outcome of aligning edited text to reference words.

    Attributes:
        tokens: Aligned output tokens in edited-text order.
        deleted: Reference words with no counterpart in the edited text.
        warning: AlignmentBestEffort when the token counts differ a lot.
    """

    tokens: Tuple[AlignedToken, ...]
    deleted: Tuple[Word, ...] = ()
    warning: Optional[AlignmentBestEffort] = None

    @property
    def words(self) -> Tuple[Word, ...]:
        return tuple(t.word for t in self.tokens)

    def count(self, kind: str) -> int:
        return sum(1 for t in self.tokens if t.kind == kind)


def normalize_token(token: str) -> str:
    """Case-fold and strip surrounding punctuation for comparison.

    Tokens made only of punctuation (e.g. "-", "♪") compare on their
    case-folded form so they can still match themselves.
    """
    stripped = _EDGE_PUNCT_RE.sub("", token)
    return (stripped or token).casefold()


def align_words(
    original_words: Sequence[Word],
    edited_text: str,
    id_start: Optional[int] = None,
) -> AlignmentResult:
    """Align edited text against the reference word sequence.

    Args:
        original_words: Reference words, in order, with authoritative timing.
        edited_text: The text as the user left it.
        id_start: First id for inserted words. Defaults to one past the
            largest int id in ``original_words``.

    Returns:
        AlignmentResult with one aligned token per edited token.
    """
    reference = list(original_words)
    hypothesis = edited_text.split()
    if id_start is None:
        id_start = next_word_id(reference)

    warning = _mismatch_warning(len(reference), len(hypothesis))
    if warning is not None:
        logger.warning(warning.message)

    if not hypothesis:
        return AlignmentResult(tokens=(), deleted=tuple(reference), warning=warning)

    ops = _alignment_ops(
        [normalize_token(w.text) for w in reference],
        [normalize_token(t) for t in hypothesis],
    )

    # Walk the ops: (ref_index or None, hyp_index or None)
    pending: List[Tuple[Optional[Word], str, str]] = []
    deleted: List[Word] = []
    for ref_i, hyp_i in ops:
        if hyp_i is None:
            deleted.append(reference[ref_i])
            continue
        token = hypothesis[hyp_i]
        if ref_i is None:
            pending.append((None, token, INSERTED))
            continue
        ref_word = reference[ref_i]
        if normalize_token(ref_word.text) == normalize_token(token):
            pending.append((ref_word, token, MATCHED))
        else:
            pending.append((ref_word, token, SUBSTITUTED))

    tokens = _assign_timings(pending, id_start)
    return AlignmentResult(tokens=tuple(tokens), deleted=tuple(deleted), warning=warning)


def _mismatch_warning(ref_count: int, hyp_count: int) -> Optional[AlignmentBestEffort]:
    larger = max(ref_count, hyp_count)
    if larger == 0 or ref_count == 0:
        return None
    if abs(ref_count - hyp_count) / float(larger) <= ALIGNMENT_MISMATCH_RATIO:
        return None
    return AlignmentBestEffort(
        message="Best-effort alignment: {} reference words vs {} edited tokens".format(
            ref_count, hyp_count
        ),
        reference_count=ref_count,
        hypothesis_count=hyp_count,
    )


def _alignment_ops(ref: List[str], hyp: List[str]) -> List[Tuple[Optional[int], Optional[int]]]:
    """Return the alignment as (ref_index, hyp_index) pairs in order.

    A pair with a None hyp_index is a deletion, a None ref_index an
    insertion, and a full pair a diagonal step (match or substitution).
    """
    n, m = len(ref), len(hyp)

    prefix = 0
    while prefix < n and prefix < m and ref[prefix] == hyp[prefix]:
        prefix += 1
    suffix = 0
    while (suffix < n - prefix and suffix < m - prefix
           and ref[n - 1 - suffix] == hyp[m - 1 - suffix]):
        suffix += 1

    ops: List[Tuple[Optional[int], Optional[int]]] = [(i, i) for i in range(prefix)]
    middle = _dp_ops(ref[prefix:n - suffix], hyp[prefix:m - suffix])
    for ref_i, hyp_i in middle:
        ops.append((
            None if ref_i is None else ref_i + prefix,
            None if hyp_i is None else hyp_i + prefix,
        ))
    ops.extend((n - suffix + k, m - suffix + k) for k in range(suffix))
    return ops


def _dp_ops(ref: List[str], hyp: List[str]) -> List[Tuple[Optional[int], Optional[int]]]:
    """Unit-cost edit distance with diagonal-preferring tie-break."""
    n, m = len(ref), len(hyp)
    if n == 0:
        return [(None, j) for j in range(m)]
    if m == 0:
        return [(i, None) for i in range(n)]

    # Rolling cost rows; full backpointer table, one bytearray per row.
    prev_cost = list(range(m + 1))
    prev_diag = [0] * (m + 1)
    back = [bytearray([_LEFT]) * (m + 1)]
    for i in range(1, n + 1):
        cur_cost = [i] + [0] * m
        cur_diag = [0] * (m + 1)
        row = bytearray(m + 1)
        row[0] = _UP
        ref_tok = ref[i - 1]
        for j in range(1, m + 1):
            sub = 0 if ref_tok == hyp[j - 1] else 1
            best_cost = prev_cost[j - 1] + sub
            best_diag = prev_diag[j - 1] + 1
            move = _DIAG

            cost = prev_cost[j] + 1
            if cost < best_cost or (cost == best_cost and prev_diag[j] > best_diag):
                best_cost, best_diag, move = cost, prev_diag[j], _UP

            cost = cur_cost[j - 1] + 1
            if cost < best_cost or (cost == best_cost and cur_diag[j - 1] > best_diag):
                best_cost, best_diag, move = cost, cur_diag[j - 1], _LEFT

            cur_cost[j] = best_cost
            cur_diag[j] = best_diag
            row[j] = move
        back.append(row)
        prev_cost, prev_diag = cur_cost, cur_diag

    ops: List[Tuple[Optional[int], Optional[int]]] = []
    i, j = n, m
    while i > 0 or j > 0:
        move = back[i][j]
        if move == _DIAG:
            ops.append((i - 1, j - 1))
            i -= 1
            j -= 1
        elif move == _UP:
            ops.append((i - 1, None))
            i -= 1
        else:
            ops.append((None, j - 1))
            j -= 1
    ops.reverse()
    return ops


def _assign_timings(
    pending: List[Tuple[Optional[Word], str, str]],
    id_start: int,
) -> List[AlignedToken]:
    """Give every token a Word; interpolate runs of inserted tokens."""
    result: List[Optional[AlignedToken]] = [None] * len(pending)
    next_id = id_start

    i = 0
    while i < len(pending):
        ref_word, token, kind = pending[i]
        if ref_word is not None:
            result[i] = AlignedToken(word=replace(ref_word, text=token), kind=kind)
            i += 1
            continue

        # Run of insertions [i, k)
        k = i
        while k < len(pending) and pending[k][0] is None:
            k += 1
        prev_word = result[i - 1].word if i > 0 else None
        next_word = pending[k][0] if k < len(pending) else None
        lower, upper = _gap_bounds(prev_word, next_word)
        slot = (upper - lower) / (k - i)
        for offset, idx in enumerate(range(i, k)):
            start = lower + offset * slot
            end = lower + (offset + 1) * slot
            word = Word(id=next_id, start=start, end=end, text=pending[idx][1])
            next_id += 1
            result[idx] = AlignedToken(word=word, kind=INSERTED)
        i = k

    return [t for t in result if t is not None]


def _gap_bounds(prev_word: Optional[Word], next_word: Optional[Word]) -> Tuple[float, float]:
    """Interval available to a run of inserted tokens."""
    if prev_word is not None and next_word is not None:
        lower, upper = prev_word.end, next_word.start
    elif prev_word is not None:
        lower = upper = prev_word.end
    elif next_word is not None:
        lower = upper = next_word.start
    else:
        lower = upper = 0.0
    return lower, max(lower, upper)


# ---------------------------------------------------------------------------
# Call sites
# ---------------------------------------------------------------------------


def realign_paragraph(paragraph: Paragraph, id_start: Optional[int] = None) -> Tuple[Paragraph, AlignmentResult]:
    """Commit an edit: realign one paragraph against its own pre-edit words.

    The realigned paragraph is clean: its text is the aligned tokens
    joined by single spaces and its start is the first aligned word's
    start (the old start when the text was emptied).
    """
    result = align_words(paragraph.words, paragraph.text, id_start=id_start)
    words = result.words
    start = words[0].start if words else paragraph.start
    return Paragraph.from_words(paragraph.speaker, words, start=start), result


def realign_document(document: Document) -> Tuple[Document, List[AlignmentResult]]:
    """Realign every dirty paragraph; clean paragraphs are kept as-is.

    Inserted-word ids are allocated document-wide so they stay unique.
    """
    next_id = document.next_word_id()
    paragraphs: List[Paragraph] = []
    results: List[AlignmentResult] = []
    for paragraph in document.paragraphs:
        if paragraph.is_clean:
            paragraphs.append(paragraph)
            continue
        realigned, result = realign_paragraph(paragraph, id_start=next_id)
        next_id = max(next_id, next_word_id(realigned.words))
        paragraphs.append(realigned)
        results.append(result)
    if results:
        logger.info("Realigned %d of %d paragraphs", len(results), len(paragraphs))
    return Document(paragraphs=tuple(paragraphs)), results


def replace_document_text(
    original_words: Sequence[Word],
    new_text: str,
    previous: Document,
) -> Tuple[Document, AlignmentResult]:
    """Replace the whole text and restore timings from the original STT words.

    WHY: Users who already own an accurate transcript paste it in to
    recover word timings from the STT output.

    HOW: Aligns ``new_text`` against the original full word sequence, then
    re-chunks the aligned words using each previous paragraph's token
    count, in order. Speakers are carried over positionally.

    RULES:
    - Paragraph k receives len(previous[k].text.split()) aligned words
    - Surplus aligned words are appended to the last paragraph
    - Paragraphs that end up with no words are dropped
    - Line breaks in new_text are treated as plain whitespace
    """
    result = align_words(original_words, new_text)
    aligned = list(result.words)

    paragraphs: List[Paragraph] = []
    cursor = 0
    previous_paragraphs = previous.paragraphs or (Paragraph(speaker="", start=0.0),)
    for index, old in enumerate(previous_paragraphs):
        count = len(old.text.split())
        if index == len(previous_paragraphs) - 1:
            chunk = aligned[cursor:]
        else:
            chunk = aligned[cursor:cursor + count]
        cursor += len(chunk)
        if not chunk:
            continue
        paragraphs.append(Paragraph.from_words(old.speaker, chunk))

    return Document(paragraphs=tuple(paragraphs)), result
