"""Core cue segmentation: line breaking, DP segmentation and display timing.

WHY: Greedy left-to-right cue building gives locally acceptable but
globally poor captions (a tiny orphan cue after every long one). The
segmenter instead scores every admissible segmentation and keeps the
cheapest, so breaks land on sentence and clause boundaries where they
can.

HOW: Three stages:
  1. best_line_break() lays one cue's text out on 1..max_lines lines by
     scoring every word boundary.
  2. segment_words() runs a shortest-path DP over word positions;
     dp[j] is the cheapest way to caption words[0:j]. Paragraph starts
     are barriers no cue may cross.
  3. build_cues() turns the chosen segments into Cue objects, stretching
     short cues to the minimum display time without overlapping the next.

RULES:
- Every function takes the preset ``config`` explicitly; no global state
- Word text is never changed, only grouped and broken into lines
- A cue never spans a paragraph start
- A cue never exceeds max_cue_dur unless it is a single word
- A single word that fits no layout still becomes its own (overlong) cue,
  so no word is ever lost
"""

import math
import re
from typing import Any, Dict, List, Optional

from .models import Cue, Word
from .presets import WEAK_END_WORDS

# =============================================================================
# Text Utilities
# =============================================================================

SENT_PUNCT_RE = re.compile(r"[.!?…][\"')\]]*$")
COMMA_RE = re.compile(r"[,;:—][\"')\]]*$")
_EDGE_PUNCT_RE = re.compile(r"^[\"'(\[]+|[.,!?…:;)\]\"'—]+$")

# Cost of an overlong single-word cue; high enough that the DP only
# picks it when nothing else fits.
_OVERFLOW_PENALTY = 100.0


def strip_punct(word: str) -> str:
    """Remove leading/trailing punctuation from a word for comparison."""
    return _EDGE_PUNCT_RE.sub("", word)


def last_word_clean(line: str) -> str:
    """Return the last word of a line, lowercased, punctuation stripped."""
    for word in reversed(line.split()):
        word = strip_punct(word).lower()
        if word:
            return word
    return ""


def ends_sentence(line: str) -> bool:
    """True if the line ends with sentence punctuation (. ! ? …)."""
    return bool(SENT_PUNCT_RE.search(line.strip()))


def ends_comma(line: str) -> bool:
    """True if the line ends with clause punctuation (, ; : —)."""
    return bool(COMMA_RE.search(line.strip()))


# =============================================================================
# Line Breaking
# =============================================================================

def best_line_break(text: str, start: float, end: float, config: Dict) -> Dict[str, Any]:
    """Find the cheapest layout of one cue's text.

    Single-line and (when max_lines >= 2) two-line candidates are scored
    on length deviation, balance, weak endings, punctuation and reading
    speed.

    Returns:
        Dict with keys ``ok``, ``lines`` and ``score``. ``ok`` is False
        when no layout respects max_line_chars.
    """
    words = text.split()
    if not words:
        return {"ok": False, "lines": [], "score": math.inf}

    text = " ".join(words)
    candidates = []

    if len(text) <= config["max_line_chars"]:
        candidates.append({
            "lines": [text],
            "score": _score_single_line(text, start, end, config),
        })

    if config["max_lines"] >= 2:
        for k in range(1, len(words)):
            line1 = " ".join(words[:k])
            line2 = " ".join(words[k:])
            if len(line1) > config["max_line_chars"] or len(line2) > config["max_line_chars"]:
                continue
            candidates.append({
                "lines": [line1, line2],
                "score": _score_two_lines(line1, line2, start, end, config),
            })

    if not candidates:
        return {"ok": False, "lines": [text], "score": math.inf}

    best = min(candidates, key=lambda c: c["score"])
    return {"ok": True, "lines": best["lines"], "score": best["score"]}


def _cps_penalty(chars: int, start: float, end: float, config: Dict) -> float:
    w = config["weights"]
    cps = chars / max(0.001, end - start)
    score = 0.0
    if cps > config["target_cps"]:
        score += w["cps_above_target"] * (cps - config["target_cps"])
    if cps > config["max_cps"]:
        score += w["cps_above_max"] * (cps - config["max_cps"])
    return score


def _score_single_line(text: str, start: float, end: float, config: Dict) -> float:
    w = config["weights"]
    length = len(text)
    score = w["len_deviation"] * abs(length - config["target_line_chars"])
    if length > config["prefer_split_over"]:
        score += w["single_line_long"] * (length - config["prefer_split_over"])
    return score + _cps_penalty(length, start, end, config)


def _score_two_lines(line1: str, line2: str, start: float, end: float, config: Dict) -> float:
    w = config["weights"]
    len1, len2 = len(line1), len(line2)
    score = w["len_deviation"] * (
        abs(len1 - config["target_line_chars"]) + abs(len2 - config["target_line_chars"])
    )
    score += w["balance"] * abs(len1 - len2)

    shortest = min(len1, len2)
    if shortest < config["min_line_chars"]:
        score += w["orphan"] * (config["min_line_chars"] - shortest)

    end_word = last_word_clean(line1)
    if end_word in WEAK_END_WORDS:
        score += w["weak_end"]
    if end_word and len(end_word) <= 2:
        score += w["short_end"]

    if ends_sentence(line1):
        score += w["punct_bonus"]
    elif ends_comma(line1):
        score += w["comma_bonus"]

    return score + _cps_penalty(len1 + len2, start, end, config)


# =============================================================================
# Segmentation (Dynamic Programming)
# =============================================================================

def segment_words(words: List[Word], config: Dict) -> List[Dict[str, Any]]:
    """Group words into cue segments with a shortest-path DP.

    Args:
        words: Timed words in order, with paragraph/sentence flags set.
        config: Preset dict.

    Returns:
        List of segment dicts with keys text, lines, start, end, speaker.
    """
    n = len(words)
    if n == 0:
        return []

    # barrier[j]: the latest paragraph start at or before j-1; a segment
    # ending at j may not begin before it.
    barrier = [0] * (n + 1)
    latest = 0
    for j in range(1, n + 1):
        if words[j - 1].is_paragraph_start:
            latest = j - 1
        barrier[j] = latest

    dp = [math.inf] * (n + 1)
    back = [-1] * (n + 1)
    info = [None] * (n + 1)  # type: List[Optional[Dict[str, Any]]]
    dp[0] = 0.0

    for j in range(1, n + 1):
        min_i = max(barrier[j], j - config["max_lookback_words"])
        for i in range(j - 1, min_i - 1, -1):
            seg_words = words[i:j]
            single = j - i == 1
            seg_start = seg_words[0].start
            seg_end = seg_words[-1].end

            # Extending further back only makes the cue longer
            if not single and seg_end - seg_start > config["max_cue_dur"]:
                break
            seg_text = " ".join(w.text for w in seg_words)
            if not single and len(seg_text) > config["max_cue_chars"]:
                break

            lb = best_line_break(seg_text, seg_start, seg_end, config)
            if not lb["ok"]:
                if not single:
                    continue
                lb = {"lines": [seg_text], "score": _OVERFLOW_PENALTY}

            cost = _segment_cost(seg_text, seg_start, seg_end, lb["score"], config)
            cost += _boundary_cost(words, j, seg_text, seg_start, seg_end, config)

            total = dp[i] + cost
            if total < dp[j]:
                dp[j] = total
                back[j] = i
                info[j] = {
                    "text": seg_text,
                    "lines": lb["lines"],
                    "start": seg_start,
                    "end": seg_end,
                    "speaker": seg_words[0].speaker,
                }

    segments = []
    j = n
    while j > 0:
        segments.append(info[j])
        j = back[j]
    segments.reverse()
    return segments


def _segment_cost(text: str, start: float, end: float, layout_score: float, config: Dict) -> float:
    """Cost of one cue on its own: layout, length, duration, last word."""
    w = config["weights"]
    cost = layout_score
    cost += w["cue_len_deviation"] * abs(len(text) - config["target_cue_chars"])

    dur = max(0.001, end - start)
    if dur < config["min_cue_dur"]:
        cost += w["cue_dur_below"] * (config["min_cue_dur"] - dur)

    if ends_sentence(text):
        cost += w["boundary_punct_bonus"]
    elif ends_comma(text):
        cost += w["boundary_punct_bonus"] * 0.3
    elif last_word_clean(text) in WEAK_END_WORDS:
        cost += w["boundary_weak_end"]
    else:
        cost += w["boundary_no_punct"]
    return cost


def _boundary_cost(
    words: List[Word], j: int, text: str,
    start: float, end: float, config: Dict,
) -> float:
    """Cost of ending a cue before words[j] (nothing at the very end)."""
    if j >= len(words):
        return 0.0
    w = config["weights"]
    nxt = words[j]
    cost = 0.0
    if nxt.is_segment_start or nxt.is_paragraph_start:
        cost += w["sentence_start_bonus"]
    elif not ends_sentence(text) and not ends_comma(text):
        cost += w["mid_sentence_break"]
    if end - start < config["min_cue_dur"]:
        cost += 2.0
    if len(text) < config["target_cue_chars"] * 0.6:
        cost += w["short_cue"]
    return cost


# =============================================================================
# Display timing
# =============================================================================

def build_cues(segments: List[Dict[str, Any]], config: Dict) -> List[Cue]:
    """Turn segments into numbered cues with readable display times.

    RULES:
    - A cue shown shorter than min_display_dur is stretched, but never
      past the next cue's start minus min_gap
    - End is never before start; start never before the previous end
    - Indices are 1-based
    """
    cues: List[Cue] = []
    previous_end = 0.0
    for position, seg in enumerate(segments):
        start = max(seg["start"], previous_end)
        end = max(seg["end"], start)
        if end - start < config["min_display_dur"]:
            end = start + config["min_display_dur"]
        if position + 1 < len(segments):
            limit = segments[position + 1]["start"] - config["min_gap"]
            end = max(min(end, limit), max(seg["end"], start))
        cues.append(Cue(
            index=position + 1,
            start=start,
            end=end,
            lines=list(seg["lines"]),
            speaker=seg["speaker"],
        ))
        previous_end = end
    return cues
