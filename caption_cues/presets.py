"""Segmentation presets and linguistic constants for caption cues.

WHY: Different delivery targets need different cue constraints: a
landscape player shows two lines of about forty characters, a vertical
social clip one short line. Keeping presets as plain dicts lets callers
pick one by name or pass their own copy with tweaks.

HOW: Each preset holds hard limits (max_lines, max_line_chars,
max_cue_chars, max_cue_dur), soft targets (target_line_chars, target_cps,
target_cue_chars) and a nested ``weights`` dict for the DP scoring.

RULES:
- Presets are constants; the library deep-copies before use
- max_cue_dur is a hard limit except for a single word that is longer
- "broadcast" is an alias for "standard"
"""

from typing import Dict, Set

# Landscape video: two lines, broadcast-style limits
PRESET_STANDARD: Dict = {
    "max_lines": 2,
    "max_line_chars": 42,
    "max_cue_chars": 84,
    "target_line_chars": 32,
    "prefer_split_over": 37,
    "min_line_chars": 12,
    "target_cps": 15.0,
    "max_cps": 20.0,
    "target_cue_chars": 50,
    "min_cue_dur": 1.2,
    "max_cue_dur": 7.0,
    "min_display_dur": 1.0,
    "min_gap": 0.04,
    "max_lookback_words": 20,
    "weights": {
        "len_deviation": 0.20,
        "balance": 0.12,
        "orphan": 2.5,
        "weak_end": 6.0,
        "short_end": 1.0,
        "punct_bonus": -2.5,
        "comma_bonus": -1.2,
        "single_line_long": 1.0,
        "cps_above_target": 0.8,
        "cps_above_max": 3.0,
        "cue_len_deviation": 0.08,
        "cue_dur_below": 2.5,
        "boundary_weak_end": 4.0,
        "boundary_punct_bonus": -3.5,
        "boundary_no_punct": 2.0,
        "sentence_start_bonus": -2.0,
        "mid_sentence_break": 1.0,
        "short_cue": 1.5,
    }
}

# Vertical social video: one short line
PRESET_SOCIAL: Dict = {
    "max_lines": 1,
    "max_line_chars": 25,
    "max_cue_chars": 25,
    "target_line_chars": 18,
    "prefer_split_over": 20,
    "min_line_chars": 6,
    "target_cps": 12.0,
    "max_cps": 15.0,
    "target_cue_chars": 16,
    "min_cue_dur": 0.8,
    "max_cue_dur": 3.5,
    "min_display_dur": 0.6,
    "min_gap": 0.04,
    "max_lookback_words": 8,
    "weights": {
        "len_deviation": 0.15,
        "balance": 0.0,
        "orphan": 2.0,
        "weak_end": 4.0,
        "short_end": 0.6,
        "punct_bonus": -3.5,
        "comma_bonus": -2.0,
        "single_line_long": 3.0,
        "cps_above_target": 1.0,
        "cps_above_max": 4.0,
        "cue_len_deviation": 0.10,
        "cue_dur_below": 1.5,
        "boundary_weak_end": 4.0,
        "boundary_punct_bonus": -4.0,
        "boundary_no_punct": 1.5,
        "sentence_start_bonus": -2.0,
        "mid_sentence_break": 0.8,
        "short_cue": 0.5,
    }
}

PRESETS: Dict[str, Dict] = {
    "standard": PRESET_STANDARD,
    "broadcast": PRESET_STANDARD,  # Alias
    "social": PRESET_SOCIAL,
}

# English function words that read badly at the end of a line or cue.
WEAK_END_WORDS: Set[str] = {
    "a", "an", "the", "and", "or", "but", "nor", "so", "yet", "if",
    "of", "to", "in", "on", "at", "by", "for", "with", "from", "into",
    "onto", "about", "over", "under", "between", "through", "than",
    "that", "which", "who", "whom", "whose", "when", "while", "where",
    "because", "although", "as", "i", "we", "you", "he", "she", "they",
    "it", "my", "our", "your", "his", "her", "their", "its", "this",
    "these", "those", "is", "are", "was", "were", "be", "been", "am",
    "will", "would", "can", "could", "should", "shall", "may", "might",
    "must", "do", "does", "did", "have", "has", "had", "not",
}
