"""Unicode and Persian-aware text canonicalization for free-text answers.

Gap-fill answers are typed on many different keyboards. The same word can
arrive with Arabic instead of Persian letters, with Arabic-indic digits,
with or without half-spaces, or with diacritics. Everything here folds those
differences away so the evaluator can compare answers by meaning.
"""

import re
import unicodedata

ZWNJ = "\u200C"
ZWJ = "\u200D"

# Zero-width, bidi control and tatweel characters.
_INVISIBLE_CHARS = frozenset(
    "\u200B\u200C\u200D\u200E\u200F"
    "\u202A\u202B\u202C\u202D\u202E"
    "\u2060\u2066\u2067\u2068\u2069"
    "\uFEFF\u061C\u0640"
)

_LETTER_FOLDS = {
    "\u064A": "\u06CC",  # ARABIC YEH -> FARSI YEH
    "\u0649": "\u06CC",  # ALEF MAKSURA -> FARSI YEH
    "\u06D2": "\u06CC",  # YEH BARREE -> FARSI YEH
    "\u0643": "\u06A9",  # ARABIC KAF -> KEHEH
    "\u0629": "\u0647",  # TEH MARBUTA -> HEH
    "\u06C0": "\u0647",  # HEH WITH YEH ABOVE -> HEH
    "\u06D5": "\u0647",  # AE -> HEH
    "\u0623": "\u0627",  # ALEF WITH HAMZA ABOVE -> ALEF
    "\u0625": "\u0627",  # ALEF WITH HAMZA BELOW -> ALEF
    "\u0671": "\u0627",  # ALEF WASLA -> ALEF
    "\u0672": "\u0627",
    "\u0673": "\u0627",
    "\u0624": "\u0648",  # WAW WITH HAMZA ABOVE -> WAW
}

_DIGIT_FOLDS = {
    **{chr(0x0660 + d): str(d) for d in range(10)},  # Arabic-indic
    **{chr(0x06F0 + d): str(d) for d in range(10)},  # extended Arabic-indic
}

_FOLD_TABLE = str.maketrans({**_LETTER_FOLDS, **_DIGIT_FOLDS})

_WHITESPACE_RE = re.compile(r"\s+")

_PERSIAN_RANGES = (
    (0x0600, 0x06FF),
    (0x0750, 0x077F),
    (0x08A0, 0x08FF),
    (0xFB50, 0xFDFF),
    (0xFE70, 0xFEFF),
)


def normalize_text(value: str | None) -> str:
    """Canonicalize a string for comparison.

    Steps: NFD decomposition, removal of invisible control characters,
    removal of combining marks, Arabic-to-Persian letter folding, digit
    folding to ASCII, whitespace collapsing and NFC recomposition.

    The result is a fixed point: normalizing it again returns it unchanged.
    """
    if not value:
        return ""

    decomposed = unicodedata.normalize("NFD", value)
    kept = [
        ch
        for ch in decomposed
        if ch not in _INVISIBLE_CHARS and not unicodedata.combining(ch)
    ]
    folded = "".join(kept).translate(_FOLD_TABLE)
    collapsed = _WHITESPACE_RE.sub(" ", folded).strip()
    return unicodedata.normalize("NFC", collapsed)


def collapse_whitespace(value: str) -> str:
    """Collapse every run of whitespace to a single space and trim."""
    return _WHITESPACE_RE.sub(" ", value).strip()


def strip_whitespace(value: str) -> str:
    """Remove all whitespace, including half-spaces."""
    return "".join(ch for ch in value if not ch.isspace() and ch not in (ZWNJ, ZWJ))


def is_persian_char(ch: str) -> bool:
    code = ord(ch)
    return any(low <= code <= high for low, high in _PERSIAN_RANGES)


def has_persian_text(value: str | None) -> bool:
    """Whether the raw string contains a half-space or Persian/Arabic letters."""
    if not value:
        return False
    return any(ch in (ZWNJ, ZWJ) or is_persian_char(ch) for ch in value)


def texts_match(
    correct: str | None,
    submitted: str | None,
    answer_type: str = "exact",
    case_sensitive: bool = False,
) -> bool:
    """Compare a submitted answer with a correct answer.

    Args:
        correct: The expected answer as authored.
        submitted: The student's answer.
        answer_type: ``exact``, ``keyword`` (the correct answer must occur
            inside the submission) or ``similar`` (internal whitespace runs
            are collapsed before comparing).
        case_sensitive: Compare letter case as well.

    Returns:
        True if the submission is accepted.
    """
    expected = normalize_text(correct)
    actual = normalize_text(submitted)
    if not case_sensitive:
        expected = expected.casefold()
        actual = actual.casefold()

    if expected == actual:
        return True
    if not expected or not actual:
        return False

    # Persian compound words are legitimately written with a half-space, a
    # full space, or joined, so spacing is ignored for them.
    if has_persian_text(correct) or has_persian_text(submitted):
        if strip_whitespace(expected) == strip_whitespace(actual):
            return True

    mode = (answer_type or "exact").strip().lower()
    if mode == "keyword":
        return expected in actual
    if mode == "similar":
        return collapse_whitespace(expected) == collapse_whitespace(actual)
    return False
