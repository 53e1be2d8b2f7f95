"""Line matchers for survey reply bodies.

Each matcher inspects one trimmed, non-empty line and returns:

- a ParsedAnswer when the line is a structured answer,
- a RejectedLine when the line is shaped like an answer but its value is
  invalid (the line is consumed and dropped),
- None when the line is not for this matcher.

ANSWER_MATCHERS is evaluated in order and the first non-None result wins.
New answer shapes are added by appending a matcher, not by editing the
existing ones.
"""

import re
from dataclasses import dataclass
from typing import Callable, Union

from .models import ParsedAnswer

RATING_MIN = 1
RATING_MAX = 10

NA_MARKERS = frozenset({"N/A", "NA"})
AFFIRMATIVE = frozenset({"ja", "yes"})

GENERAL_COMMENT_CODE = "GENERAL_COMMENT"

SEPARATOR = r"\s*[:=]\s*"

RATING_PATTERN = re.compile(
    r"^(Q\d+[a-z]?)" + SEPARATOR + r"(\d+|N/?A)\b",
    re.IGNORECASE,
)
COMMENT_PATTERN = re.compile(
    r"^(Q\d+[a-z]?_(?:comment|kommentar)|Kommentar|Comment)" + SEPARATOR + r"(.+)$",
    re.IGNORECASE,
)
YES_NO_PATTERN = re.compile(
    r"^(Q\w*_\w+)" + SEPARATOR + r"(ja|nej|yes|no)\b",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class RejectedLine:
    """A structured-looking line whose value failed validation."""
    question_code: str
    reason: str


LineMatch = Union[ParsedAnswer, RejectedLine, None]
Matcher = Callable[[str], LineMatch]


def normalize_code(code: str) -> str:
    return code.strip().upper()


def match_rating(line: str) -> LineMatch:
    """Match 'Q3a: 8', 'Q4a = 9', 'Q5:N/A'.

    Ratings outside RATING_MIN..RATING_MAX are rejected, not passed on to
    the other matchers.
    """
    match = RATING_PATTERN.match(line)
    if not match:
        return None

    code = normalize_code(match.group(1))
    token = match.group(2).upper()

    if token in NA_MARKERS:
        return ParsedAnswer(question_code=code, value=None, is_na=True)

    value = int(token)
    if not RATING_MIN <= value <= RATING_MAX:
        return RejectedLine(
            question_code=code,
            reason=f"rating {value} outside {RATING_MIN}-{RATING_MAX}",
        )
    return ParsedAnswer(question_code=code, value=value, is_na=False)


def match_labeled_comment(line: str) -> LineMatch:
    """Match 'Q19_comment: ...' and bare 'Kommentar: ...' / 'Comment: ...'.

    Bare labels are filed under GENERAL_COMMENT.
    """
    match = COMMENT_PATTERN.match(line)
    if not match:
        return None

    label = match.group(1)
    text = match.group(2).strip()
    if not text:
        return None

    code = normalize_code(label) if "_" in label else GENERAL_COMMENT_CODE
    return ParsedAnswer(question_code=code, value=text, is_na=False)


def match_yes_no(line: str) -> LineMatch:
    """Match 'Q_recommend: ja', 'Q7_contract = No'.

    Yes/no codes always contain an underscore, which keeps them apart from
    rating codes.
    """
    match = YES_NO_PATTERN.match(line)
    if not match:
        return None

    code = normalize_code(match.group(1))
    value = 1 if match.group(2).lower() in AFFIRMATIVE else 0
    return ParsedAnswer(question_code=code, value=value, is_na=False)


ANSWER_MATCHERS: tuple[Matcher, ...] = (
    match_rating,
    match_labeled_comment,
    match_yes_no,
)


def classify_line(line: str, matchers: tuple[Matcher, ...] = ANSWER_MATCHERS) -> LineMatch:
    """Run matchers in order and return the first result."""
    for matcher in matchers:
        result = matcher(line)
        if result is not None:
            return result
    return None


# Quoted text and header lines added by mail clients
ARTIFACT_PREFIXES = (">", "On ", "From:", "Sent:", "To:")
SEPARATOR_LINE_PATTERN = re.compile(r"^(?:-{3,}|_{3,})$")


def is_mail_artifact(line: str) -> bool:
    """True for quoted-reply and header lines that are never free text."""
    if line.startswith(ARTIFACT_PREFIXES):
        return True
    if "wrote:" in line:
        return True
    return SEPARATOR_LINE_PATTERN.match(line) is not None

