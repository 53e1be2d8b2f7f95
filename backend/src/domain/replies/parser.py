"""Survey reply body parser.

Classifies every line of a reply independently, so answers survive
reordering, partial quoting and client boilerplate. The scan is a left fold
over lines with an immutable accumulator: parse_body has no state beyond
its arguments.
"""

import logging
from functools import reduce
from typing import NamedTuple, Optional

from .identifier import resolve_survey_id
from .matchers import (
    ANSWER_MATCHERS,
    Matcher,
    RejectedLine,
    classify_line,
    is_mail_artifact,
)
from .models import ParsedAnswer, ParsedReply

logger = logging.getLogger(__name__)


class ParsedBody(NamedTuple):
    """Answers and leftover text recovered from a reply body."""
    answers: tuple[ParsedAnswer, ...] = ()
    free_text_lines: tuple[str, ...] = ()

    @property
    def free_text(self) -> str:
        return "\n".join(self.free_text_lines).strip()


def _fold_line(matchers: tuple[Matcher, ...]):
    def step(acc: ParsedBody, raw_line: str) -> ParsedBody:
        line = raw_line.strip()
        if not line:
            return acc

        result = classify_line(line, matchers)
        if isinstance(result, ParsedAnswer):
            return acc._replace(answers=acc.answers + (result,))
        if isinstance(result, RejectedLine):
            logger.debug(f"Discarding answer for {result.question_code}: {result.reason}")
            return acc
        if is_mail_artifact(line):
            return acc
        return acc._replace(free_text_lines=acc.free_text_lines + (line,))

    return step


def parse_body(
    body: Optional[str],
    matchers: tuple[Matcher, ...] = ANSWER_MATCHERS,
) -> ParsedBody:
    """Split a reply body into structured answers and free text.

    Args:
        body: Plain-text email body
        matchers: Ordered line matchers, first match wins

    Returns:
        ParsedBody: answers in line order plus unattributed text lines
    """
    return reduce(_fold_line(matchers), (body or "").splitlines(), ParsedBody())


def parse_reply(to_address: Optional[str], subject: Optional[str], body: Optional[str]) -> ParsedReply:
    """Resolve the survey and parse the body of one inbound email."""
    parsed = parse_body(body)
    return ParsedReply(
        survey_id=resolve_survey_id(to_address, subject),
        answers=parsed.answers,
        free_text=parsed.free_text,
        raw_content=body or "",
    )
