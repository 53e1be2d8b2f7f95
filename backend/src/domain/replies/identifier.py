"""Survey identifier resolution for inbound replies.

Outbound survey emails set Reply-To to a plus-addressed mailbox carrying
the survey id, and print the id in the footer so it survives in the
subject or quoted text when a client drops the Reply-To header:

    reply+3f2a9c10-...@healthcare-provider.demo → '3f2a9c10-...'
    Subject: "Re: Survey - Enkät-ID: 3f2a9c10-..." → '3f2a9c10-...'

The id is opaque: a run of letters, digits and hyphens, returned exactly
as written and never normalized.
"""

import re
from typing import Optional

REPLY_ADDRESS_PATTERN = re.compile(r"reply\+([a-z0-9-]+)@", re.IGNORECASE)

SUBJECT_ID_PATTERNS = (
    re.compile(r"Enkät-ID:\s*([a-z0-9-]+)", re.IGNORECASE),
    re.compile(r"Survey-ID:\s*([a-z0-9-]+)", re.IGNORECASE),
)


def generate_reply_address(survey_id: str, domain: str) -> str:
    """Build the Reply-To address used when sending a survey.

    Args:
        survey_id: Survey id to embed
        domain: Mail domain routed to the inbound webhook

    Returns:
        str: Address of the form reply+<survey_id>@<domain>
    """
    return f"reply+{survey_id}@{domain}"


def survey_id_from_reply_address(address: Optional[str]) -> Optional[str]:
    """Extract the survey id from a plus-addressed reply mailbox.

    Examples:
        reply+abc-123@domain.com → 'abc-123'
        "Surveys" <reply+abc-123@domain.com> → 'abc-123'
        someone@else.com → None
    """
    if not address:
        return None
    match = REPLY_ADDRESS_PATTERN.search(address)
    return match.group(1) if match else None


def survey_id_from_subject(subject: Optional[str]) -> Optional[str]:
    """Extract the survey id from an 'Enkät-ID:' or 'Survey-ID:' label."""
    if not subject:
        return None
    for pattern in SUBJECT_ID_PATTERNS:
        match = pattern.search(subject)
        if match:
            return match.group(1)
    return None


def resolve_survey_id(to_address: Optional[str], subject: Optional[str]) -> Optional[str]:
    """Resolve which survey a reply belongs to.

    The reply address wins; the subject label is only a fallback.
    Returns None when neither carries an id.
    """
    return survey_id_from_reply_address(to_address) or survey_id_from_subject(subject)
