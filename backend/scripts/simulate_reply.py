#!/usr/bin/env python3
"""Survey Reply Simulator.

Posts a mock organization reply to the inbound email webhook, the way the
mail provider would, so a local setup can be exercised end to end.

Usage:
    # Reply to a survey with sample ratings and a comment
    python scripts/simulate_reply.py --survey-id 3f2a9c10-...

    # Custom answers, sender and target
    python scripts/simulate_reply.py --survey-id 3f2a9c10-... \
        --answer Q3a=8 --answer Q4a=N/A --comment "Bra bemötande" \
        --from kontakt@kommun.se --url http://localhost:8000

Environment Variables:
    APP_URL: Base URL of the API (default: http://localhost:8000)
    INBOUND_EMAIL_SECRET: Sent as X-Webhook-Secret when set
    REPLY_EMAIL_DOMAIN: Domain of the reply address
"""

import argparse
import os
import sys
from typing import Dict, List, Optional

import requests

# Add backend/src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from domain.replies.identifier import generate_reply_address

SAMPLE_ANSWERS = {
    "Q3a": "8",
    "Q3b": "7",
    "Q4a": "9",
    "Q4b": "N/A",
    "Q5a": "10",
    "Q6a": "8",
}


def build_body(answers: Dict[str, str], comment: Optional[str]) -> str:
    """Build a reply body in the 'code: value' format of the survey email."""
    lines: List[str] = [f"{code}: {value}" for code, value in answers.items()]
    if comment:
        lines.append("")
        lines.append(f"Kommentar: {comment}")
    lines.append("")
    lines.append("On Mon, Survey Team <surveys@healthcare-provider.demo> wrote:")
    lines.append("> Svara med ett tal 1-10 eller N/A")
    return "\n".join(lines)


def parse_answer_args(values: List[str]) -> Dict[str, str]:
    answers = {}
    for item in values:
        code, sep, value = item.partition("=")
        if not sep:
            raise argparse.ArgumentTypeError(f"Answer must look like CODE=VALUE: {item}")
        answers[code.strip()] = value.strip()
    return answers


def main() -> int:
    parser = argparse.ArgumentParser(description="Post a simulated survey reply")
    parser.add_argument("--survey-id", required=True, help="Survey id to reply to")
    parser.add_argument("--from", dest="from_address", default="kontakt@kommun.example.se")
    parser.add_argument("--answer", action="append", default=[], help="CODE=VALUE, repeatable")
    parser.add_argument("--comment", default="Personalen är mycket hjälpsam och professionell.")
    parser.add_argument("--url", default=os.getenv("APP_URL", "http://localhost:8000"))
    parser.add_argument("--timeout", type=float, default=10.0)
    args = parser.parse_args()

    answers = parse_answer_args(args.answer) if args.answer else SAMPLE_ANSWERS
    domain = os.getenv("REPLY_EMAIL_DOMAIN", "healthcare-provider.demo")

    payload = {
        "from": args.from_address,
        "to": generate_reply_address(args.survey_id, domain),
        "subject": f"Re: Enkätundersökning - Enkät-ID: {args.survey_id}",
        "body": build_body(answers, args.comment),
    }

    headers = {}
    secret = os.getenv("INBOUND_EMAIL_SECRET")
    if secret:
        headers["X-Webhook-Secret"] = secret

    print(f"Posting reply for survey {args.survey_id} from {args.from_address}")
    print(payload["body"])

    response = requests.post(
        f"{args.url.rstrip('/')}/api/inbound-email",
        json=payload,
        headers=headers,
        timeout=args.timeout,
    )
    print(f"\nHTTP {response.status_code}: {response.text}")
    return 0 if response.ok else 1


if __name__ == "__main__":
    sys.exit(main())
