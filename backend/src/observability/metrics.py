"""Prometheus metrics for survey reply ingestion."""

from prometheus_client import Counter

survey_replies_total = Counter(
    "survey_replies_total",
    "Inbound survey replies by outcome",
    ["outcome"]  # processed|replies_disabled|not_identified|not_found|error
)

survey_answers_persisted_total = Counter(
    "survey_answers_persisted_total",
    "Survey responses written from email replies",
    ["question_type"]
)

survey_answers_skipped_total = Counter(
    "survey_answers_skipped_total",
    "Parsed answers that could not be stored",
    ["reason"]  # unknown_question|type_mismatch|out_of_range
)
