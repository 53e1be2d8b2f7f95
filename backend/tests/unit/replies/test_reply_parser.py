"""Unit tests for survey reply body parsing"""

from domain.replies.matchers import GENERAL_COMMENT_CODE
from domain.replies.models import ParsedAnswer
from domain.replies.parser import ParsedBody, parse_body, parse_reply


REPLY_BODY = """Hej,

Här kommer våra svar:

Q1: 8
Q3a: 9
Q4b = N/A
Q_recommend: ja
Q19_comment: Bra samarbete under året

Med vänliga hälsningar
Anna

On Mon, 3 Mar 2025 at 10:00, Enkäter <reply+abc-1@example.org> wrote:
> Q1: 1-10
> Q3a: 1-10
"""


class TestParseBody:
    """Test line classification over a whole reply body"""

    def test_structured_answers_in_line_order(self):
        """Test answers are returned in the order they appear"""
        parsed = parse_body(REPLY_BODY)

        assert [a.question_code for a in parsed.answers] == [
            "Q1", "Q3A", "Q4B", "Q_RECOMMEND", "Q19_COMMENT",
        ]
        assert parsed.answers[0].value == 8
        assert parsed.answers[2].is_na is True
        assert parsed.answers[3].value == 1
        assert parsed.answers[4].value == "Bra samarbete under året"

    def test_free_text_excludes_answers_and_quotes(self):
        """Test leftover text keeps greetings but drops quoted mail"""
        parsed = parse_body(REPLY_BODY)

        assert parsed.free_text == "Hej,\nHär kommer våra svar:\nMed vänliga hälsningar\nAnna"
        assert "wrote:" not in parsed.free_text
        assert "1-10" not in parsed.free_text

    def test_rejected_rating_is_dropped(self):
        """Test an out-of-range rating is neither an answer nor free text"""
        parsed = parse_body("Q1: 15\nQ2: 7")

        assert parsed.answers == (ParsedAnswer(question_code="Q2", value=7),)
        assert parsed.free_text == ""

    def test_line_order_irrelevant(self):
        """Test answers are found wherever they appear in the body"""
        parsed = parse_body("Thanks!\n\n   Q2: 4   \nsome notes\nQ1: 3")

        assert [a.question_code for a in parsed.answers] == ["Q2", "Q1"]
        assert parsed.free_text == "Thanks!\nsome notes"

    def test_crlf_line_endings(self):
        parsed = parse_body("Q1: 8\r\nQ2: 9\r\n")
        assert [a.value for a in parsed.answers] == [8, 9]

    def test_general_comment(self):
        parsed = parse_body("Kommentar: Allt fungerade")
        assert parsed.answers[0].question_code == GENERAL_COMMENT_CODE

    def test_empty_body(self):
        """Test empty and missing bodies parse to nothing"""
        assert parse_body("") == ParsedBody()
        assert parse_body(None) == ParsedBody()

    def test_custom_matchers(self):
        """Test the matcher list can be replaced"""
        parsed = parse_body("Q1: 8\nhello", matchers=())
        assert parsed.answers == ()
        assert parsed.free_text == "Q1: 8\nhello"


class TestParseReply:
    """Test combining identification with body parsing"""

    def test_parse_reply(self):
        reply = parse_reply("reply+abc-1@example.org", "Re: Enkät", "Q1: 8\nTack")

        assert reply.survey_id == "abc-1"
        assert reply.answers == (ParsedAnswer(question_code="Q1", value=8),)
        assert reply.free_text == "Tack"
        assert reply.raw_content == "Q1: 8\nTack"

    def test_unidentified_reply_still_parsed(self):
        reply = parse_reply("someone@example.org", "Hello", "Q1: 8")

        assert reply.survey_id is None
        assert len(reply.answers) == 1

    def test_missing_body(self):
        reply = parse_reply("reply+abc-1@example.org", None, None)

        assert reply.answers == ()
        assert reply.free_text == ""
        assert reply.raw_content == ""
