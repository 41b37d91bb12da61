import pytest

from models.score_band import ScoreBand, format_band
from services.score_parser import extract_all_scores, extract_single_score


class TestSingleScore:
    def test_canonical_line(self):
        parsed = extract_single_score("Score: Robust (3/5)\n\nSummary: fine.")
        assert parsed.band is ScoreBand.ROBUST
        assert parsed.weight == 3

    @pytest.mark.parametrize("band", list(ScoreBand))
    def test_formatted_band_parses_back(self, band):
        parsed = extract_single_score(f"Score: {format_band(band)}")
        assert parsed.band is band

    def test_case_and_markdown_tolerated(self):
        parsed = extract_single_score("**Score:** COMMITMENT (4/5)")
        assert parsed.band is ScoreBand.COMMITMENT

    def test_band_name_wins_over_mismatched_digit(self):
        parsed = extract_single_score("Score: Warning (4/5)")
        assert parsed.band is ScoreBand.WARNING
        assert parsed.weight == 2

    def test_digit_used_when_no_band_name(self):
        parsed = extract_single_score("Score: 2/5\nSummary: weak.")
        assert parsed.band is ScoreBand.WARNING

    def test_band_without_digit_is_not_a_score(self):
        assert extract_single_score("Score: Stretch") is None
        assert extract_single_score("**Score:** Robust\nSummary: adequate.") is None

    def test_band_without_digit_skipped_for_later_full_line(self):
        parsed = extract_single_score("Score: Robust\nFinal Score: Commitment (4/5)")
        assert parsed.band is ScoreBand.COMMITMENT

    def test_score_inside_word_ignored(self):
        assert extract_single_score("Subscore: Robust (3/5)") is None
        assert extract_single_score("Subscore: 2/5\nScore: Warning (2/5)").band is ScoreBand.WARNING

    def test_unknown_label_is_not_defaulted(self):
        assert extract_single_score("Score: Strict (3/5)") is None
        assert extract_single_score("Score: Excellent") is None

    def test_skips_unknown_label_to_later_valid_score(self):
        parsed = extract_single_score("Score: Great (5/5)\nRevised Score: Offtrack (1/5)")
        assert parsed.band is ScoreBand.OFFTRACK

    @pytest.mark.parametrize("text", ["", None, "No score here", "Score:", "Score: 9/5", "{]}"])
    def test_no_match_returns_none(self, text):
        assert extract_single_score(text) is None


class TestAllScores:
    def test_scores_in_order(self):
        text = "Item A\nScore: Robust (3/5)\n\nItem B\nScore: 2/5"
        assert extract_all_scores(text) == [3, 2]

    def test_no_score_marker(self):
        assert extract_all_scores("Summary only, nothing scored.") == []
        assert extract_all_scores("") == []
        assert extract_all_scores(None) == []

    def test_bare_numbers_accepted(self):
        assert extract_all_scores("Score: 4\nscore: Commitment 4/5\nSCORE: 70") == [4, 4, 70]

    def test_score_inside_word_not_collected(self):
        assert extract_all_scores("Subscore: 3\nPrescore: 70\nScore: 4/5") == [4]

    def test_band_without_number_is_skipped(self):
        assert extract_all_scores("Score: Robust, see notes. Score: 5/5") == [5]
