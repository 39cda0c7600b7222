import math
import pytest
from pdftext.geometry import GlyphRecord
from pdftext.segmenter import WordSegmenter, SegmentState, segment_words

PAGE_H = 800.0


def g(text, x, y=100.0, w=6.0, h=10.0, space=None):
    return GlyphRecord(text=text, x=x, y=y, width=w, height=h, space_width=space)


def sep(x, y=100.0):
    return GlyphRecord(text=" ", x=x, y=y, width=3.0, height=10.0, is_separator=True)


def run(text, x0=10.0, y=100.0, w=6.0):
    """Contiguous glyphs spelling `text`."""
    return [g(c, x0 + i * w, y=y, w=w) for i, c in enumerate(text)]


@pytest.fixture
def segmenter():
    return WordSegmenter(PAGE_H)


def texts(words):
    return [w.text for w in words]


def test_separator_splits_words(segmenter):
    glyphs = run("Hi") + [sep(22)] + run("yo", x0=25)
    assert texts(segmenter.segment(glyphs)) == ["Hi", "yo"]


def test_horizontal_gap_without_space_width_uses_glyph_widths(segmenter):
    # threshold = ((6 + 6) / 2) / 2 = 3; gap of 8 splits
    glyphs = run("ab") + [g("c", 30.0)]
    assert texts(segmenter.segment(glyphs)) == ["ab", "c"]


def test_small_gap_stays_in_word(segmenter):
    glyphs = [g("a", 10.0), g("b", 18.5)]  # gap 2.5 < 3
    assert texts(segmenter.segment(glyphs)) == ["ab"]


def test_space_width_drives_threshold(segmenter):
    # half of space width 4 -> threshold 2
    split = [g("a", 10.0, space=4.0), g("b", 19.0, space=4.0)]  # gap 3
    joined = [g("a", 10.0, space=4.0), g("b", 17.5, space=4.0)]  # gap 1.5
    assert texts(segmenter.segment(split)) == ["a", "b"]
    assert texts(segmenter.segment(joined)) == ["ab"]


def test_baseline_jump_is_a_line_break(segmenter):
    # no horizontal gap, but the baseline moves 15pt (> half of 10pt)
    glyphs = [g("a", 10.0, y=100.0), g("b", 16.0, y=115.0)]
    assert texts(segmenter.segment(glyphs)) == ["a", "b"]


def test_small_baseline_shift_is_not_a_break(segmenter):
    glyphs = [g("a", 10.0, y=100.0), g("b", 16.0, y=104.0)]
    assert texts(segmenter.segment(glyphs)) == ["ab"]


def test_implicit_boundary_keeps_last_glyph(segmenter):
    # "b" starts a new word; "c" is measured from "b" and joins it
    glyphs = [g("a", 10.0), g("b", 30.0), g("c", 36.0)]
    assert texts(segmenter.segment(glyphs)) == ["a", "bc"]


def test_separator_clears_last_glyph(segmenter):
    state = SegmentState()
    for glyph in run("ab"):
        state = segmenter.step(state, glyph)
    state = segmenter.step(state, sep(22))
    assert state.last is None
    assert state.pending == []
    assert texts(state.words) == ["ab"]


def test_malformed_glyphs_are_dropped(segmenter):
    glyphs = [
        g("a", 10.0),
        g("x", 16.0, w=0.0),
        g("y", 16.0, h=-1.0),
        g("z", float("nan")),
        g("q", 16.0, w=math.inf),
        g("b", 16.0),
    ]
    assert texts(segmenter.segment(glyphs)) == ["ab"]


def test_whitespace_only_run_is_discarded(segmenter):
    glyphs = [g("\t", 10.0), g("\n", 16.0)]
    assert segmenter.segment(glyphs) == []


def test_word_text_is_trimmed(segmenter):
    glyphs = [g("\t", 10.0), g("a", 16.0), g("b", 22.0)]
    assert texts(segmenter.segment(glyphs)) == ["ab"]


def test_multi_codepoint_glyph_text(segmenter):
    glyphs = [g("fi", 10.0, w=8.0), g("n", 18.0), g("e", 24.0)]
    assert texts(segmenter.segment(glyphs)) == ["fine"]


def test_bounding_box_flips_to_bottom_left_origin(segmenter):
    glyphs = [g("a", 10.0, y=100.0, w=6.0, h=10.0), g("b", 16.0, y=102.0, w=6.0, h=12.0)]
    [word] = segmenter.segment(glyphs)
    # top edges 90 and 90, bottom edges (baselines) 100 and 102
    assert word.bbox.x == 10.0
    assert word.bbox.width == 12.0
    assert word.bbox.y == PAGE_H - 102.0
    assert word.bbox.height == 12.0
    assert word.confidence == 1.0


def test_words_follow_stream_order(segmenter):
    glyphs = run("low", y=500.0) + [sep(40.0, y=500.0)] + run("high", y=100.0)
    assert texts(segmenter.segment(glyphs)) == ["low", "high"]


def test_every_word_has_text_and_positive_box(segmenter):
    glyphs = run("The") + [sep(28)] + run("quick", x0=31) + [g("!", 80.0, y=130.0)]
    words = segmenter.segment(glyphs)
    assert len(words) == 3
    for w in words:
        assert w.text.strip()
        assert w.bbox.width > 0
        assert w.bbox.height > 0


def test_empty_stream():
    assert segment_words([], PAGE_H) == []


def test_segmentation_is_deterministic():
    glyphs = run("alpha") + [sep(45)] + run("beta", x0=50, y=120.0)
    assert segment_words(glyphs, PAGE_H) == segment_words(glyphs, PAGE_H)


def test_gap_equal_to_threshold_stays_in_word(segmenter):
    # space width 4 -> threshold 2; "b" starts exactly 2pt after "a" ends
    glyphs = [g("a", 10.0, space=4.0), g("b", 18.0, space=4.0)]
    assert texts(segmenter.segment(glyphs)) == ["ab"]
