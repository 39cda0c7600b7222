import json
import pytest
from pdftext.config import AnalysisConfig


def test_defaults():
    cfg = AnalysisConfig()
    assert cfg.same_line_tolerance == 3.0
    assert cfg.line_reference == "first"
    assert cfg.paragraph_break_multiplier == 1.5
    assert cfg.min_paragraph_gap == 8.0
    assert cfg.default_line_height == 12.0
    assert cfg.image_coverage_threshold == 0.70
    assert cfg.text_threshold_per_page == 50
    assert cfg.text_threshold_with_images == 200
    assert cfg.max_workers == 1
    assert cfg.validate() == []


def test_load_without_file_uses_defaults():
    assert AnalysisConfig.load() == AnalysisConfig()


def test_load_from_json(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"same_line_tolerance": 2.0, "max_workers": 4}), encoding="utf-8")

    cfg = AnalysisConfig.load(path)

    assert cfg.same_line_tolerance == 2.0
    assert cfg.max_workers == 4
    assert cfg.min_paragraph_gap == 8.0


def test_overrides_win_and_none_is_ignored(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"min_paragraph_gap": 10.0}), encoding="utf-8")

    cfg = AnalysisConfig.load(path, min_paragraph_gap=4.0, max_workers=None)

    assert cfg.min_paragraph_gap == 4.0
    assert cfg.max_workers == 1


def test_unknown_keys_are_rejected(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"same_line_tolerence": 2.0}), encoding="utf-8")

    with pytest.raises(ValueError, match="same_line_tolerence"):
        AnalysisConfig.load(path)


def test_non_object_file_is_rejected(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("[1, 2]", encoding="utf-8")

    with pytest.raises(ValueError):
        AnalysisConfig.load(path)


def test_validate_reports_every_problem():
    cfg = AnalysisConfig(same_line_tolerance=0, line_reference="median",
                         image_coverage_threshold=1.5, max_workers=0)
    errors = cfg.validate()
    assert len(errors) == 4
    assert any("line_reference" in e for e in errors)
