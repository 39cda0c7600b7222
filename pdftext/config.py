"""Configuration for the word/paragraph pipeline and the scanned-document heuristic."""
from dataclasses import dataclass, fields, asdict
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import json

LINE_REFERENCES = ("first", "mean")


@dataclass
class AnalysisConfig:
    """Thresholds used by the layout engine and the document classifier."""
    # Line clustering (points)
    same_line_tolerance: float = 3.0
    # "first": compare to the first word of the line, "mean": running average of the line
    line_reference: str = "first"
    # Paragraph clustering
    paragraph_break_multiplier: float = 1.5
    min_paragraph_gap: float = 8.0
    default_line_height: float = 12.0
    # Scanned detection
    image_coverage_threshold: float = 0.70
    text_threshold_per_page: int = 50
    text_threshold_with_images: int = 200
    # Page map; 1 = sequential
    max_workers: int = 1

    @classmethod
    def load(cls, path: Optional[Union[Path, str]] = None, **overrides: Any) -> "AnalysisConfig":
        """Load config from a JSON file; keyword overrides win over file values."""
        data: Dict[str, Any] = {}
        if path is not None:
            config_path = Path(path).expanduser()
            with open(config_path, encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError(f"Config file must hold a JSON object: {config_path}")

        data.update({k: v for k, v in overrides.items() if v is not None})

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(unknown)}")
        return cls(**data)

    def validate(self) -> List[str]:
        """Return list of validation errors, empty if valid."""
        errors = []
        if self.same_line_tolerance <= 0:
            errors.append(f"same_line_tolerance must be positive, got {self.same_line_tolerance}")
        if self.line_reference not in LINE_REFERENCES:
            errors.append(
                f"Invalid line_reference: {self.line_reference}. Must be one of {', '.join(LINE_REFERENCES)}"
            )
        if self.paragraph_break_multiplier <= 0:
            errors.append(f"paragraph_break_multiplier must be positive, got {self.paragraph_break_multiplier}")
        if self.min_paragraph_gap < 0:
            errors.append(f"min_paragraph_gap must not be negative, got {self.min_paragraph_gap}")
        if self.default_line_height <= 0:
            errors.append(f"default_line_height must be positive, got {self.default_line_height}")
        if not (0 < self.image_coverage_threshold <= 1):
            errors.append(f"image_coverage_threshold must be in (0, 1], got {self.image_coverage_threshold}")
        if self.text_threshold_per_page < 0 or self.text_threshold_with_images < 0:
            errors.append("text thresholds must not be negative")
        if self.max_workers < 1:
            errors.append(f"max_workers must be at least 1, got {self.max_workers}")
        return errors

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
