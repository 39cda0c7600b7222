import argparse
import logging
import sys
from pathlib import Path
from pdftext.analyzer import PdfAnalyzer, PdfAnalysisError
from pdftext.config import AnalysisConfig, LINE_REFERENCES
from pdftext.writer import ResultWriter


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Extract words and paragraphs with bounding boxes from a PDF")
    parser.add_argument("pdf_path", help="Path to the PDF")
    parser.add_argument("-o", "--output", default="output", help="Output directory")
    parser.add_argument("--config", default=None, help="JSON file with analysis thresholds")
    parser.add_argument("--workers", dest="max_workers", type=int, default=None,
                        help="Pages processed in parallel (default 1)")
    # Threshold overrides; unset flags keep the config file / default value
    parser.add_argument("--same-line-tolerance", type=float, default=None,
                        help="Max y difference (pt) for two words on one line (default 3.0)")
    parser.add_argument("--line-reference", choices=LINE_REFERENCES, default=None,
                        help="Compare words to the first word of the line or to the running mean (default first)")
    parser.add_argument("--paragraph-break-multiplier", type=float, default=None,
                        help="Paragraph gap = avg line height * this (default 1.5)")
    parser.add_argument("--min-paragraph-gap", type=float, default=None,
                        help="Lower bound (pt) for the paragraph gap (default 8.0)")
    parser.add_argument("--image-coverage-threshold", type=float, default=None,
                        help="Image area / page area above which a page counts as image-heavy (default 0.70)")
    parser.add_argument("--text-threshold-per-page", type=int, default=None,
                        help="Average chars/page below which a document is scanned (default 50)")
    parser.add_argument("--text-threshold-with-images", type=int, default=None,
                        help="Average chars/page below which an image-heavy document is scanned (default 200)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    overrides = {
        "max_workers": args.max_workers,
        "same_line_tolerance": args.same_line_tolerance,
        "line_reference": args.line_reference,
        "paragraph_break_multiplier": args.paragraph_break_multiplier,
        "min_paragraph_gap": args.min_paragraph_gap,
        "image_coverage_threshold": args.image_coverage_threshold,
        "text_threshold_per_page": args.text_threshold_per_page,
        "text_threshold_with_images": args.text_threshold_with_images,
    }
    try:
        config = AnalysisConfig.load(args.config, **overrides)
    except (OSError, ValueError) as e:
        print(f"[error] config: {e}")
        return 1
    errors = config.validate()
    if errors:
        for err in errors:
            print(f"[error] config: {err}")
        return 1

    pdf_path = Path(args.pdf_path)
    print(f"Processing {pdf_path}...")

    try:
        result = PdfAnalyzer(config).analyze_file(pdf_path)
    except PdfAnalysisError as e:
        print(f"[error] {e}")
        return 1

    for page in result.pages:
        print(f"[page {page.page_number}] {len(page.words)} words, {len(page.paragraphs)} paragraphs")

    for path in ResultWriter(args.output).write_all(result):
        print(f"[saved] {path}")

    print(f"[done] pages={result.total_pages} scanned={result.is_scanned}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
