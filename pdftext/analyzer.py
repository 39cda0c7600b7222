"""Document analysis: glyphs -> words -> paragraphs per page, then the scanned verdict."""
import logging
from concurrent.futures import ThreadPoolExecutor
from itertools import islice
from pathlib import Path
from typing import Iterable, Iterator, Optional, Tuple, Union

import fitz

from pdftext.classifier import DocumentClassifier, PageSignal
from pdftext.config import AnalysisConfig
from pdftext.extractor import GlyphExtractor, PageInput
from pdftext.geometry import DocumentMetadata, DocumentResult, PageResult
from pdftext.layout import LayoutEngine
from pdftext.segmenter import WordSegmenter

logger = logging.getLogger(__name__)


class PdfAnalysisError(Exception):
    """Analysis of a whole document failed; no partial result exists."""

    def __init__(self, message: str, file_name: str, page_number: Optional[int] = None):
        self.file_name = file_name
        self.page_number = page_number
        where = file_name if page_number is None else f"{file_name}, page {page_number}"
        super().__init__(f"Failed to analyze PDF ({where}): {message}")


class PdfAnalyzer:
    """
    Runs the per-page pipeline and folds the pages into one DocumentResult.

    Pages share no state; with `max_workers > 1` they are processed on a
    thread pool. Reading from PyMuPDF always happens on the calling thread.
    """

    def __init__(self, config: Optional[AnalysisConfig] = None):
        self.config = config or AnalysisConfig()
        self.extractor = GlyphExtractor()
        self.layout = LayoutEngine(self.config)
        self.classifier = DocumentClassifier(self.config)

    def analyze_page(self, page: PageInput) -> Tuple[PageResult, PageSignal]:
        words = WordSegmenter(page.height).segment(page.glyphs)
        paragraphs = self.layout.extract_paragraphs(words)
        text = " ".join(w.text for w in words).strip()

        result = PageResult(
            page_number=page.page_number,
            width=page.width,
            height=page.height,
            words=words,
            paragraphs=paragraphs,
            text=text,
        )
        media_w = page.width if page.media_width is None else page.media_width
        media_h = page.height if page.media_height is None else page.media_height
        signal = PageSignal(
            text_length=len(text),
            has_large_images=self.classifier.has_large_images(page.image_sizes, media_w, media_h),
        )
        logger.debug("Completed page %d - %d words, %d paragraphs",
                     page.page_number, len(words), len(paragraphs))
        return result, signal

    def analyze_pages(self, pages: Iterable[PageInput], file_name: str = "",
                      metadata: Optional[DocumentMetadata] = None) -> DocumentResult:
        """Analyze already-extracted pages. Any page failure fails the document."""

        def run(page: PageInput) -> Tuple[PageResult, PageSignal]:
            try:
                return self.analyze_page(page)
            except Exception as e:
                raise PdfAnalysisError(str(e), file_name, page.page_number) from e

        workers = self.config.max_workers
        if workers > 1:
            # at most `workers` pages are read ahead of the pool
            outcomes = []
            page_iter = iter(pages)
            with ThreadPoolExecutor(max_workers=workers) as executor:
                while True:
                    batch = list(islice(page_iter, workers))
                    if not batch:
                        break
                    outcomes.extend(executor.map(run, batch))
        else:
            outcomes = [run(p) for p in pages]

        if not outcomes:
            raise PdfAnalysisError("document has no pages", file_name)

        results = [r for r, _ in outcomes]
        signals = [s for _, s in outcomes]
        return DocumentResult(
            file_name=file_name,
            pages=results,
            is_scanned=self.classifier.is_scanned(signals, len(results)),
            metadata=metadata or DocumentMetadata(),
        )

    def _read_pages(self, doc: fitz.Document, file_name: str) -> Iterator[PageInput]:
        for i in range(doc.page_count):
            try:
                page = self.extractor.read_page(doc.load_page(i), i + 1)
            except Exception as e:
                raise PdfAnalysisError(str(e), file_name, i + 1) from e
            yield page

    def analyze_document(self, doc: fitz.Document, file_name: str = "") -> DocumentResult:
        logger.info("Starting PDF analysis for file: %s", file_name)
        if not doc.is_pdf:
            raise PdfAnalysisError("File must be a PDF", file_name)
        result = self.analyze_pages(self._read_pages(doc, file_name), file_name,
                                    self.extractor.metadata(doc))
        logger.info("PDF analysis complete: %s (%d pages, scanned=%s)",
                    file_name, result.total_pages, result.is_scanned)
        return result

    def analyze_file(self, path: Union[Path, str]) -> DocumentResult:
        path = Path(path)
        try:
            doc = fitz.open(path)
        except Exception as e:
            raise PdfAnalysisError(str(e), path.name) from e
        with doc:
            return self.analyze_document(doc, path.name)

    def analyze_bytes(self, data: bytes, file_name: str = "document.pdf") -> DocumentResult:
        if not data:
            raise PdfAnalysisError("File is empty", file_name)
        try:
            doc = fitz.open(stream=data, filetype="pdf")
        except Exception as e:
            raise PdfAnalysisError(str(e), file_name) from e
        with doc:
            return self.analyze_document(doc, file_name)


def analyze_pdf(path: Union[Path, str], config: Optional[AnalysisConfig] = None) -> DocumentResult:
    return PdfAnalyzer(config).analyze_file(path)
