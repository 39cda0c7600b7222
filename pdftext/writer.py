import json
import pandas as pd
from pathlib import Path
from typing import List, Dict, Any

from pdftext.geometry import DocumentResult

WORD_COLUMNS = ["page", "word_index", "paragraph_index", "text",
                "x", "y", "width", "height", "confidence"]


class ResultWriter:
    """
    Saves a DocumentResult as JSON (full result), CSV (one row per word)
    and Markdown (paragraph text per page).
    """

    def __init__(self, output_dir: str):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def _stem(self, result: DocumentResult) -> str:
        stem = Path(result.file_name).stem if result.file_name else "document"
        return "".join(c if (c.isalnum() or c in "-_") else "_" for c in stem)

    def word_records(self, result: DocumentResult) -> List[Dict[str, Any]]:
        records = []
        for page in result.pages:
            # words are shared objects between page.words and paragraph.words
            para_of = {id(w): p.paragraph_index for p in page.paragraphs for w in p.words}
            for i, w in enumerate(page.words):
                records.append({
                    "page": page.page_number,
                    "word_index": i,
                    "paragraph_index": para_of.get(id(w), -1),
                    "text": w.text,
                    "x": w.bbox.x,
                    "y": w.bbox.y,
                    "width": w.bbox.width,
                    "height": w.bbox.height,
                    "confidence": w.confidence,
                })
        return records

    def write_json(self, result: DocumentResult) -> Path:
        path = self.output_dir / f"{self._stem(result)}.json"
        with open(path, "w", encoding="utf-8") as f:
            json.dump(result.to_dict(), f, ensure_ascii=False, indent=2)
        return path

    def write_words_csv(self, result: DocumentResult) -> Path:
        df = pd.DataFrame(self.word_records(result))
        if df.empty:
            df = pd.DataFrame(columns=WORD_COLUMNS)
        path = self.output_dir / f"{self._stem(result)}_words.csv"
        df.to_csv(path, index=False, encoding="utf-8-sig")
        return path

    def write_markdown(self, result: DocumentResult) -> Path:
        md_lines = [f"# {result.file_name or 'document'}\n",
                    f"Scanned: {'yes' if result.is_scanned else 'no'}\n"]
        for page in result.pages:
            md_lines.append(f"## Page {page.page_number}\n")
            for p in page.paragraphs:
                md_lines.append(p.text + "\n")

        path = self.output_dir / f"{self._stem(result)}.md"
        with open(path, "w", encoding="utf-8") as f:
            f.write("\n".join(md_lines).strip() + "\n")
        return path

    def write_all(self, result: DocumentResult) -> List[Path]:
        return [self.write_json(result), self.write_words_csv(result), self.write_markdown(result)]
