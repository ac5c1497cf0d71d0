import asyncio
import io
import re

import PyPDF2
from docx import Document

from careerbridge.errors import FileImportError

SUPPORTED_EXTENSIONS = (".pdf", ".doc", ".docx")


class FileProcessor:
    """Extracts CV text from uploaded PDF / Word documents for the CV Tailor page."""

    async def extract_text(self, filename: str, content: bytes) -> str:
        """
        Extract text from an uploaded file (PDF, DOC, DOCX)

        Raises:
            FileImportError: unsupported extension or unreadable document
        """
        if not filename or not filename.lower().endswith(SUPPORTED_EXTENSIONS):
            raise FileImportError("Only PDF, DOC, and DOCX files are supported")
        if not content:
            raise FileImportError("The uploaded file is empty")

        if filename.lower().endswith(".pdf"):
            return await asyncio.to_thread(self._extract_from_pdf, content)
        return await asyncio.to_thread(self._extract_from_word, content)

    def _extract_from_pdf(self, content: bytes) -> str:
        try:
            pdf_reader = PyPDF2.PdfReader(io.BytesIO(content))
            pages = [page.extract_text() or "" for page in pdf_reader.pages]
        except Exception as e:
            raise FileImportError(f"Failed to extract PDF text: {e}") from e
        return self._clean_text("\n".join(pages))

    def _extract_from_word(self, content: bytes) -> str:
        try:
            doc = Document(io.BytesIO(content))
        except Exception as e:
            raise FileImportError(f"Failed to extract Word document text: {e}") from e

        lines = [paragraph.text for paragraph in doc.paragraphs]
        for table in doc.tables:
            for row in table.rows:
                lines.append(" | ".join(cell.text for cell in row.cells))
        return self._clean_text("\n".join(lines))

    def _clean_text(self, text: str) -> str:
        """Normalise whitespace while keeping line structure (the CV is re-read by the model)."""
        if not text:
            return ""
        text = re.sub(r"[ \t\r\f\v]+", " ", text)
        text = re.sub(r"\n\s*\n+", "\n\n", text)
        return text.strip()
