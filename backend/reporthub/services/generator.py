import html
import logging
import os
import secrets
from typing import Optional

from openai import OpenAI
from sqlalchemy.engine import Engine
from sqlmodel import Session

from reporthub.models import report as report_model
from reporthub.models.report import Report
from reporthub.utils.clock import utcnow

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a professional report writer. Generate well-structured, "
    "informative content with proper formatting."
)

PROMPT_TEMPLATE = """Generate a comprehensive {pages}-page report on "{topic}" with the title "{title}".

Format requirements:
- Professional academic/business format
- Proper spacing and paragraph structure
- Include introduction, main sections, and conclusion
- Target exactly {pages} pages when printed
- Each page should contain approximately 250-300 words
- Use clear headings and subheadings
- Include relevant examples and explanations

Additional instructions: {instructions}

Please structure the content with proper HTML formatting for PDF generation."""

DOCUMENT_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta charset="UTF-8">
<title>{title}</title>
<style>
  @page {{ size: {page_size}; margin: 1in; }}
  body {{ font-family: 'Times New Roman', serif; font-size: 12pt; line-height: 1.6; color: #333; }}
  .cover-page {{ text-align: center; padding-top: 3in; page-break-after: always; }}
  .title {{ font-size: 24pt; font-weight: bold; margin-bottom: 1in; }}
  .subtitle {{ font-size: 16pt; margin-bottom: 0.5in; }}
  .content {{ text-align: justify; }}
  h1 {{ font-size: 18pt; margin-top: 0.5in; page-break-after: avoid; }}
  h2 {{ font-size: 14pt; margin-top: 0.3in; }}
  p {{ margin-bottom: 0.15in; text-indent: 0.5in; }}
</style>
</head>
<body>
{cover}
<div class="content">
{content}
</div>
</body>
</html>"""

COVER_TEMPLATE = """<div class="cover-page">
  <div class="title">{title}</div>
  <div class="subtitle">Report on {topic}</div>
  <div style="margin-top: 2in;"><div>Generated Report</div><div>{date}</div></div>
</div>"""

# every supported report format prints on A4
PAGE_SIZE = "A4"


class GenerationError(Exception):
    pass


def build_prompt(report: Report) -> str:
    return PROMPT_TEMPLATE.format(
        pages=report.pages,
        topic=report.topic,
        title=report.title,
        instructions=report.additional_instructions or "None",
    )


def render_document(report: Report, content: str) -> str:
    cover = ""
    if report.cover:
        cover = COVER_TEMPLATE.format(
            title=html.escape(report.title),
            topic=html.escape(report.topic),
            date=utcnow().strftime("%d/%m/%Y"),
        )
    return DOCUMENT_TEMPLATE.format(
        title=html.escape(report.title),
        page_size=PAGE_SIZE,
        cover=cover,
        content=content,
    )


class ReportGenerator:
    """Writes report content with a chat-completions model.

    ``client`` must expose ``chat.completions.create`` like ``openai.OpenAI``;
    tests pass a stub. Without a client or API key every generation fails
    and the report is marked failed.
    """

    def __init__(
        self,
        storage_dir: str,
        public_base_url: str,
        client: Optional[object] = None,
        api_key: Optional[str] = None,
        model: str = "gpt-4o",
    ):
        self.storage_dir = storage_dir
        self.public_base_url = public_base_url.rstrip("/")
        self.model = model
        if client is None and api_key:
            client = OpenAI(api_key=api_key)
        self.client = client

    def _complete(self, prompt: str) -> str:
        if self.client is None:
            raise GenerationError("No text-generation client configured (set OPENAI_API_KEY)")

        logger.debug("Calling chat completions model=%s", self.model)
        resp = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            max_tokens=4000,
            temperature=0.7,
        )
        content = resp.choices[0].message.content
        if not content:
            raise GenerationError("Model returned empty content")
        return content

    def document_name(self, report: Report) -> str:
        """File name for a report's HTML; random so links cannot be enumerated.

        A regenerated report keeps the name it was first published under.
        """
        if report.file_url:
            return report.file_url.rsplit("/", 1)[-1]
        return f"{report.id}-{secrets.token_urlsafe(16)}.html"

    def _store(self, report: Report, document: str) -> str:
        name = self.document_name(report)
        rel_path = f"{report.user_id}/{name}"
        path = os.path.join(self.storage_dir, str(report.user_id), name)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w", encoding="utf-8") as fh:
            fh.write(document)
        return f"{self.public_base_url}/files/{rel_path}"

    def generate(self, session: Session, report: Report) -> Report:
        """Generate, store and persist one report; failures mark it failed."""
        report_id = report.id
        logger.info("Generating report id=%s pages=%s", report_id, report.pages)
        try:
            content = self._complete(build_prompt(report))
            logger.info("Content generated report_id=%s length=%s", report_id, len(content))
            file_url = self._store(report, render_document(report, content))

            report.status = report_model.COMPLETED
            report.generated_content = content
            report.file_url = file_url
            report.updated_at = utcnow()
            session.add(report)
            session.commit()
            session.refresh(report)
            return report
        except Exception as e:
            logger.exception("Report generation failed report_id=%s: %s", report_id, e)
            session.rollback()

        try:
            report.status = report_model.FAILED
            report.updated_at = utcnow()
            session.add(report)
            session.commit()
            session.refresh(report)
        except Exception as e:
            logger.exception("Could not mark report_id=%s failed: %s", report_id, e)
            session.rollback()
            raise
        return report

    def run(self, engine: Engine, report_id: int) -> Optional[Report]:
        """Entry point for background tasks: opens its own session."""
        with Session(engine) as session:
            report = session.get(Report, report_id)
            if report is None:
                logger.warning("Generation requested for missing report id=%s", report_id)
                return None
            return self.generate(session, report)
