from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping, Optional, Protocol

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..common.datetime_utils import format_date
from ..common.money import money_str
from .model import PayslipView

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"


class PayslipRenderer(Protocol):
    mimetype: str
    extension: str

    def render(self, view: PayslipView) -> bytes:
        raise NotImplementedError


class HtmlPayslipRenderer:
    """Renders the payslip template to HTML bytes."""

    mimetype = "text/html"
    extension = "html"

    def __init__(self, company: Optional[Mapping[str, Any]] = None, *, template_name: str = "payslip.html"):
        self._company = dict(company or {})
        self._template_name = template_name
        self._env = Environment(
            loader=FileSystemLoader(str(TEMPLATE_DIR)),
            autoescape=select_autoescape(["html"]),
        )
        self._env.filters["money"] = money_str
        self._env.filters["iso_date"] = format_date

    def render_html(self, view: PayslipView) -> str:
        template = self._env.get_template(self._template_name)
        rows = max(len(view.earnings), len(view.deductions))
        return template.render(
            payslip=view,
            company=self._company,
            row_indexes=range(rows),
        )

    def render(self, view: PayslipView) -> bytes:
        return self.render_html(view).encode("utf-8")


class WeasyPrintPayslipRenderer(HtmlPayslipRenderer):
    mimetype = "application/pdf"
    extension = "pdf"

    def render(self, view: PayslipView) -> bytes:
        # Imported here: WeasyPrint loads Pango at import time.
        from weasyprint import HTML

        html_string = self.render_html(view)
        logger.debug("Rendering payslip PDF for payroll %s", view.payroll_id)
        return HTML(string=html_string, base_url=str(TEMPLATE_DIR)).write_pdf()
