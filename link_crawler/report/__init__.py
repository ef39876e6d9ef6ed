"""link_crawler.report: renderers for a CrawlReport (plain text, JSON and HTML)."""

from __future__ import annotations

from link_crawler.report.html_report import DEFAULT_TEMPLATE_DIR, render_html
from link_crawler.report.json_report import render_json
from link_crawler.report.text_report import render_text

__all__ = ["render_text", "render_json", "render_html", "DEFAULT_TEMPLATE_DIR"]
