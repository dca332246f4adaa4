from docmigrator.text.dom import html_to_text, linearize, from_soup
from docmigrator.text.diff import analyze, DiffReport
from docmigrator.text.render import render_report, visualize_text_diff

__all__ = [
    "html_to_text",
    "linearize",
    "from_soup",
    "analyze",
    "DiffReport",
    "render_report",
    "visualize_text_diff",
]
