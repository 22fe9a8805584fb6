"""
Report Builder Module
Renders a line diff as a two-column HTML fragment and as unified +/- text
using Jinja2 templates.
"""

from dataclasses import dataclass
from jinja2 import Environment, FileSystemLoader, select_autoescape
from pathlib import Path
from typing import Union
import json
import logging

from core.line_diff import ADDED, CHANGED, REMOVED, SAME, DiffResult, check_invariants

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / 'templates'

UNIFIED_PREFIXES = {
    SAME: '  ',
    ADDED: '+ ',
    REMOVED: '- ',
}


@dataclass(frozen=True)
class RenderedDiff:
    display_markup: str
    unified_text: str


class ReportBuilder:
    def __init__(self, template_dir: Union[str, Path] = TEMPLATE_DIR):
        self.env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            autoescape=select_autoescape(['html']),
        )

    def render_display(self, result: DiffResult) -> str:
        """Render one two-cell row per entry below a Left/Right header."""
        check_invariants(result)
        template = self.env.get_template('diff_table.html')
        return template.render(entries=result.entries)

    def render_unified(self, result: DiffResult) -> str:
        """Render the diff as ``+``/``-`` prefixed text, one entry per line."""
        check_invariants(result)
        lines = []
        for entry in result.entries:
            if entry.type == CHANGED:
                lines.append(f"- {entry.left}\n+ {entry.right}")
            elif entry.type == ADDED:
                lines.append(UNIFIED_PREFIXES[ADDED] + entry.right)
            else:
                lines.append(UNIFIED_PREFIXES[entry.type] + entry.left)
        return '\n'.join(lines)

    def render(self, result: DiffResult) -> RenderedDiff:
        return RenderedDiff(
            display_markup=self.render_display(result),
            unified_text=self.render_unified(result),
        )

    def generate_html_report(self, result: DiffResult, output_path: Union[str, Path],
                             left_name: str = 'Left', right_name: str = 'Right') -> Path:
        """Write a standalone HTML page containing the two-column diff."""
        try:
            template = self.env.get_template('diff_report.html')
            page = template.render(
                diff_markup=self.render_display(result),
                summary=result.to_dict()['summary'],
                similarity=result.similarity_score,
                left_name=left_name,
                right_name=right_name,
            )
            path = Path(output_path)
            path.write_text(page, encoding='utf-8')
            logger.info(f"HTML report written to {path}")
            return path
        except Exception as e:
            logger.error(f"Error generating HTML report: {str(e)}", exc_info=True)
            raise

    def generate_json_report(self, result: DiffResult, output_path: Union[str, Path]) -> Path:
        """Write the raw diff entries and summary as JSON."""
        check_invariants(result)
        path = Path(output_path)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(result.to_dict(), f, indent=2, ensure_ascii=False)
        logger.info(f"JSON report written to {path}")
        return path


_builder = ReportBuilder()


def render_display(result: DiffResult) -> str:
    return _builder.render_display(result)


def render_unified(result: DiffResult) -> str:
    return _builder.render_unified(result)


def render(result: DiffResult) -> RenderedDiff:
    """Project a diff into display markup and unified text."""
    return _builder.render(result)
