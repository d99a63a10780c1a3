"""
Alphalist Excel Generator Module

Exports Alphalist entries to a formatted Excel workbook.
"""

import logging
from datetime import datetime
from pathlib import Path

import yaml
from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side

from tax.money import sum_amounts

from .alphalist import AlphalistEntry

logger = logging.getLogger(__name__)

HEADERS = [
    "#",
    "TIN",
    "Last Name",
    "First Name",
    "Middle Name",
    "Gross Compensation",
    "Non-Taxable",
    "Taxable Compensation",
    "Tax Withheld",
]

# Columns F..I hold amounts
AMOUNT_COLUMNS = range(6, 10)


class AlphalistExcelGenerator:
    """Generates Alphalist Excel files."""

    def __init__(self, config_dir: Path | str | None = None):
        """Initialize the generator.

        Args:
            config_dir: Directory holding alphalist_config.yaml
        """
        self.config_dir = Path(config_dir) if config_dir else Path(__file__).parent
        self._load_config()
        self._setup_styles()

    def _load_config(self) -> None:
        """Load the workbook layout from YAML."""
        config_file = self.config_dir / "alphalist_config.yaml"
        if config_file.exists():
            with open(config_file, encoding="utf-8") as f:
                self.config = yaml.safe_load(f) or {}
        else:
            self.config = {}

        self.template_config = self.config.get("excel_template", {})

    def _setup_styles(self) -> None:
        """Setup Excel styles from config."""
        styles = self.template_config.get("styles", {})

        def _font(key: str, size: int) -> Font:
            cfg = styles.get(key, {})
            return Font(
                name=cfg.get("font", "Arial"),
                size=cfg.get("font_size", size),
                bold=cfg.get("bold", True),
            )

        def _fill(key: str, color: str) -> PatternFill:
            fill_color = styles.get(key, {}).get("fill_color", color)
            return PatternFill(start_color=fill_color, end_color=fill_color, fill_type="solid")

        self.header_font = _font("header", 14)
        self.header_fill = _fill("header", "FFFF00")
        self.section_font = _font("section_header", 11)
        self.section_fill = _fill("section_header", "D9E1F2")
        self.total_font = _font("total_row", 11)
        self.total_fill = _fill("total_row", "FFFF00")
        self.normal_font = Font(name="Arial", size=10)

        thin_border = Side(style="thin", color="000000")
        self.border = Border(
            left=thin_border,
            right=thin_border,
            top=thin_border,
            bottom=thin_border,
        )

        self.center_align = Alignment(horizontal="center", vertical="center")
        self.right_align = Alignment(horizontal="right", vertical="center")

        self.currency_format = styles.get("currency_format", "#,##0.00")

    def generate(
        self,
        entries: list[AlphalistEntry],
        year: int,
        output_path: Path | str | None = None,
        employer_name: str = "",
    ) -> Path:
        """Generate an Alphalist workbook.

        Args:
            entries: Alphalist rows
            year: Calendar year covered
            output_path: Output file path (generated in the working directory if None)
            employer_name: Employer shown under the title

        Returns:
            Path to generated file
        """
        wb = Workbook()
        ws = wb.active
        ws.title = self.template_config.get("sheet_name", "Alphalist")

        self._set_column_widths(ws)

        current_row = self._write_title(ws, 1, year, employer_name)
        current_row += 1
        current_row = self._write_headers(ws, current_row)
        current_row = self._write_entries(ws, current_row, entries)
        self._write_totals(ws, current_row, entries)

        if output_path is None:
            output_path = Path(f"Alphalist_{year}_{datetime.now().strftime('%Y%m%d_%H%M%S')}.xlsx")
        else:
            output_path = Path(output_path)

        output_path.parent.mkdir(parents=True, exist_ok=True)

        wb.save(output_path)
        logger.info(f"Generated Alphalist Excel for {year} ({len(entries)} employees): {output_path}")

        return output_path

    def _set_column_widths(self, ws) -> None:
        """Set column widths from config."""
        for col_letter, config in self.template_config.get("columns", {}).items():
            ws.column_dimensions[col_letter].width = config.get("width", 15)

    def _write_title(self, ws, row: int, year: int, employer_name: str) -> int:
        """Write title rows."""
        ws.merge_cells(f"A{row}:I{row}")
        cell = ws[f"A{row}"]
        cell.value = f"Alphalist of Employees - {year}"
        cell.font = self.header_font
        cell.fill = self.header_fill
        cell.alignment = self.center_align
        row += 1

        if employer_name:
            ws.merge_cells(f"A{row}:I{row}")
            cell = ws[f"A{row}"]
            cell.value = employer_name
            cell.font = self.normal_font
            cell.alignment = self.center_align
            row += 1

        return row

    def _write_headers(self, ws, row: int) -> int:
        """Write column headers."""
        for col, header in enumerate(HEADERS, 1):
            cell = ws.cell(row=row, column=col, value=header)
            cell.font = self.section_font
            cell.fill = self.section_fill
            cell.border = self.border
            cell.alignment = self.center_align
        return row + 1

    def _write_entries(self, ws, row: int, entries: list[AlphalistEntry]) -> int:
        """Write one row per employee."""
        for number, entry in enumerate(entries, 1):
            values = [
                number,
                entry.tin,
                entry.last_name,
                entry.first_name,
                entry.middle_name,
                float(entry.gross_compensation),
                float(entry.non_taxable_compensation),
                float(entry.taxable_compensation),
                float(entry.withholding_tax),
            ]
            for col, value in enumerate(values, 1):
                cell = ws.cell(row=row, column=col, value=value)
                cell.font = self.normal_font
                cell.border = self.border
                if col in AMOUNT_COLUMNS:
                    cell.number_format = self.currency_format
                    cell.alignment = self.right_align
            row += 1
        return row

    def _write_totals(self, ws, row: int, entries: list[AlphalistEntry]) -> int:
        """Write the totals row."""
        ws.merge_cells(f"A{row}:E{row}")
        label_cell = ws[f"A{row}"]
        label_cell.value = "TOTAL"
        label_cell.font = self.total_font
        label_cell.fill = self.total_fill
        label_cell.alignment = self.center_align
        label_cell.border = self.border

        totals = [
            sum_amounts(e.gross_compensation for e in entries),
            sum_amounts(e.non_taxable_compensation for e in entries),
            sum_amounts(e.taxable_compensation for e in entries),
            sum_amounts(e.withholding_tax for e in entries),
        ]
        for col, total in zip(AMOUNT_COLUMNS, totals):
            cell = ws.cell(row=row, column=col, value=float(total))
            cell.font = self.total_font
            cell.fill = self.total_fill
            cell.number_format = self.currency_format
            cell.border = self.border
            cell.alignment = self.right_align

        return row + 1
