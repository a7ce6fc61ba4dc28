"""
Bordered text table for a ResultSet.

    +----+-------+
    | id | name  |
    +----+-------+
    | 1  | alice |
    +----+-------+

Widths are measured in terminal cells (rich.cells.cell_len), so wide CJK
glyphs count as two and the borders stay aligned on screen.
"""

from rich.cells import cell_len

from .config import NO_RESULTS, UNSUPPORTED_TYPE
from .resultset import ColumnKind

# C0, DEL and C1 controls have no width on screen; show them escaped
_CONTROL_ESCAPES = {
    code: f"\\x{code:02x}" for code in list(range(0x20)) + list(range(0x7F, 0xA0))
}
_CONTROL_ESCAPES.update({ord("\n"): "\\n", ord("\r"): "\\r", ord("\t"): "\\t"})


def render(result_set):
    """Returns the table for result_set as a list of lines."""
    if not result_set.rows:
        return [NO_RESULTS]

    kinds = [column.kind for column in result_set.columns]
    cells = [
        [format_cell(kind, value) for kind, value in zip(kinds, row)]
        for row in result_set.rows
    ]
    headers = [visible(name) for name in result_set.headers]
    widths = column_widths(headers, cells)

    border = _border(widths)
    lines = [border, _row_line(headers, widths), border]
    lines.extend(_row_line(row, widths) for row in cells)
    lines.append(border)
    return lines


def column_widths(headers, cells):
    """Display width per column: the widest of the name and its cells."""
    widths = [cell_len(name) for name in headers]
    for row in cells:
        for i, text in enumerate(row):
            widths[i] = max(widths[i], cell_len(text))
    return widths


def format_cell(kind, value):
    """Formats one raw value according to its column kind."""
    if kind is ColumnKind.TEXT:
        return visible(value) if isinstance(value, str) else ""

    if kind is ColumnKind.INTEGER:
        return str(value) if isinstance(value, int) else ""

    if kind is ColumnKind.REAL:
        return _format_real(value) if isinstance(value, (int, float)) else ""

    # Unknown kinds may still hold a number
    try:
        return _format_real(value)
    except (TypeError, ValueError, OverflowError):
        return UNSUPPORTED_TYPE


def visible(text):
    """Replaces control characters with escapes such as \\n or \\x1b."""
    return text.translate(_CONTROL_ESCAPES)


def _format_real(value):
    return repr(float(value))


def _border(widths):
    return "+" + "+".join("-" * (width + 2) for width in widths) + "+"


def _row_line(values, widths):
    parts = [
        f"| {text}{' ' * (width - cell_len(text))} "
        for text, width in zip(values, widths)
    ]
    return "".join(parts) + "|"
