import re
from typing import Iterable, List, Literal, Mapping, Optional, TypeVar

_NOT_NUMERIC = re.compile(r"[^0-9.]")

T = TypeVar("T")


def price_value(price) -> float:
    """
    Numeric value of a free-text price.

    Every character that is not a digit or a decimal point is dropped and
    the rest parsed, so "$1,299.50" -> 1299.5. Anything left unparseable
    ("free", "1.2.3", "") is worth 0.
    """
    digits = _NOT_NUMERIC.sub("", str(price if price is not None else ""))
    try:
        return float(digits)
    except ValueError:
        return 0.0


def format_money(amount: float) -> str:
    return f"${amount:.2f}"


def filter_products(products: Iterable[T], query: str) -> List[T]:
    """
    Case-insensitive substring search over name, tag and price.
    Works on product dataclasses, pydantic models or plain dicts.
    """
    products = list(products)
    q = (query or "").strip().lower()
    if not q:
        return products

    def field(p, name: str) -> str:
        val = p.get(name) if isinstance(p, Mapping) else getattr(p, name, "")
        return str(val or "").lower()

    return [
        p
        for p in products
        if q in field(p, "name") or q in field(p, "tag") or q in field(p, "price")
    ]


def generate_markdown_table(
    headers: Optional[List[str]],
    rows: List[List[str]],
    aligns: Optional[List[Literal["l", "c", "r"]]] = None,
) -> str:
    """
    Generate a Markdown table.

    Args:
        headers: List of column headers, or None to use first row as headers.
        rows: List of rows, each a list of strings.
        aligns: List of alignments ('l', 'c', 'r') for each column.
                Defaults to all center ('c').

    Returns:
        str: Markdown formatted table.
    """
    if not rows:
        return ""

    # If no headers, take the first row as header and remove it from rows
    if not headers:
        headers, rows = rows[0], rows[1:]

    headers = list(map(str, headers))
    # pipes would split cells
    rows = [[str(cell).replace("|", "\\|") for cell in row] for row in rows]

    num_cols = len(headers)
    if aligns is None:
        aligns = ["c"] * num_cols
    elif len(aligns) != num_cols:
        raise ValueError("Length of aligns must match number of headers.")

    align_map = {
        "l": ":---",
        "c": ":---:",
        "r": "---:",
    }

    header_line = "| " + " | ".join(headers) + " |"
    align_line = "| " + " | ".join(align_map[a] for a in aligns) + " |"
    row_lines = ["| " + " | ".join(row) + " |" for row in rows]

    return "\n".join([header_line, align_line, *row_lines])
