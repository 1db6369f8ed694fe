from typing import List, Literal, Optional

from storage.models import Order, Product


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
    rows = [list(map(str, row)) for row in rows]

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


def product_cells(product: Product) -> List[str]:
    """One row of display cells for a product, in PRODUCT_HEADERS order."""
    return [
        str(product.id),
        product.name,
        product.manufacturer,
        f"{product.price:.2f}",
        product.colour or "-",
        product.size,
        str(product.amount),
        product.creation_date.isoformat(),
    ]


PRODUCT_HEADERS = ["ID", "Name", "Manufacturer", "Price", "Colour", "Size", "Amount", "Created"]


def order_markdown(order: Optional[Order]) -> str:
    """Markdown detail of an order and its line-item snapshots."""
    if order is None:
        return "### Select an order to view its details."

    header = (
        f"### Order #{order.id}\n"
        f"Customer: {order.login}  \n"
        f"Status: {order.status}\n\n"
    )
    rows = [
        [p.name, p.manufacturer, p.amount, f"{p.price:.2f}", f"{p.price * p.amount:.2f}"]
        for p in order.products.values()
    ]
    table = generate_markdown_table(
        ["Product", "Manufacturer", "Qty", "Unit Price", "Line Total"],
        rows,
        ["l", "l", "r", "r", "r"],
    )
    if not table:
        table = "_No line items._"
    return header + table + f"\n\n**Total:** ${order.total_price:.2f}"
