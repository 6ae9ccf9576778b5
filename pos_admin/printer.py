"""Bill receipt formatting and ESC/POS thermal printing."""

from __future__ import annotations

import os
from pathlib import Path

from pos_admin.config import (
    CURRENCY_SYMBOL,
    PRINTER_FONT_PATH,
    PRINTER_FONT_SIZE,
    PRINTER_LEFT_INDENT_PX,
    PRINTER_LINE_CHARS,
    PRINTER_USB_PRODUCT_ID,
    PRINTER_USB_VENDOR_ID,
    PRINTER_WIDTH_PX,
)
from pos_admin.data import table_number
from pos_admin.models import HistoryEntry

# Extra vertical headroom so descenders are not clipped on thermal output.
_LINE_EXTRA_PX = 8
_RULE_HEIGHT_PX = 10
_RULE_TOKEN = "__RULE__"
_FONT_OVERRIDE_ENV = "POS_ADMIN_PRINTER_FONT_PATH"
_LINUX_FONT_FALLBACKS = (
    "/usr/share/fonts/TTF/DejaVuSansMono.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSansMono.ttf",
    "/usr/share/fonts/dejavu/DejaVuSansMono.ttf",
    "/usr/share/fonts/liberation/LiberationMono-Regular.ttf",
)


def format_money(amount: float, symbol: str = CURRENCY_SYMBOL) -> str:
    if float(amount).is_integer():
        return f"{symbol}{int(amount)}"
    return f"{symbol}{amount:.2f}"


def _columns(left: str, right: str, width: int) -> str:
    space = width - len(right) - 1
    if len(left) > space:
        left = left[: max(0, space - 1)] + "…" if space > 1 else ""
    return f"{left:<{space}} {right}"


def format_bill(entry: HistoryEntry, shop_name: str, width: int = PRINTER_LINE_CHARS) -> list[str]:
    """Render a bill as fixed-width receipt lines.

    Rule lines are returned as ``__RULE__`` so the printer can draw them.
    """
    stamp = entry.timestamp.astimezone().strftime("%d/%m/%Y %H:%M")
    lines = [
        shop_name.center(width).rstrip(),
        f"Table {table_number(entry.table_id)}".center(width).rstrip(),
        stamp.center(width).rstrip(),
        _RULE_TOKEN,
        _columns("Item", "Qty   Amount", width),
    ]
    for item in entry.items:
        amount = format_money(item.line_total)
        lines.append(_columns(item.product_name, f"{item.quantity:>3} {amount:>8}", width))
    lines.append(_RULE_TOKEN)
    lines.append(_columns("TOTAL", format_money(entry.total), width))
    lines.append(_RULE_TOKEN)
    lines.append("Thank you! Visit again".center(width).rstrip())
    return lines


def receipt_text(entry: HistoryEntry, shop_name: str, width: int = PRINTER_LINE_CHARS) -> str:
    """Plain-text receipt with rules drawn as dashes."""
    return "\n".join("-" * width if line == _RULE_TOKEN else line for line in format_bill(entry, shop_name, width))


def resolve_printer_font_path() -> str:
    """
    Resolve a monospace printer font path.

    Resolution order:
    1. POS_ADMIN_PRINTER_FONT_PATH (if set)
    2. PRINTER_FONT_PATH
    3. Known Linux fallbacks
    """
    env_override = os.environ.get(_FONT_OVERRIDE_ENV, "").strip()
    candidates: list[str] = []
    if env_override:
        candidates.append(env_override)
    candidates.append(PRINTER_FONT_PATH)
    candidates.extend(_LINUX_FONT_FALLBACKS)

    seen: set[str] = set()
    for candidate in candidates:
        if not candidate or candidate in seen:
            continue
        seen.add(candidate)
        if Path(candidate).is_file():
            return candidate

    raise RuntimeError(
        f"No usable printer font found. Set {_FONT_OVERRIDE_ENV} to a valid .ttf/.otf file. "
        f"Tried: {', '.join(seen)}"
    )


def check_printer_dependencies() -> tuple[bool, str]:
    """Check whether printer dependencies are importable."""
    try:
        from escpos.printer import Usb  # noqa: F401
        from PIL import ImageFont

        ImageFont.truetype(resolve_printer_font_path(), PRINTER_FONT_SIZE)
    except Exception as exc:
        return (False, f"Printer unavailable: {exc}")
    return (True, "Printer ready")


def _render_line(text: str, font: object) -> object:
    from PIL import Image, ImageDraw

    canvas_height = PRINTER_FONT_SIZE + _LINE_EXTRA_PX
    img = Image.new("1", (PRINTER_WIDTH_PX, canvas_height), color=1)
    draw = ImageDraw.Draw(img)
    bbox = draw.textbbox((0, 0), text or " ", font=font)
    text_height = bbox[3] - bbox[1]
    y = (canvas_height - text_height) // 2 - bbox[1]
    draw.text((PRINTER_LEFT_INDENT_PX, y), text, font=font, fill=0)
    return img


def _render_rule() -> object:
    from PIL import Image, ImageDraw

    img = Image.new("1", (PRINTER_WIDTH_PX, _RULE_HEIGHT_PX), color=1)
    draw = ImageDraw.Draw(img)
    middle = _RULE_HEIGHT_PX // 2
    for x in range(PRINTER_LEFT_INDENT_PX, PRINTER_WIDTH_PX - PRINTER_LEFT_INDENT_PX, 8):
        draw.line((x, middle, x + 4, middle), fill=0, width=2)
    return img


def print_bill_receipt(entry: HistoryEntry, shop_name: str) -> None:
    """Print the bill on the USB thermal printer and cut the ticket."""
    try:
        from escpos.printer import Usb
        from PIL import ImageFont
    except Exception as exc:
        raise RuntimeError(f"Printer dependencies unavailable: {exc}") from exc

    printer = Usb(PRINTER_USB_VENDOR_ID, PRINTER_USB_PRODUCT_ID)
    font = ImageFont.truetype(resolve_printer_font_path(), PRINTER_FONT_SIZE)
    for line in format_bill(entry, shop_name):
        printer.image(_render_rule() if line == _RULE_TOKEN else _render_line(line, font))
    printer.cut()
