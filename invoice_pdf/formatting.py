"""Formatting and text layout helpers."""

from __future__ import annotations

from typing import Any, List, Protocol


class TextWidthProvider(Protocol):
    def text_width(self, text: str, size: int) -> float:
        ...


def fmt_number(value: Any) -> str:
    """Render a number the way it was entered: ``100`` not ``100.0``."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return str(value)
    if number.is_integer():
        return str(int(number))
    return repr(number)


def fmt_percent(value: Any) -> str:
    return f"{fmt_number(value)}%"


def fmt_total(amount: float) -> str:
    return f"{amount:.2f}"


def wrap_text(
    fonts_obj: TextWidthProvider,
    text: str,
    max_width: float,
    font_size: int,
) -> List[str]:
    def line_width(value: str) -> float:
        return fonts_obj.text_width(value, font_size)

    def wrap_paragraph(paragraph: str) -> List[str]:
        words = paragraph.split()
        if not words:
            return [paragraph]

        lines: List[str] = []
        current = ""
        for word in words:
            candidate = word if not current else f"{current} {word}"
            if line_width(candidate) <= max_width:
                current = candidate
                continue

            if current:
                lines.append(current)
                current = word
                if line_width(word) <= max_width:
                    continue
                current = ""

            # Break a single over-long word on character boundaries.
            chunk = ""
            for char in word:
                candidate_chunk = chunk + char
                if chunk and line_width(candidate_chunk) > max_width:
                    lines.append(chunk)
                    chunk = char
                else:
                    chunk = candidate_chunk
            current = chunk

        if current:
            lines.append(current)
        return lines

    result: List[str] = []
    for paragraph in text.split("\n"):
        result.extend(wrap_paragraph(paragraph))
    return result if result else [text]
