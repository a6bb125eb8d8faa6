"""Tiny terminal UI helpers (prompt_toolkit-based).

Kept apart from the ledger/aggregation logic so they're easy to test in
isolation with a pipe input.
"""

from __future__ import annotations

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.styles import Style
from prompt_toolkit.validation import ValidationError, Validator

from .map_lines import LineKind, MapLine, selectable_lines


def resolve_map_line(text: str, lines: list[MapLine]) -> int | None:
    """Map user input to a line id among ``lines``.

    Accepts the bare number (``"7"``/``"07"``), a full label, or an
    unambiguous case-insensitive fragment of a label. Returns ``None`` when
    nothing (or more than one line) matches.
    """

    s = " ".join(text.strip().split())
    if not s:
        return None
    allowed = {line.id: line for line in lines}

    head = s.split(".", 1)[0].strip()
    if head.isdigit():
        n = int(head)
        return n if n in allowed else None

    lower = s.lower()
    for line in lines:
        if line.label.lower() == lower:
            return line.id
    hits = [line.id for line in lines if lower in line.label.lower()]
    if len(hits) == 1:
        return hits[0]
    return None


def select_map_line(
    kind: LineKind | str,
    *,
    default: int | None = None,
    message: str | None = None,
    session: PromptSession | None = None,
) -> int:
    """Prompt for the map line an entry of ``kind`` is booked against.

    Only summable lines of that kind are offered; derived lines and the
    opening balance never appear. The default line's label is pre-filled, so
    Enter accepts it. Returns the chosen line id.
    """

    lines = selectable_lines(kind)
    k = LineKind(kind)
    if default is None:
        default = lines[0].id
    default_line = next((line for line in lines if line.id == default), None)
    if default_line is None:
        raise ValueError(f"line {default} is not selectable for {k.value} entries")

    words = [line.label for line in lines]
    completer = WordCompleter(words, ignore_case=True, match_middle=True, sentence=True)

    class _LineValidator(Validator):
        def validate(self, document) -> None:
            if resolve_map_line(document.text, lines) is None:
                raise ValidationError(
                    message="Type a line number or pick a line from the list (Tab)."
                )

    style = Style.from_dict({"completion-menu.completion.current": "bg:#005fa0 #ffffff"})
    side = "Receitas" if k is LineKind.INCOME else "Despesas"

    if session is None:
        sess: PromptSession = PromptSession()
    else:
        sess = PromptSession(
            input=getattr(session, "input", None),
            output=getattr(session, "output", None),
        )

    result = sess.prompt(
        message or f"Linha do Mapa ({side}): ",
        default=default_line.label,
        completer=completer,
        complete_while_typing=True,
        validator=_LineValidator(),
        validate_while_typing=False,
        style=style,
    )
    line_id = resolve_map_line(result, lines)
    # The validator guarantees a match; keep the check for direct callers
    # that bypass validation with a custom session.
    if line_id is None:
        raise ValueError(f"not a selectable map line: {result!r}")
    return line_id


__all__ = ["resolve_map_line", "select_map_line"]
