"""Terminal prompts for the import CLI built on prompt_toolkit.

The commit step of an import is a separate explicit action from parsing; the
CLI shows the parsed preview and asks here before writing anything.
"""

from __future__ import annotations

from prompt_toolkit import PromptSession
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.validation import ValidationError, Validator

from .normalizers import normalize_text

_YES = frozenset({"s", "sim", "y", "yes"})
_NO = frozenset({"n", "nao", "no", ""})


class YesNoValidator(Validator):
    def validate(self, document) -> None:
        if normalize_text(document.text) not in _YES | _NO:
            raise ValidationError(message="Answer y (sim) or n (não)")


def confirm_import(
    count: int,
    *,
    skipped: int = 0,
    session: PromptSession | None = None,
) -> bool:
    """Ask whether ``count`` parsed transactions should be imported.

    Returns True only for an explicit yes. Enter on an empty line, Esc and
    Ctrl+C all decline.
    """

    kb = KeyBindings()

    @kb.add("escape")
    def _(event) -> None:  # pragma: no cover - exercised indirectly
        event.app.exit(result="")

    @kb.add("c-c", eager=True)
    def _(event) -> None:  # pragma: no cover - exercised indirectly
        event.app.exit(result="")

    if session is None:
        sess: PromptSession = PromptSession(key_bindings=kb)
    else:
        sess = PromptSession(
            input=getattr(session, "input", None),
            output=getattr(session, "output", None),
            key_bindings=kb,
        )

    note = f" ({skipped} rows skipped)" if skipped else ""
    answer = sess.prompt(
        f"Import {count} transactions{note}? [y/N] ",
        validator=YesNoValidator(),
        validate_while_typing=False,
        key_bindings=kb,
    )
    return normalize_text(answer) in _YES


__all__ = ["YesNoValidator", "confirm_import"]
