# wizard/render.py
from __future__ import annotations

from typing import Mapping


def placeholder(name: str) -> str:
    return "{" + name + "}"


def render_template(template: str, values: Mapping[str, str]) -> str:
    """Substitute ``{name}`` tokens in ``template`` with the given values.

    Every occurrence of a token is replaced. Tokens without a value are left
    verbatim. Values are inserted as-is, without escaping.
    """
    out = template or ""
    for name, value in values.items():
        out = out.replace(placeholder(name), value)
    return out
