"""Minimal rich-text markup used by the proposal document."""

from __future__ import annotations

from typing import Iterable


def heading(text: str) -> str:
    return f"<h3>{text}</h3>"


def link(text: str, href: str) -> str:
    return f'<a href="{href}">{text}</a>'


def para(text: str) -> str:
    return f"<p>{text}</p>"


def bold(text: str) -> str:
    return f"<b>{text}</b>"


def colorize(text: str, color: str) -> str:
    return f'<font color="{color}">{text}</font>'


def newlines(count: int) -> str:
    return "<br>" * count


def bullet_list(items: Iterable[str]) -> str:
    return "<ul>" + "".join(f"<li>{item}</li>" for item in items) + "</ul>"
