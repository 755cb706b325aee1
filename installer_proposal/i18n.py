from __future__ import annotations

import gettext

TEXTDOMAIN = "installation"


def _(message: str) -> str:
    # Resolved on every call so a language switch retranslates the dialog.
    return gettext.dgettext(TEXTDOMAIN, message)


def dgettext(domain: str, message: str) -> str:
    return gettext.dgettext(domain, message)
