"""Installer proposal step (Python-first, submodule-driven).

Core design goals:
- Pluggable submodules addressed by name
- One broken submodule never breaks the whole proposal
- Deterministic re-proposal after every user change
- Blocking decisions derived from aggregated warning severities
- Centralized logging
"""

__all__ = []
