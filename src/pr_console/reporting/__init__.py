"""Reporting sub-package for the pr-console project.

Usage::

    from pr_console.reporting import render_dossier_card

    html = render_dossier_card(dossier)
"""

from pr_console.reporting.composer import render_dossier_card

__all__ = ["render_dossier_card"]
