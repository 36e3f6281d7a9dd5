"""Render a contributor dossier as an HTML card.

Uses the Jinja2 template at ``templates/dossier.html``.
"""

import logging
import pathlib

from jinja2 import Environment, FileSystemLoader

logger = logging.getLogger(__name__)

_TEMPLATE_DIR = pathlib.Path(__file__).parent / "templates"

TIER_LABELS = {
    "core": "Core contributor",
    "established": "Established contributor",
    "emerging": "Emerging contributor",
    "newcomer": "Newcomer",
}


def _build_badges(dossier: dict) -> list[str]:
    """Return the relationship badges shown next to the author's name."""
    author = dossier.get("author") or {}
    badges: list[str] = []
    if author.get("type") == "Bot":
        badges.append("Bot")
    if dossier.get("is_owner"):
        badges.append("Owner")
    if dossier.get("is_org_member"):
        badges.append("Member")
    if dossier.get("contribution_count", 0) > 0:
        badges.append("Contributor")
    else:
        badges.append("First-time contributor")
    return badges


def render_dossier_card(dossier: dict) -> str:
    """Render *dossier* (as returned by ``fetch_author_dossier``) to HTML.

    Args:
        dossier: The dossier dict.

    Returns:
        The rendered HTML fragment.
    """
    score = dossier.get("score") or {}
    env = Environment(
        loader=FileSystemLoader(str(_TEMPLATE_DIR)),
        autoescape=True,
    )
    template = env.get_template("dossier.html")

    html = template.render(
        author=dossier.get("author") or {},
        orgs=dossier.get("orgs") or [],
        top_repos=dossier.get("top_repos") or [],
        activity=dossier.get("repo_activity") or {},
        score=score,
        tier_label=TIER_LABELS.get(score.get("tier"), "Unranked"),
        badges=_build_badges(dossier),
    )
    logger.debug(
        "Rendered dossier card for %s",
        (dossier.get("author") or {}).get("login"),
    )
    return html
