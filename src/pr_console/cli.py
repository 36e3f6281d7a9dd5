"""Click CLI for pr-console.

Commands:
    score    -- Score a contributor snapshot read from JSON.
    dossier  -- Fetch and score a pull-request author's dossier.
    branches -- List a repository's branches.
    readme   -- Print a repository's rendered README (cached).
    pr       -- Pull-request actions (show, merge, close, review, ...).
"""

from __future__ import annotations

import datetime
import json
import logging
import os
import sqlite3

import click
import requests
from dotenv import load_dotenv

from pr_console import DEFAULT_DB_PATH

logger = logging.getLogger("pr_console.cli")


def _resolve_db_path(ctx_db: str | None) -> str:
    """Return the cache database path from --db flag, env var, or default."""
    if ctx_db:
        return ctx_db
    env_path = os.environ.get("PR_CONSOLE_DB")
    if env_path:
        return env_path
    return DEFAULT_DB_PATH


def _ensure_db_dir(db_path: str) -> None:
    """Create parent directory for the database file if it does not exist."""
    if db_path == ":memory:":
        return
    parent = os.path.dirname(db_path)
    if parent:
        os.makedirs(parent, exist_ok=True)


def _open_cache(ctx: click.Context) -> sqlite3.Connection:
    """Open and initialise the cache database; closed when the command ends."""
    from pr_console.cache.manager import get_connection, init_db

    db_path = ctx.obj["db_path"]
    _ensure_db_dir(db_path)
    conn = get_connection(db_path)
    init_db(conn)
    ctx.call_on_close(conn.close)
    return conn


def _parse_now(value: str | None) -> datetime.datetime:
    if not value:
        return datetime.datetime.now(datetime.timezone.utc)
    from pr_console.scoring.account import parse_timestamp

    parsed = parse_timestamp(value)
    if parsed is None:
        raise click.BadParameter(f"not an ISO-8601 timestamp: {value}")
    return parsed


def _echo_result(result: dict, done: str) -> None:
    """Print an action result; exit 1 on ``{"error": ...}``."""
    if "error" in result:
        click.echo(click.style(f"Error: {result['error']}", fg="red"))
        raise SystemExit(1)
    click.echo(click.style(done, fg="green"))
    for key, value in result.items():
        if key != "success":
            click.echo(f"  {key}: {value}")


@click.group()
@click.option(
    "--db",
    default=None,
    envvar="PR_CONSOLE_DB",
    help="Path to the SQLite cache database.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, db: str | None, verbose: bool) -> None:
    """pr-console: pull-request actions and contributor dossiers."""
    load_dotenv()
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["db_path"] = _resolve_db_path(db)


# ----------------------------------------------------------------------
# Contributor scoring
# ----------------------------------------------------------------------

@main.command()
@click.argument("snapshot", type=click.File("r", encoding="utf-8"))
@click.option(
    "--now",
    default=None,
    help="Reference instant (ISO-8601) for account age; defaults to now.",
)
def score(snapshot, now: str | None) -> None:
    """Score the contributor snapshot in SNAPSHOT (JSON file, or - for stdin)."""
    from pr_console.scoring import ContributorSnapshot, compute_contributor_score

    try:
        data = json.load(snapshot)
    except json.JSONDecodeError as exc:
        click.echo(click.style(f"Invalid JSON: {exc}", fg="red"))
        raise SystemExit(1)
    if not isinstance(data, dict):
        click.echo(click.style("Snapshot must be a JSON object.", fg="red"))
        raise SystemExit(1)

    result = compute_contributor_score(
        ContributorSnapshot.from_dict(data), _parse_now(now)
    )
    click.echo(json.dumps(result.as_dict(), indent=2))


@main.command()
@click.argument("owner")
@click.argument("repo")
@click.argument("login")
@click.option(
    "--html",
    "html_path",
    default=None,
    type=click.Path(dir_okay=False, writable=True),
    help="Also write the dossier card as HTML to this file.",
)
@click.pass_context
def dossier(ctx: click.Context, owner: str, repo: str, login: str,
            html_path: str | None) -> None:
    """Fetch and score LOGIN's dossier for OWNER/REPO."""
    from pr_console.github.auth import get_client
    from pr_console.github.dossier import fetch_author_dossier

    client = get_client()
    if client is None:
        click.echo(click.style("Error: GITHUB_TOKEN is not set.", fg="red"))
        raise SystemExit(1)

    conn = _open_cache(ctx)
    result = fetch_author_dossier(client, owner, repo, login, conn=conn)
    if result is None:
        click.echo(
            click.style(f"Could not load a dossier for {login}.", fg="red")
        )
        raise SystemExit(1)

    click.echo(json.dumps(result, indent=2))

    if html_path:
        from pr_console.reporting.composer import render_dossier_card

        with open(html_path, "w", encoding="utf-8") as f:
            f.write(render_dossier_card(result))
        click.echo(click.style(f"Dossier card written to {html_path}", fg="green"))


# ----------------------------------------------------------------------
# Repository reads
# ----------------------------------------------------------------------

@main.command()
@click.argument("owner")
@click.argument("repo")
@click.pass_context
def branches(ctx: click.Context, owner: str, repo: str) -> None:
    """List the branches of OWNER/REPO."""
    from pr_console.actions.pulls import PullRequestActions
    from pr_console.github.auth import get_client

    actions = PullRequestActions(get_client(), _open_cache(ctx))
    for name in actions.fetch_branch_names(owner, repo):
        click.echo(name)


@main.command()
@click.argument("owner")
@click.argument("repo")
@click.option("--refresh", is_flag=True, help="Ignore and replace the cached copy.")
@click.pass_context
def readme(ctx: click.Context, owner: str, repo: str, refresh: bool) -> None:
    """Print the rendered README of OWNER/REPO (cached for an hour)."""
    from pr_console.cache.manager import (
        delete_cached_readme_html,
        get_cached_readme_html,
        set_cached_readme_html,
    )
    from pr_console.github.auth import get_client
    from pr_console.github.client import GitHubError
    from pr_console.github.utils import get_error_message

    conn = _open_cache(ctx)
    if refresh:
        delete_cached_readme_html(conn, owner, repo)

    html = get_cached_readme_html(conn, owner, repo)
    if html is None:
        client = get_client()
        if client is None:
            click.echo(click.style("Error: GITHUB_TOKEN is not set.", fg="red"))
            raise SystemExit(1)
        try:
            html = client.get_readme_html(owner, repo)
        except (GitHubError, requests.RequestException) as exc:
            message = get_error_message(exc) or "Could not load the README."
            click.echo(click.style(f"Error: {message}", fg="red"))
            raise SystemExit(1)
        set_cached_readme_html(conn, owner, repo, html)
    click.echo(html)


# ----------------------------------------------------------------------
# Pull-request actions
# ----------------------------------------------------------------------

@main.group()
def pr() -> None:
    """Act on a pull request: OWNER REPO NUMBER then command arguments."""


def _pr_actions(ctx: click.Context):
    """Build the action executor for the current command."""
    from pr_console.actions.pulls import PullRequestActions
    from pr_console.github.auth import get_client

    return PullRequestActions(get_client(), _open_cache(ctx))


def _pr_arguments(func):
    """Add the OWNER REPO NUMBER arguments shared by every ``pr`` command."""
    func = click.argument("number", type=int)(func)
    func = click.argument("repo")(func)
    func = click.argument("owner")(func)
    return func


@pr.command()
@_pr_arguments
@click.pass_context
def show(ctx: click.Context, owner: str, repo: str, number: int) -> None:
    """Show a pull request."""
    pull = _pr_actions(ctx).fetch_pull_request(owner, repo, number)
    if pull is None:
        click.echo(click.style("Pull request not available.", fg="red"))
        raise SystemExit(1)
    click.echo(f"#{pull.get('number', number)} {pull.get('title', '')}")
    click.echo(f"  state: {pull.get('state')}")
    click.echo(f"  author: {(pull.get('user') or {}).get('login')}")
    click.echo(
        f"  {(pull.get('head') or {}).get('ref')} -> "
        f"{(pull.get('base') or {}).get('ref')}"
    )


@pr.command()
@_pr_arguments
@click.option(
    "--method",
    default="merge",
    show_default=True,
    type=click.Choice(["merge", "squash", "rebase"]),
    help="Merge strategy.",
)
@click.option("--title", default=None, help="Commit title for the merge.")
@click.option("--message", default=None, help="Commit message for the merge.")
@click.pass_context
def merge(ctx: click.Context, owner: str, repo: str, number: int,
          method: str, title: str | None, message: str | None) -> None:
    """Merge a pull request."""
    result = _pr_actions(ctx).merge(owner, repo, number, method, title, message)
    _echo_result(result, f"Merged {owner}/{repo}#{number}.")


@pr.command()
@_pr_arguments
@click.pass_context
def close(ctx: click.Context, owner: str, repo: str, number: int) -> None:
    """Close a pull request."""
    result = _pr_actions(ctx).close(owner, repo, number)
    _echo_result(result, f"Closed {owner}/{repo}#{number}.")


@pr.command()
@_pr_arguments
@click.pass_context
def reopen(ctx: click.Context, owner: str, repo: str, number: int) -> None:
    """Reopen a pull request."""
    result = _pr_actions(ctx).reopen(owner, repo, number)
    _echo_result(result, f"Reopened {owner}/{repo}#{number}.")


@pr.command()
@_pr_arguments
@click.argument("title")
@click.pass_context
def rename(ctx: click.Context, owner: str, repo: str, number: int,
           title: str) -> None:
    """Change a pull request's title."""
    result = _pr_actions(ctx).rename(owner, repo, number, title)
    _echo_result(result, f"Renamed {owner}/{repo}#{number}.")


@pr.command("set-base")
@_pr_arguments
@click.argument("base")
@click.pass_context
def set_base(ctx: click.Context, owner: str, repo: str, number: int,
             base: str) -> None:
    """Change a pull request's base branch."""
    result = _pr_actions(ctx).update_base_branch(owner, repo, number, base)
    _echo_result(result, f"Base of {owner}/{repo}#{number} set to {base}.")


@pr.command()
@_pr_arguments
@click.option(
    "--event",
    default="COMMENT",
    show_default=True,
    type=click.Choice(["APPROVE", "REQUEST_CHANGES", "COMMENT"]),
    help="Review verdict.",
)
@click.option("--body", default=None, help="Review body.")
@click.pass_context
def review(ctx: click.Context, owner: str, repo: str, number: int,
           event: str, body: str | None) -> None:
    """Submit a review."""
    result = _pr_actions(ctx).submit_review(owner, repo, number, event, body)
    _echo_result(result, f"Review submitted on {owner}/{repo}#{number}.")


@pr.command()
@_pr_arguments
@click.argument("body")
@click.pass_context
def comment(ctx: click.Context, owner: str, repo: str, number: int,
            body: str) -> None:
    """Add a comment to the conversation."""
    result = _pr_actions(ctx).add_comment(owner, repo, number, body)
    _echo_result(result, f"Commented on {owner}/{repo}#{number}.")


@pr.command()
@_pr_arguments
@click.argument("thread_id")
@click.pass_context
def resolve(ctx: click.Context, owner: str, repo: str, number: int,
            thread_id: str) -> None:
    """Resolve a review thread."""
    result = _pr_actions(ctx).resolve_thread(thread_id, owner, repo, number)
    _echo_result(result, f"Resolved thread {thread_id}.")


@pr.command()
@_pr_arguments
@click.argument("thread_id")
@click.pass_context
def unresolve(ctx: click.Context, owner: str, repo: str, number: int,
              thread_id: str) -> None:
    """Unresolve a review thread."""
    result = _pr_actions(ctx).unresolve_thread(thread_id, owner, repo, number)
    _echo_result(result, f"Unresolved thread {thread_id}.")
