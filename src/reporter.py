from __future__ import annotations

from typing import Iterable, List, Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from src.challenges.abstract import LEVELS, Challenge, ChallengeResult
from src.domain.records import MetricsReport, UserMetrics


def _console(console: Optional[Console]) -> Console:
    return console or Console()


def print_challenges(challenges: Iterable[Challenge], console: Optional[Console] = None) -> None:
    """Render the challenge catalogue."""
    console = _console(console)
    table = Table(title="Blog Query Challenges", box=box.ROUNDED)
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Level", style="blue")
    table.add_column("Challenge")
    table.add_column("Default params", style="dim")

    for challenge in challenges:
        params = ", ".join(f"{k}={v!r}" for k, v in challenge.params.items()) or "-"
        table.add_row(challenge.key, LEVELS[challenge.level], challenge.title, params)

    console.print(table)


def print_results(results: List[ChallengeResult], console: Optional[Console] = None) -> None:
    """
    Render profiled challenge runs as a rich table.

    Failed runs are shown in red with their error in place of the preview.
    """
    console = _console(console)

    if not results:
        console.print("[yellow]No results to display.[/yellow]")
        return

    failed = sum(1 for res in results if res.get("error"))
    table = Table(
        title="Blog Query Challenge Results",
        box=box.ROUNDED,
        caption=f"{len(results) - failed} passed, {failed} failed",
    )

    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Challenge")
    table.add_column("Rows", justify="right", style="magenta")
    table.add_column("Queries", justify="right", style="blue")
    table.add_column("Duration (ms)", justify="right", style="green")
    table.add_column("Peak Memory (MB)", justify="right", style="yellow")
    table.add_column("Result", overflow="fold")

    for res in results:
        queries = res.get("query_count")
        mem_bytes = res.get("peak_rss_bytes") or 0
        error = res.get("error")
        table.add_row(
            res.get("key", "?"),
            res.get("title", ""),
            f"{res.get('rows', 0):,}",
            "N/A" if queries is None else str(queries),
            f"{res.get('duration_seconds', 0.0) * 1000:.1f}",
            f"{mem_bytes / (1024 * 1024):.2f}",
            f"[red]{escape(error)}[/red]" if error else escape(res.get("preview", "")),
        )

    console.print(table)


def print_user_metrics(
    metrics: Iterable[UserMetrics], console: Optional[Console] = None, title: str = "User Metrics"
) -> None:
    console = _console(console)
    table = Table(title=title, box=box.ROUNDED)
    table.add_column("User", style="cyan")
    table.add_column("Posts", justify="right")
    table.add_column("Comments made", justify="right")
    table.add_column("Comments received", justify="right")
    table.add_column("Avg / post", justify="right")
    table.add_column("Activity", justify="right", style="green")
    table.add_column("Engagement", justify="right", style="bold green")
    table.add_column("Role", style="magenta")

    for entry in metrics:
        table.add_row(
            entry.name,
            str(entry.posts_count),
            str(entry.comments_made),
            str(entry.comments_received),
            f"{entry.avg_comments_per_post:.2f}",
            str(entry.activity_score),
            str(entry.engagement_score),
            entry.role or "-",
        )

    console.print(table)


def print_report(report: MetricsReport, console: Optional[Console] = None) -> None:
    """Users, posts, and tag usage, followed by the audience split."""
    console = _console(console)
    print_user_metrics(report.users, console=console)

    posts = Table(title="Post Metrics", box=box.ROUNDED)
    posts.add_column("Post", style="cyan")
    posts.add_column("Comments", justify="right")
    posts.add_column("Tags", justify="right")
    posts.add_column("Comment/tag ratio", justify="right", style="green")
    for post in report.posts:
        posts.add_row(
            post.title,
            str(post.comment_count),
            str(post.tag_count),
            f"{post.comment_tag_ratio:.2f}",
        )
    console.print(posts)

    tags = Table(title="Tag Usage", box=box.ROUNDED)
    tags.add_column("Tag", style="cyan")
    tags.add_column("Posts", justify="right")
    tags.add_column("Shared", justify="center")
    for usage in report.tags:
        tags.add_row(usage.name, str(usage.usage_count), "yes" if usage.shared else "")
    console.print(tags)

    creators = ", ".join(m.name for m in report.audience.creators) or "-"
    commenters = ", ".join(m.name for m in report.audience.commenters) or "-"
    console.print(f"[bold]Creators:[/bold] {creators}")
    console.print(f"[bold]Commenters:[/bold] {commenters}")
    if report.most_active is not None:
        console.print(
            f"[bold]Most active:[/bold] {report.most_active.name} "
            f"(activity {report.most_active.activity_score})"
        )
