"""
Main module for orchestrating the pull of a Notion subtree to local files.

A pull is a depth-first walk over pages and databases. Every resource is a
``TraversalTask``; ``NotionPuller.process`` is the single place that checks the
visited set, so each reference is fetched at most once per run, and every task
it spawns carries a strictly smaller depth budget.
"""

import argparse
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Optional, Set, Tuple

from rich.console import Console
from rich.markup import escape

from .config import DEFAULT_DEPTH, ON_ERROR, OUTPUT_DIR, ensure_directories, load_token, parse_depth, parse_on_error
from .constants import DATABASE_INDEX_FILENAME, ON_ERROR_ABORT, ON_ERROR_SKIP
from .csv_converter import convert_entries_to_csv
from .exceptions import (
    ConfigurationError,
    InvalidReferenceError,
    NoDataSourceError,
    NotionPullError,
    RemoteFetchError,
    ResourceNotFoundError,
)
from .markdown_converter import convert_blocks_to_markdown
from .models import Block, ResourceKind, count_blocks
from .notion_client import NotionDownloader
from .references import normalize_reference
from .security import sanitize_filename
from .writer import write_output_file

console = Console()

# Errors that end one resource's branch; under the "skip" policy the run goes on
BRANCH_ERRORS = (ResourceNotFoundError, NoDataSourceError, RemoteFetchError)


@dataclass
class TraversalTask:
    """One resource to pull, where to put it, and how much depth budget remains."""

    kind: ResourceKind
    reference: str
    output_dir: Path
    depth: int
    is_root: bool = False


@dataclass
class PullReport:
    written: List[Path] = field(default_factory=list)
    visited: Set[str] = field(default_factory=set)
    skipped: List[Tuple[str, Exception]] = field(default_factory=list)
    page_count: int = 0
    database_count: int = 0


class NotionPuller:
    """Pulls pages and databases through a downloader and writes them out."""

    def __init__(self, downloader, on_error=ON_ERROR_ABORT, writer=write_output_file):
        self.downloader = downloader
        self.on_error = on_error
        self.writer = writer
        self._handlers = {
            ResourceKind.PAGE: self._pull_page,
            ResourceKind.DATABASE: self._pull_database,
        }

    def run(self, task: TraversalTask, visited: Optional[Set[str]] = None) -> PullReport:
        """Pull a root task and everything reachable from it within its depth."""
        report = PullReport(visited=visited if visited is not None else set())
        self.process(task, report)
        return report

    def process(self, task: TraversalTask, report: PullReport) -> None:
        if task.reference in report.visited:
            console.print(f"[dim]Skipping already-visited {task.kind.value} {escape(task.reference)}[/dim]")
            return
        report.visited.add(task.reference)

        handler = self._handlers[task.kind]
        try:
            for child in handler(task, report):
                self.process(child, report)
        except BRANCH_ERRORS as e:
            if task.is_root or self.on_error != ON_ERROR_SKIP:
                raise
            console.print(f"[bold red]Skipping {task.kind.value} {escape(task.reference)}:[/bold red] {escape(str(e))}")
            report.skipped.append((task.reference, e))

    def _write(self, output_dir, relative_path, content, report):
        path = self.writer(output_dir, relative_path, content)
        report.written.append(path)
        return path

    def _pull_page(self, task: TraversalTask, report: PullReport) -> Iterator[TraversalTask]:
        console.print(f"Fetching page {task.reference}...")
        page = self.downloader.download_page(task.reference)
        title = page.title
        console.print(f"  Page: [bold blue]{escape(title)}[/bold blue]")

        blocks = self.downloader.download_block_tree(task.reference)
        console.print(f"  Fetched {count_blocks(blocks)} blocks")

        markdown = convert_blocks_to_markdown(blocks, page)
        path = self._write(task.output_dir, f"{sanitize_filename(title)}.md", markdown, report)
        report.page_count += 1
        console.print(f"  Wrote {escape(str(path))}")

        if task.depth > 0:
            page_dir = task.output_dir / sanitize_filename(title)
            yield from child_resource_tasks(blocks, page_dir, task.depth - 1)

    def _pull_database(self, task: TraversalTask, report: PullReport) -> Iterator[TraversalTask]:
        console.print(f"Fetching database {task.reference}...")
        database = self.downloader.download_database(task.reference)
        database_dir = sanitize_filename(database.title)
        console.print(
            f"  Database: [bold green]{escape(database.title)}[/bold green] ({len(database.entries)} entries)"
        )

        csv_content = convert_entries_to_csv(database.entries, database.schema)
        path = self._write(
            task.output_dir, f"{database_dir}/{DATABASE_INDEX_FILENAME}", csv_content, report
        )
        report.database_count += 1
        console.print(f"  Wrote {escape(str(path))}")

        markdown_count = 0
        for entry in database.entries:
            blocks = self.downloader.download_block_tree(entry.id)
            if not blocks:
                continue

            entry_name = sanitize_filename(entry.title)
            markdown = convert_blocks_to_markdown(blocks, entry)
            self._write(task.output_dir, f"{database_dir}/{entry_name}.md", markdown, report)
            markdown_count += 1

            if task.depth > 0:
                entry_dir = task.output_dir / database_dir / entry_name
                yield from child_resource_tasks(blocks, entry_dir, task.depth - 1)

        if markdown_count:
            console.print(f"  Wrote {markdown_count} markdown files for entries with content")

        if task.depth > 0:
            for edge in database.relation_edges():
                if edge.target_database_id in report.visited:
                    console.print(
                        f'[dim]  Skipping related database "{escape(edge.property_name)}" (already visited)[/dim]'
                    )
                    continue
                console.print(f'  Following relation "{escape(edge.property_name)}" → {edge.target_database_id}')
                yield TraversalTask(
                    ResourceKind.DATABASE, edge.target_database_id, task.output_dir, task.depth - 1
                )


def child_resource_tasks(blocks: List[Block], output_dir: Path, depth: int) -> Iterator[TraversalTask]:
    """Tasks for every child page/database in a block tree, at any nesting level."""
    for block in blocks:
        if block.type == "child_page":
            yield TraversalTask(ResourceKind.PAGE, block.id, output_dir, depth)
        elif block.type == "child_database":
            yield TraversalTask(ResourceKind.DATABASE, block.id, output_dir, depth)

        # Child resources can sit inside toggles, columns and synced blocks
        if block.children:
            yield from child_resource_tasks(block.children, output_dir, depth)


def pull(downloader, reference, output_dir, depth, kind=None, on_error=ON_ERROR_ABORT, visited=None):
    """
    Pull a page or database and everything it references, up to ``depth`` hops.

    Args:
        downloader: gateway used for every fetch
        reference: ID or Notion URL of the root resource
        output_dir: directory the root resource is written into
        depth: remaining depth budget; 0 pulls only the root resource
        kind: force "page" or "database" instead of probing the API
        on_error: "abort" or "skip" for failures below the root
        visited: visited set to share; a fresh one is created when omitted

    Returns:
        PullReport: files written and references visited or skipped
    """
    depth = parse_depth(depth)
    on_error = parse_on_error(on_error)
    reference = normalize_reference(reference)

    if kind is None:
        kind = downloader.resolve_kind(reference)
    kind = ResourceKind(kind)
    console.print(f"Detected resource type: [bold]{kind.value}[/bold]")

    puller = NotionPuller(downloader, on_error=on_error)
    task = TraversalTask(kind, reference, Path(output_dir), depth, is_root=True)
    return puller.run(task, visited)


def _depth_argument(value):
    try:
        return parse_depth(value)
    except ConfigurationError as e:
        raise argparse.ArgumentTypeError(str(e))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="notion-pull",
        description="Pull Notion pages and databases to local markdown and CSV files",
    )
    parser.add_argument("reference", help="Notion page/database ID or URL")
    parser.add_argument("-t", "--token", help="Notion integration token (or set NOTION_TOKEN env var)")
    parser.add_argument("-o", "--output", default=OUTPUT_DIR, help="Output directory")
    parser.add_argument(
        "--type",
        choices=[kind.value for kind in ResourceKind],
        help="Force resource type (auto-detected by default)",
    )
    parser.add_argument(
        "-d", "--depth",
        type=_depth_argument,
        default=None,
        help=f"Max depth for following child resources and relations (default {DEFAULT_DEPTH})",
    )
    parser.add_argument(
        "--on-error",
        choices=[ON_ERROR_ABORT, ON_ERROR_SKIP],
        default=None,
        help="Abort the run or skip the failing resource when a fetch fails",
    )
    return parser


def main(argv=None):
    """Main function for pulling Notion content."""
    args = build_parser().parse_args(argv)

    try:
        depth = args.depth if args.depth is not None else parse_depth(DEFAULT_DEPTH)
        on_error = parse_on_error(args.on_error or ON_ERROR)
        token = load_token(args.token)
        ensure_directories(args.output)

        downloader = NotionDownloader(token)
        report = pull(
            downloader,
            args.reference,
            args.output,
            depth,
            kind=args.type,
            on_error=on_error,
        )

        console.print(
            f"[yellow]Pulled {report.page_count} pages and {report.database_count} databases "
            f"({len(report.written)} files)[/yellow]"
        )
        if report.skipped:
            console.print(f"[yellow]Skipped {len(report.skipped)} resources after errors[/yellow]")
        console.print(f"[bold green]Done! Output written to {args.output}/[/bold green]")

    except ConfigurationError as e:
        console.print(f"[bold red]Configuration Error:[/bold red] {escape(str(e))}")
        sys.exit(1)
    except InvalidReferenceError as e:
        console.print(f"[bold red]Invalid Reference:[/bold red] {escape(str(e))}")
        sys.exit(1)
    except NotionPullError as e:
        console.print(f"[bold red]Notion API Error:[/bold red] {escape(str(e))}")
        sys.exit(1)
    except Exception as e:
        console.print(f"[bold red]Unexpected Error:[/bold red] {escape(str(e))}")
        sys.exit(1)


if __name__ == "__main__":
    main()
