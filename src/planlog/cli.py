"""CLI for planlog - journals, pages and blocks with tags, links and views."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from .config import load_config
from .core.errors import NotFound, PlanlogError
from .core.model import Block, CorpusEntry, DocKind, Document
from .core.query import describe, parse_query_tokens
from .core.utils import shorten
from .runtime import build_runtime

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _entry_json(e: CorpusEntry) -> dict[str, Any]:
    out = e.block.to_dict()
    out.update(scopeType=e.scope_kind.value, scopeId=e.scope_id, scopeTitle=e.scope_title)
    return out


def _entry_line(e: CorpusEntry, width: int, status: bool = True) -> str:
    sub = f"{e.block.status.value} · " if status else "from "
    return (
        f"{e.block.id[:8]}  {shorten(e.block.text, width)}\n"
        f"          {sub}{e.scope_kind.value} · {e.scope_title}"
    )


def _print_entries(
    args: argparse.Namespace, rt: Any, entries: list[CorpusEntry], empty: str, status: bool = True
) -> None:
    if args.json:
        print(json.dumps([_entry_json(e) for e in entries], indent=2, ensure_ascii=False))
        return
    if not entries:
        if not args.quiet:
            print(empty)
        return
    for e in entries:
        print(_entry_line(e, rt.config.display.shorten, status))


def _resolve_block(rt: Any, ref: str) -> Block:
    """Full block id, or a unique prefix of one."""
    nb = rt.notebook
    matches = [e.block for e in nb.corpus() if e.block.id.startswith(ref)]
    exact = [b for b in matches if b.id == ref]
    if exact:
        return exact[0]
    if len(matches) == 1:
        return matches[0]
    if len(matches) > 1:
        raise PlanlogError(f"Block prefix {ref!r} is ambiguous ({len(matches)} matches)")
    raise NotFound("block", ref)


def _doc_json(doc: Document) -> dict[str, Any]:
    out = doc.to_dict()
    out["kind"] = doc.kind.value
    return out


def cmd_show(args: argparse.Namespace, rt: Any) -> int:
    """Print the current document, rendering query blocks inline."""
    nb = rt.notebook
    doc = nb.current_document()
    limit = rt.config.display.query_limit

    if args.json:
        print(json.dumps(_doc_json(doc), indent=2, ensure_ascii=False))
        return 0

    print(nb.header())
    print()
    for b in doc.blocks:
        print(f"[{b.status.value}] {b.id[:8]}  {b.text}")
        chips = [f"#{t}" for t in nb.tags_of(b)] + [f"[[{l}]]" for l in nb.links_of(b)]
        if chips:
            print("    " + " ".join(chips))
        spec = nb.query_block(b)
        if spec is None:
            continue
        print(f"    Query: {describe(spec)}")
        results = nb.query(spec, limit)
        if not results:
            print("      No results")
        for r in results:
            print(
                f"      {shorten(r.block.text, rt.config.display.shorten)}"
                f"  ({r.block.status.value} · {r.scope_kind.value} · {r.scope_title})"
            )
    return 0


def cmd_today(args: argparse.Namespace, rt: Any) -> int:
    """Open (creating if needed) today's journal."""
    doc = rt.notebook.open_today()
    if not args.quiet:
        print(doc.id)
    return 0


def cmd_journal(args: argparse.Namespace, rt: Any) -> int:
    """Create another journal for today."""
    doc = rt.notebook.new_journal()
    if not args.quiet:
        print(doc.id)
    return 0


def cmd_page(args: argparse.Namespace, rt: Any) -> int:
    """Open a page, creating it if needed."""
    doc = rt.notebook.new_page(args.name)
    if doc is None:
        print("Error: page name is empty", file=sys.stderr)
        return 1
    if not args.quiet:
        print(doc.id)
    return 0


def cmd_open(args: argparse.Namespace, rt: Any) -> int:
    """Make an existing document current."""
    doc = rt.notebook.navigate(DocKind(args.kind), args.id)
    if not args.quiet:
        print(doc.id)
    return 0


def cmd_ls(args: argparse.Namespace, rt: Any) -> int:
    """List journals and pages."""
    nb = rt.notebook
    journals = nb.store.list_journals()
    pages = nb.store.list_pages()
    if args.json:
        out = [
            {"kind": d.kind.value, "id": d.id, "title": d.title, "blocks": len(d.blocks)}
            for d in journals + pages
        ]
        print(json.dumps(out, indent=2, ensure_ascii=False))
        return 0
    current = (nb.ui.current_type, nb.ui.current_id)
    for label, docs in (("Journals", journals), ("Pages", pages)):
        if not args.quiet:
            print(f"{label}:")
        for d in docs:
            mark = "*" if (d.kind, d.id) == current else " "
            print(f" {mark} {d.title}\t{len(d.blocks)} blocks")
    return 0


def cmd_add(args: argparse.Namespace, rt: Any) -> int:
    """Add a block at the top of the current document."""
    block = rt.notebook.add_block(args.text)
    if not args.quiet:
        print(block.id)
    return 0


def cmd_add_query(args: argparse.Namespace, rt: Any) -> int:
    """Add a default query block to the current document."""
    block = rt.notebook.add_query_block()
    if not args.quiet:
        print(block.id)
    return 0


def cmd_edit(args: argparse.Namespace, rt: Any) -> int:
    """Replace a block's text."""
    block = _resolve_block(rt, args.block)
    rt.notebook.edit_block(block.id, args.text)
    return 0


def cmd_cycle(args: argparse.Namespace, rt: Any) -> int:
    """Advance a block's status TODO -> DOING -> DONE -> TODO."""
    block = _resolve_block(rt, args.block)
    updated = rt.notebook.cycle_block(block.id)
    if not args.quiet:
        print(updated.status.value)
    return 0


def cmd_rm(args: argparse.Namespace, rt: Any) -> int:
    """Delete a block."""
    block = _resolve_block(rt, args.block)
    rt.notebook.delete_block(block.id)
    return 0


def cmd_query(args: argparse.Namespace, rt: Any) -> int:
    """Run an ad-hoc query against the current document/corpus."""
    spec = parse_query_tokens(" ".join(args.tokens))
    limit = args.limit if args.limit is not None else rt.config.display.query_limit
    if not args.quiet and not args.json:
        print(f"Query: {describe(spec)}")
    _print_entries(args, rt, rt.notebook.query(spec, limit), "No results")
    return 0


def cmd_backlinks(args: argparse.Namespace, rt: Any) -> int:
    """Blocks elsewhere that mention the current document."""
    hits = rt.notebook.backlinks(rt.config.display.backlink_limit)
    _print_entries(args, rt, hits, "No backlinks yet.", status=False)
    return 0


def cmd_tags(args: argparse.Namespace, rt: Any) -> int:
    """Tag cloud, or the blocks carrying one tag."""
    nb = rt.notebook
    limit = rt.config.display.tag_limit
    if args.tag:
        hits = nb.tagged(args.tag, limit)
        if not args.quiet and not args.json:
            tag = args.tag[1:] if args.tag.startswith("#") else args.tag
            print(f"#{tag}  {len(nb.tagged(tag))} blocks")
        _print_entries(args, rt, hits, "No blocks with this tag.")
        return 0

    cloud = nb.tag_cloud(limit)
    if args.json:
        print(json.dumps([{"tag": t, "count": n} for t, n in cloud], indent=2, ensure_ascii=False))
    elif not cloud:
        if not args.quiet:
            print("No tags yet.")
    else:
        print(" ".join(f"#{t} ({n})" for t, n in cloud))
    return 0


def cmd_views_ls(args: argparse.Namespace, rt: Any) -> int:
    """List saved views with their top results."""
    nb = rt.notebook
    limit = rt.config.display.view_limit
    shown = nb.views[: rt.config.display.views_shown]
    if args.json:
        out = []
        for v in shown:
            d = v.to_dict()
            d["results"] = [_entry_json(e) for e in nb.view_results(v, limit)]
            out.append(d)
        print(json.dumps(out, indent=2, ensure_ascii=False))
        return 0
    if not nb.views:
        if not args.quiet:
            print("No saved views")
        return 0
    for v in shown:
        print(f"{v.id[:8]}  {v.name}  ({describe(v.query)})")
        results = nb.view_results(v, limit)
        if not results:
            print("      No results")
        for r in results:
            print(f"      {shorten(r.block.text, rt.config.display.shorten)}")
    return 0


def cmd_views_save(args: argparse.Namespace, rt: Any) -> int:
    """Save a query, or the query of an existing query block, as a named view."""
    if args.from_block:
        block = _resolve_block(rt, args.from_block)
        spec = rt.notebook.query_block(block)
        if spec is None:
            raise PlanlogError(f"Block {block.id[:8]} is not a query block")
    else:
        spec = parse_query_tokens(" ".join(args.tokens))
    view = rt.notebook.save_view(args.name, spec)
    if view is None:
        print("Error: view name is empty", file=sys.stderr)
        return 1
    if not args.quiet:
        print(view.id)
    return 0


def cmd_views_rm(args: argparse.Namespace, rt: Any) -> int:
    """Remove a saved view by id or unique id prefix."""
    nb = rt.notebook
    matches = [v for v in nb.views if v.id.startswith(args.id)]
    exact = [v for v in matches if v.id == args.id]
    if exact:
        matches = exact
    if len(matches) > 1:
        raise PlanlogError(f"View prefix {args.id!r} is ambiguous ({len(matches)} matches)")
    if not matches:
        raise NotFound("view", args.id)
    nb.remove_view(matches[0].id)
    return 0


def cmd_reset(args: argparse.Namespace, rt: Any) -> int:
    """Discard all data and start from the default notebook."""
    if not args.yes:
        print("Refusing to reset without --yes", file=sys.stderr)
        return 1
    rt.notebook.reset()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="planlog", description="planlog CLI"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config file (default: search cwd/planlog.toml, data dir/planlog.toml)",
    )
    parser.add_argument(
        "--data",
        type=Path,
        default=None,
        help="Path to snapshot file (overrides config)",
    )
    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Minimize output"
    )
    parser.add_argument(
        "--json", action="store_true", help="Machine-readable output"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Debug logging"
    )

    subparsers = parser.add_subparsers(dest="cmd", required=True)

    subparsers.add_parser("show", help="Print the current document")
    subparsers.add_parser("today", help="Open today's journal")
    subparsers.add_parser("journal", help="Create another journal for today")

    parser_page = subparsers.add_parser("page", help="Open or create a page")
    parser_page.add_argument("name", help="Page title")

    parser_open = subparsers.add_parser("open", help="Switch to a document")
    parser_open.add_argument("kind", choices=[k.value for k in DocKind])
    parser_open.add_argument("id", help="Journal date id or page title")

    subparsers.add_parser("ls", help="List journals and pages")

    parser_add = subparsers.add_parser("add", help="Add a block to the current document")
    parser_add.add_argument("text", nargs="?", default="", help="Block text")

    subparsers.add_parser("add-query", help="Add a query block to the current document")

    parser_edit = subparsers.add_parser("edit", help="Replace a block's text")
    parser_edit.add_argument("block", help="Block id or unique prefix")
    parser_edit.add_argument("text", help="New text")

    parser_cycle = subparsers.add_parser("cycle", help="Cycle a block's status")
    parser_cycle.add_argument("block", help="Block id or unique prefix")

    parser_rm = subparsers.add_parser("rm", help="Delete a block")
    parser_rm.add_argument("block", help="Block id or unique prefix")

    parser_query = subparsers.add_parser(
        "query", help="Run a query, e.g. status:TODO tag:work scope:current"
    )
    parser_query.add_argument("tokens", nargs="*", help="key:value tokens")
    parser_query.add_argument(
        "--limit", type=int, default=None, help="Maximum results (default: display.query_limit)"
    )

    subparsers.add_parser("backlinks", help="Show blocks that mention the current document")

    parser_tags = subparsers.add_parser("tags", help="Tag cloud, or blocks with a tag")
    parser_tags.add_argument("tag", nargs="?", default=None, help="Tag to list")

    parser_views = subparsers.add_parser("views", help="Saved views")
    views_sub = parser_views.add_subparsers(dest="views_cmd", required=True)
    views_sub.add_parser("ls", help="List saved views")
    parser_vsave = views_sub.add_parser("save", help="Save a query as a view")
    parser_vsave.add_argument("tokens", nargs="*", help="key:value tokens")
    parser_vsave.add_argument("--name", default=None, help="View name (default: query summary)")
    parser_vsave.add_argument(
        "--from-block", dest="from_block", default=None,
        help="Take the query from this query block (id or unique prefix)",
    )
    parser_vrm = views_sub.add_parser("rm", help="Remove a saved view")
    parser_vrm.add_argument("id", help="View id or unique prefix")

    parser_reset = subparsers.add_parser("reset", help="Discard all data")
    parser_reset.add_argument("--yes", action="store_true", help="Confirm reset")

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # TOMLDecodeError is a ValueError, as is an unknown storage format
    try:
        config = load_config(config_path=args.config, data_path=args.data)
    except (PlanlogError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    level = logging.DEBUG if args.verbose else getattr(
        logging, config.logging.level, logging.WARNING
    )
    logging.basicConfig(level=level, format=LOG_FORMAT)

    try:
        rt = build_runtime(data_path=args.data, config=config)
    except (PlanlogError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    handlers = {
        "show": cmd_show,
        "today": cmd_today,
        "journal": cmd_journal,
        "page": cmd_page,
        "open": cmd_open,
        "ls": cmd_ls,
        "add": cmd_add,
        "add-query": cmd_add_query,
        "edit": cmd_edit,
        "cycle": cmd_cycle,
        "rm": cmd_rm,
        "query": cmd_query,
        "backlinks": cmd_backlinks,
        "tags": cmd_tags,
        "reset": cmd_reset,
    }

    if args.cmd == "views":
        views_handlers = {
            "ls": cmd_views_ls,
            "save": cmd_views_save,
            "rm": cmd_views_rm,
        }
        handler = views_handlers.get(args.views_cmd)
    else:
        handler = handlers.get(args.cmd)

    if handler:
        try:
            exit_code = handler(args, rt)
            sys.exit(exit_code)
        except PlanlogError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
    else:
        print(f"Unknown command: {args.cmd}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
