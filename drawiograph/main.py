"""
CLI entry point

Inspects and creates draw.io documents
"""
import sys
import json
import argparse
import logging
from pathlib import Path

from drawiograph.io.drawio_loader import DrawIOLoader
from drawiograph.io.drawio_writer import DrawIOWriter
from drawiograph.logger import DiagramLogger
from drawiograph.config import DiagramConfig
from drawiograph.errors import DiagramError
from drawiograph.model.query import VertexFilter
from drawiograph.model.tables import TableEditor


def _tab_arg(value: str):
    """Numeric tab selectors are page indexes, anything else is a page name"""
    return int(value) if value.isdigit() else value


def _print_json(data):
    print(json.dumps(data, indent=2, ensure_ascii=False))


def _cmd_new(args, loader: DrawIOLoader, writer: DrawIOWriter):
    path = Path(args.path)
    if path.exists() and not args.force:
        print(f"File already exists: {path} (use --force to overwrite)")
        sys.exit(1)
    page = writer.new_document(path, args.tab)
    print(f"Created {path} (tab '{page.name}')")


def _cmd_tabs(args, loader: DrawIOLoader, writer: DrawIOWriter):
    tabs = loader.list_tabs(args.path)
    if args.json:
        _print_json([t.to_dict() for t in tabs])
        return
    for tab in tabs:
        if tab.error:
            print(f"[{tab.index}] {tab.name}: {tab.error}")
        else:
            print(f"[{tab.index}] {tab.name}: {tab.node_count} nodes, {tab.edge_count} edges")


def _cmd_show(args, loader: DrawIOLoader, writer: DrawIOWriter):
    graph = loader.load_file(args.path, args.tab)
    if args.json:
        _print_json({
            'nodes': [v.to_dict() for v in graph.list_vertices()],
            'edges': [
                {'id': e.id, 'source': e.source, 'target': e.target, 'label': e.value or ''}
                for e in graph.list_edges()
            ],
        })
        return
    print(f"Nodes ({graph.vertex_count}):")
    for info in graph.list_vertices():
        print(f"  {info.id} [{info.kind}] '{info.title}' at ({info.x:g}, {info.y:g})")
    print(f"Edges ({graph.edge_count}):")
    for edge in graph.list_edges():
        label = f" '{edge.value}'" if edge.value else ''
        print(f"  {edge.id}: {edge.source} -> {edge.target}{label}")


def _cmd_nodes(args, loader: DrawIOLoader, writer: DrawIOWriter):
    graph = loader.load_file(args.path, args.tab)
    filters = VertexFilter(
        id_contains=args.id_contains,
        title_contains=args.title_contains,
        kind=args.kind,
        data=json.loads(args.data) if args.data else None,
    )
    _print_json([v.to_dict() for v in graph.find_vertices(filters)])


def _cmd_table(args, loader: DrawIOLoader, writer: DrawIOWriter):
    graph = loader.load_file(args.path, args.tab)
    editor = TableEditor(graph)
    if args.table_id is None:
        _print_json([t.to_dict() for t in editor.list_tables()])
        return
    info = editor.read_table(args.table_id)
    if args.json:
        _print_json(info.to_dict())
        return
    print(f"{info.id}: {info.title}")
    print(" | ".join(info.columns))
    for row in info.rows:
        print(" | ".join(row))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='drawiograph',
        description='Inspect and create draw.io documents',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  drawiograph new diagram.drawio --tab Overview
  drawiograph tabs diagram.drawio
  drawiograph show diagram.drawio --tab 1
  drawiograph nodes diagram.drawio --kind Ellipse
  drawiograph table diagram.drawio users --tab Schema
        """
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')
    subparsers = parser.add_subparsers(dest='command')

    p_new = subparsers.add_parser('new', help='Create a document with one empty tab')
    p_new.add_argument('path', type=str, help='Path to the new .drawio file')
    p_new.add_argument('--tab', type=str, default=None, help='Name of the first tab')
    p_new.add_argument('-f', '--force', action='store_true', help='Overwrite an existing file')
    p_new.set_defaults(handler=_cmd_new)

    p_tabs = subparsers.add_parser('tabs', help='List tabs with node and edge counts')
    p_tabs.add_argument('path', type=str, help='Path to a .drawio file')
    p_tabs.add_argument('--json', action='store_true', help='Print JSON')
    p_tabs.set_defaults(handler=_cmd_tabs)

    p_show = subparsers.add_parser('show', help='Print the nodes and edges of a tab')
    p_show.add_argument('path', type=str, help='Path to a .drawio file')
    p_show.add_argument('--tab', type=_tab_arg, default=None, help='Tab index or name (default: first)')
    p_show.add_argument('--json', action='store_true', help='Print JSON')
    p_show.set_defaults(handler=_cmd_show)

    p_nodes = subparsers.add_parser('nodes', help='Search nodes of a tab')
    p_nodes.add_argument('path', type=str, help='Path to a .drawio file')
    p_nodes.add_argument('--tab', type=_tab_arg, default=None, help='Tab index or name (default: first)')
    p_nodes.add_argument('--id-contains', type=str, default=None, help='Substring of the node ID')
    p_nodes.add_argument('--title-contains', type=str, default=None,
                         help='Substring of the label (case-insensitive)')
    p_nodes.add_argument('--kind', type=str, default=None, help='Node kind, e.g. Rectangle')
    p_nodes.add_argument('--data', type=str, default=None, help='JSON object the custom data must contain')
    p_nodes.set_defaults(handler=_cmd_nodes)

    p_table = subparsers.add_parser('table', help='Print a table (or list all tables)')
    p_table.add_argument('path', type=str, help='Path to a .drawio file')
    p_table.add_argument('table_id', nargs='?', type=str, default=None, help='Table container ID')
    p_table.add_argument('--tab', type=_tab_arg, default=None, help='Tab index or name (default: first)')
    p_table.add_argument('--json', action='store_true', help='Print JSON')
    p_table.set_defaults(handler=_cmd_table)

    return parser


def main():
    """Main function"""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    config = DiagramConfig()
    logger = DiagramLogger(config=config)
    if args.verbose:
        logger.logger.setLevel(logging.DEBUG)
    loader = DrawIOLoader(logger=logger, config=config)
    writer = DrawIOWriter(logger=logger, config=config)

    try:
        args.handler(args, loader, writer)
    except FileNotFoundError as e:
        print(f"File not found: {e.filename}")
        sys.exit(1)
    except (DiagramError, json.JSONDecodeError) as e:
        print(f"Error: {e}")
        sys.exit(1)

    warnings = logger.get_warnings()
    if warnings:
        print(f"\nWarnings ({len(warnings)}):", file=sys.stderr)
        for warning in warnings:
            print(f"  - {warning.message}", file=sys.stderr)


if __name__ == "__main__":
    main()
