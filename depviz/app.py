import argparse
import asyncio
import logging
from typing import List, Optional, Sequence

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.tree import Tree

from depviz.__version__ import __version__
from depviz.config import Config, ConfigError, load_config
from depviz.core.model import DependencyNode
from depviz.core.render import render
from depviz.core.resolver import resolve
from depviz.core.serializer import serialize

console = Console()


def setup_logging(verbose: bool = False, log_file: Optional[str] = None) -> None:
    handlers: List[logging.Handler] = [
        RichHandler(console=Console(stderr=True), show_path=False)
    ]
    if log_file:
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
        )
        handlers.append(file_handler)

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=handlers,
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def build_tree_view(root_name: str, dependencies: Sequence[DependencyNode]) -> Tree:
    tree = Tree(f"📦 [bold]{escape(root_name)}[/]")

    def add_nodes(branch, nodes):
        for node in nodes:
            if node.dependencies:
                label = f"[green]{escape(node.name)}[/] [dim]↳ {len(node.dependencies)}[/]"
            else:
                label = f"[blue]{escape(node.name)}[/]"
            add_nodes(branch.add(label), node.dependencies)

    add_nodes(tree, dependencies)
    return tree


async def run(config: Config) -> int:
    try:
        logging.info(
            f"Resolving {config.package_name} from {config.repository_url} "
            f"(max depth {config.max_depth})"
        )
        dependencies = await resolve(
            config.package_name,
            1,
            config.max_depth,
            config.repository_url,
            skip_cycles=config.skip_cycles,
            timeout=config.request_timeout,
        )

        if not dependencies:
            logging.info("No dependencies found, or the package could not be fetched.")
            return 0

        graph = serialize(dependencies, config.package_name)

        with open(config.output_file_path, "w", encoding="utf-8") as f:
            f.write(graph)
        logging.info(f"Dependency graph written to: {config.output_file_path}")

        console.print(build_tree_view(config.package_name, dependencies))
        console.print(graph, markup=False, highlight=False)

        await render(
            graph,
            config.output_base_name,
            config.visualizer_path,
            raster_command=config.raster_command,
        )
        return 0

    except Exception:
        logging.exception("Fatal error during run:")
        return 1


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="depviz",
        description="Resolve a package's dependency tree from a registry and render it with Graphviz.",
    )
    parser.add_argument(
        "config",
        nargs="?",
        default="config.csv",
        help="Configuration file, CSV or TOML (default: config.csv)",
    )
    parser.add_argument("--log-file", metavar="FILE", help="Also write the log to FILE")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    args = parser.parse_args(argv)

    setup_logging(args.verbose, args.log_file)

    try:
        config = load_config(args.config)
    except ConfigError as e:
        logging.error(str(e))
        return 1

    return asyncio.run(run(config))
