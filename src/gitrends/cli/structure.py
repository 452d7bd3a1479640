"""Structure command - path-hierarchy trees of hotspots, coupling and ownership."""

from typing import Optional

import click
import typer
from rich.markup import escape
from rich.tree import Tree as RichTree

from ..analytics.trees import ChangeCouplingLeaf, HotspotLeaf, MainDeveloperLeaf, Tree
from . import app
from ._common import console, get_config, get_engine, print_json, reporting_errors

KINDS = ["hotspots", "coupling", "module-coupling", "main-developer"]


@app.command()
def structure(
    ctx: typer.Context,
    kind: str = typer.Argument(
        ...,
        help="Tree to build: hotspots | coupling | module-coupling | main-developer",
        click_type=click.Choice(KINDS, case_sensitive=False),
    ),
    min_revisions: Optional[int] = typer.Option(
        None, "--min-revisions", help="Coupling trees: minimum coupled revisions", min=0
    ),
    min_ratio: Optional[float] = typer.Option(
        None, "--min-ratio", help="Coupling trees: minimum coupling ratio", min=0.0, max=1.0
    ),
    json_output: bool = typer.Option(False, "--json", help="Output in machine-readable JSON format"),
):
    """
    Build a tree by splitting file names on "/".

    Coupling trees keep only partners above both thresholds and drop files
    and directories left without any.
    """
    config = get_config(ctx)
    if min_revisions is None:
        min_revisions = config.coupling_min_revisions
    if min_ratio is None:
        min_ratio = config.coupling_min_ratio

    with reporting_errors():
        engine = get_engine(ctx)
        kind = kind.lower()
        if kind == "hotspots":
            tree = engine.hotspot_tree()
        elif kind == "coupling":
            tree = engine.file_coupling_tree(min_revisions, min_ratio)
        elif kind == "module-coupling":
            tree = engine.module_coupling_tree(min_revisions, min_ratio)
        else:
            tree = engine.main_developer_tree()

    if json_output:
        print_json(tree.to_dict())
        return

    rendered = RichTree(f"[bold]{escape(tree.name)}[/bold]")
    _render(tree, rendered)
    console.print(rendered)


def _render(tree: Tree, parent: RichTree) -> None:
    for child in tree.children:
        if isinstance(child, Tree):
            _render(child, parent.add(f"[bold blue]{escape(child.name)}/[/bold blue]"))
        elif isinstance(child, HotspotLeaf):
            parent.add(
                f"{escape(child.name)} [dim]size={child.size} "
                f"revisions={child.revision_weight:.2f} authors={child.author_weight:.2f}[/dim]"
            )
        elif isinstance(child, MainDeveloperLeaf):
            parent.add(
                f"{escape(child.name)} [green]{escape(child.main_developer)}[/green] "
                f"[dim]size={child.size}[/dim]"
            )
        elif isinstance(child, ChangeCouplingLeaf):
            node = parent.add(escape(child.name))
            for partner in child.couplings:
                node.add(
                    f"[cyan]{escape(partner.coupled)}[/cyan] [dim]{partner.coupled_revisions} revisions, "
                    f"{partner.coupling_ratio:.0%}[/dim]"
                )
