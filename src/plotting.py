"""Rendering of computed layouts with matplotlib and Graphviz."""

from collections.abc import Iterable, Mapping
import logging
from pathlib import Path

import matplotlib.pyplot as plt
import networkx as nx
import pydot

from graph import build_graph, build_union_layout_graph
from models import Person, PositionedNode

logger = logging.getLogger(__name__)

# Rendered through Graphviz; any other extension is written as DOT source
DOT_FORMATS = ("png", "svg", "pdf")


def gender_color(gender: str | None) -> str:
    if gender == "M":
        return "lightblue"
    if gender == "F":
        return "lightpink"
    return "lightgray"


def node_label(person: Person) -> str:
    """Name plus a "birth-death" year line."""
    birth_year = str(person.birth_date.year) if person.birth_date else ""
    death_year = str(person.death_date.year) if person.death_date else ""
    if not birth_year and not death_year:
        return person.name
    return f"{person.name}\n{birth_year}-{death_year}"


def _placed_graph(nodes: list[PositionedNode], people_by_id: Mapping[str, Person]) -> nx.DiGraph:
    """Family graph restricted to the people that have a position."""
    return build_graph(people_by_id[n.person_id] for n in nodes if n.person_id in people_by_id)


def plot_layout(
    nodes: Iterable[PositionedNode],
    people_by_id: Mapping[str, Person],
    output_path: Path | None = None,
    title: str | None = None,
):
    """
    Plot a computed layout using matplotlib.

    Node positions come straight from the layout, with y flipped so that
    larger y (later generations) is drawn lower. Parent edges are arrows,
    couple edges dashed lines.

    Args:
        nodes: Output of one of the layout functions
        people_by_id: Lookup map of the snapshot
        output_path: Path to save the image (png, svg or pdf). If None, displays interactively.
        title: Figure title; defaults to a people/relationships count

    Returns:
        The matplotlib Figure
    """
    nodes = list(nodes)
    G = _placed_graph(nodes, people_by_id)
    pos = {n.person_id: (n.x, -n.y) for n in nodes if n.person_id in G}

    fig = plt.figure(figsize=(20, 16))
    node_colors = [gender_color(G.nodes[n].get("sex")) for n in G.nodes()]
    labels = {n: node_label(people_by_id[n]) for n in G.nodes()}

    parent_edges = [(u, v) for u, v, d in G.edges(data=True) if d.get("relationship_type") == "PARENT_OF"]
    spouse_edges = [(u, v) for u, v, d in G.edges(data=True) if d.get("relationship_type") == "SPOUSE_OF"]

    nx.draw_networkx_nodes(G, pos, node_color=node_colors, node_size=900, alpha=0.9)
    nx.draw_networkx_labels(G, pos, labels=labels, font_size=7)
    nx.draw_networkx_edges(G, pos, edgelist=parent_edges, edge_color="gray", arrows=True, width=0.8)
    nx.draw_networkx_edges(
        G, pos, edgelist=spouse_edges, edge_color="darkgray", style="dashed", arrows=False, width=0.8
    )

    plt.title(title or f"Family Tree Layout ({G.number_of_nodes()} people, {G.number_of_edges()} relationships)")
    plt.axis("off")
    plt.tight_layout()

    if output_path:
        plt.savefig(output_path, dpi=150, bbox_inches="tight")
        plt.close(fig)
        logger.info("Layout plot saved to %s", output_path)
    else:
        plt.show()

    return fig


def layout_to_dot(nodes: Iterable[PositionedNode], people_by_id: Mapping[str, Person]) -> pydot.Dot:
    """
    Export a computed layout as a Graphviz graph with pinned positions.

    Uses the union-node model: each couple (or lone parent) gets a small point
    node at the midpoint of the parents, with lines from the parents and arrows
    to the children. Render with `neato -n` to keep the given coordinates.

    Args:
        nodes: Output of one of the layout functions
        people_by_id: Lookup map of the snapshot

    Returns:
        pydot.Dot graph
    """
    nodes = list(nodes)
    G = _placed_graph(nodes, people_by_id)
    H = build_union_layout_graph(G)
    coords = {n.person_id: (n.x, -n.y) for n in nodes if n.person_id in G}

    P = pydot.Dot(graph_type="digraph")
    P.set("layout", "neato")
    P.set("splines", "true")
    P.set("outputorder", "edgesfirst")

    for node, data in H.nodes(data=True):
        if data.get("node_type") == "family":
            spouses = [s for s in data.get("spouses", ()) if s in coords]
            if not spouses:
                continue
            x = sum(coords[s][0] for s in spouses) / len(spouses)
            y = sum(coords[s][1] for s in spouses) / len(spouses)
            P.add_node(
                pydot.Node(
                    str(node),
                    shape="point",
                    width="0.1",
                    height="0.1",
                    label="",
                    pos=f"{x:.1f},{y:.1f}!",
                )
            )
        else:
            x, y = coords[node]
            P.add_node(
                pydot.Node(
                    str(node),
                    label=node_label(people_by_id[node]),
                    shape="box",
                    style="rounded,filled",
                    fillcolor=gender_color(data.get("sex")),
                    fontsize="10",
                    pos=f"{x:.1f},{y:.1f}!",
                )
            )

    for u, v, data in H.edges(data=True):
        edge_type = data.get("edge_type", "")

        if edge_type == "spouse_to_family":
            # Spouse to family node: plain line
            P.add_edge(pydot.Edge(str(u), str(v), dir="none", color="darkgray"))
        elif edge_type == "family_to_child":
            P.add_edge(pydot.Edge(str(u), str(v), color="darkgray"))

    logger.debug("DOT export: %d nodes, %d edges", len(P.get_nodes()), len(P.get_edges()))
    return P


def save_dot(P: pydot.Dot, output_path: Path) -> None:
    """
    Write a DOT graph; `.dot` files are written as source, other extensions
    are rendered with neato (requires the Graphviz binaries).
    """
    output_path = Path(output_path)
    ext = output_path.suffix.lower().lstrip(".")
    if ext in DOT_FORMATS:
        P.write(str(output_path), prog=["neato", "-n"], format=ext)
    else:
        P.write(str(output_path), format="raw")
    logger.info("Graph saved to %s", output_path)
