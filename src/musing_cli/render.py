"""Turn a HealthSnapshot into sectioned, coloured text."""

from __future__ import annotations

from rich.text import Text

from .health import format_latency
from .registry import Category
from .snapshot import HealthSnapshot, ProbeResult

GLYPH = "●"
NAME_WIDTH = 25
PORT_WIDTH = 6

SECTION_ORDER = (
    Category.INFRA,
    Category.DATABASE,
    Category.API,
    Category.FRONTEND,
    Category.TUNNEL,
)

SECTION_TITLES = {
    Category.INFRA: "Infrastructure",
    Category.DATABASE: "Database",
    Category.API: "Application Services",
    Category.FRONTEND: "Frontend",
    Category.TUNNEL: "SSH Tunnel",
}

RUNNING_STYLE = "bold green"
DOWN_STYLE = "bold red"
HEADER_STYLE = "bold magenta"


def partition(snapshot: HealthSnapshot) -> list[tuple[Category, list[ProbeResult]]]:
    """Group results by category in section order, keeping snapshot order inside each."""
    buckets: dict[Category, list[ProbeResult]] = {c: [] for c in SECTION_ORDER}
    for result in snapshot:
        buckets[result.target.category].append(result)
    return [(c, buckets[c]) for c in SECTION_ORDER if buckets[c]]


def section_title(category: Category, count: int) -> str:
    title = SECTION_TITLES[category]
    if category is Category.API:
        title = f"{title} ({count})"
    return f"━━━ {title} ━━━"


def format_line(result: ProbeResult) -> Text:
    """``● name  :port  [latency]``; port-less targets get no port column."""
    line = Text("  ")
    line.append(GLYPH, style=RUNNING_STYLE if result.reachable else DOWN_STYLE)
    line.append(f" {result.target.name:<{NAME_WIDTH}}")
    if result.target.has_port:
        line.append(f" :{result.target.port:<{PORT_WIDTH}}")
    else:
        line.append(" " * (PORT_WIDTH + 2))
    latency = format_latency(result.latency_ms if result.reachable else 0)
    line.append(f" [{latency}]", style="dim" if result.reachable else "dim red")
    return line


def render_sections(snapshot: HealthSnapshot) -> Text:
    out = Text()
    for category, results in partition(snapshot):
        if out.plain:
            out.append("\n")
        out.append(section_title(category, len(results)), style=HEADER_STYLE)
        out.append("\n")
        for result in results:
            out.append_text(format_line(result))
            out.append("\n")
    return out
