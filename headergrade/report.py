"""Report generation (console, JSON and HTML)."""

import html
import json
from pathlib import Path
from typing import Iterable

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.markup import escape
from rich import box

from .config import VERSION
from .models import Category, Finding, ScanResult, Severity, Status
from .registry import HeaderRegistry, build_registry


REPORT_VERSION = "1.0"

severity_style = {
    Severity.HIGH: "red bold",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "blue",
    Severity.INFO: "dim",
}

status_style = {
    Status.MISSING: "red",
    Status.MISCONFIGURED: "yellow",
    Status.DANGEROUS: "magenta",
    Status.PRESENT: "green",
}

grade_style = {"A": "green bold", "B": "green", "C": "yellow", "D": "orange3", "E": "red", "F": "red bold"}

RECOMMENDATION_GROUPS = {
    Severity.HIGH: "critical",
    Severity.MEDIUM: "important",
    Severity.LOW: "recommended",
    Severity.INFO: "optional",
}


def _sorted(findings: Iterable[Finding]) -> list[Finding]:
    return sorted(findings, key=lambda f: (-f.severity.rank, f.header))


def print_console(result: ScanResult, *, verbose: bool = False, quiet: bool = False, console: Console | None = None) -> None:
    """Print scan result to console with Rich formatting."""
    console = console or Console()
    console.print(Panel(f"[bold]Security header report for {escape(result.target)}[/bold]", box=box.DOUBLE))

    if result.error:
        console.print(f"[red]Error:[/red] {escape(result.error)}")
        console.print("Score: [red bold]0/100[/]  Grade: [red bold]F[/]")
        return

    style = grade_style.get(result.grade, "white")
    summary = (
        f"Score: [{style}]{result.score}/100[/]  Grade: [{style}]{result.grade}[/]\n"
        f"[red]High: {result.high_count}[/red]  "
        f"[yellow]Medium: {result.medium_count}[/yellow]  "
        f"[blue]Low: {result.low_count}[/blue]  "
        f"[dim]Info: {result.info_count}[/dim]"
    )
    console.print(Panel(summary, title="Summary", border_style="blue"))
    console.print(f"\nHTTP status: [cyan]{result.status_code}[/cyan]\n")

    if verbose and result.breakdown:
        breakdown = Table(title="Score breakdown", show_header=True, header_style="bold")
        breakdown.add_column("Category", width=14)
        breakdown.add_column("Earned", justify="right")
        breakdown.add_column("Total", justify="right")
        breakdown.add_column("Points", justify="right")
        for category in (Category.ESSENTIAL, Category.ADVANCED, Category.CORS):
            score = result.breakdown.category(category)
            breakdown.add_row(category.value, f"{score.earned:.1f}", f"{score.total:g}", f"{score.weighted:.1f}")
        breakdown.add_row("disclosure", "", "", f"-{result.breakdown.disclosure_penalty:.1f}")
        breakdown.add_row("cookies", "", "", f"-{result.breakdown.cookie_penalty:.1f}")
        console.print(breakdown)

    if quiet:
        return

    problems = [f for f in result.findings if f.status != Status.PRESENT]
    if not problems:
        console.print("[green]All recognised security headers are present and well configured.[/green]")
        return

    table = Table(title="Findings", show_header=True, header_style="bold")
    table.add_column("Severity", style="bold", width=10)
    table.add_column("Status", width=14)
    table.add_column("Header", width=36)
    table.add_column("Issue", width=50)

    for f in _sorted(problems):
        sev = severity_style.get(f.severity, "white")
        stat = status_style.get(f.status, "white")
        text = f.issue or f.description or ""
        table.add_row(
            f"[{sev}]{f.severity.value.upper()}[/]",
            f"[{stat}]{f.status.value}[/]",
            escape(f.header if f.cookie is None else f"{f.header} ({f.cookie})"),
            escape(text[:48] + ".." if len(text) > 50 else text),
        )
    console.print(table)

    console.print("\n[bold]Details[/bold]\n")
    for i, f in enumerate(_sorted(problems), 1):
        sev = severity_style.get(f.severity, "white")
        body = ""
        if f.description:
            body += f"[bold]Description:[/bold] {f.description}\n"
        if f.value:
            body += f"[bold]Value:[/bold] {escape(f.value)}\n"
        if f.issue:
            body += f"[bold]Issue:[/bold] {escape(f.issue)}\n"
        for sub in f.issues:
            body += f"  • [{severity_style[sub.severity]}]{sub.severity.value}[/] {sub.description}\n"
        if f.recommendation:
            body += f"[bold]Recommendation:[/bold] {f.recommendation}\n"
        console.print(Panel(
            body.rstrip("\n"),
            title=f"#{i} [{sev}]{f.severity.value.upper()}[/] - {f.header}",
            border_style="bright_black",
        ))


def _example_for(finding: Finding, registry: HeaderRegistry) -> str:
    if finding.category == Category.COOKIE:
        return registry.lookup("set-cookie").example
    for rule in registry.all_rules():
        if rule.name == finding.header and rule.example:
            return rule.example
    return "Implementation depends on specific requirements"


def recommendations(result: ScanResult, registry: HeaderRegistry | None = None) -> dict[str, list[dict]]:
    """Group actionable findings by priority, with an implementation example each."""
    registry = registry or build_registry()
    groups = {name: [] for name in RECOMMENDATION_GROUPS.values()}
    for f in _sorted(result.findings):
        if f.status == Status.PRESENT:
            continue
        groups[RECOMMENDATION_GROUPS[f.severity]].append({
            "header": f.header if f.cookie is None else f"{f.header} ({f.cookie})",
            "description": f.description or "",
            "action": f.recommendation or "",
            "implementation": _example_for(f, registry),
        })
    return groups


def to_dict(result: ScanResult) -> dict:
    """Serialize ScanResult to a JSON-serializable report dict."""
    data = result.to_dict()
    data["metadata"] = {"report_version": REPORT_VERSION, "scanner_version": VERSION}
    data["summary"] = {
        "total_headers": len(result.headers),
        **{f"{s.value}_headers": result.count_by_status(s) for s in Status},
        "high": result.high_count,
        "medium": result.medium_count,
        "low": result.low_count,
        "info": result.info_count,
    }
    data["recommendations"] = recommendations(result)
    return data


def write_json(results: ScanResult | list[ScanResult], path: str | Path) -> None:
    """Write one result, or a list of results, to a JSON file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(results, ScanResult):
        payload = to_dict(results)
    else:
        payload = [to_dict(r) for r in results]
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)


HTML_STYLE = """
body { font-family: -apple-system, Segoe UI, Roboto, sans-serif; margin: 2rem; color: #222; }
h1 { margin-bottom: 0.2rem; }
.result { border: 1px solid #ddd; border-radius: 6px; padding: 1rem 1.5rem; margin-bottom: 2rem; }
.grade { font-size: 2.5rem; font-weight: bold; }
.grade-A, .grade-B { color: #2e7d32; } .grade-C { color: #f9a825; }
.grade-D, .grade-E { color: #ef6c00; } .grade-F { color: #c62828; }
table { border-collapse: collapse; width: 100%; margin-top: 1rem; }
th, td { text-align: left; padding: 0.4rem 0.6rem; border-bottom: 1px solid #eee; vertical-align: top; }
.sev-high { color: #c62828; font-weight: bold; } .sev-medium { color: #ef6c00; }
.sev-low { color: #1565c0; } .sev-info { color: #777; }
code { word-break: break-all; }
"""


def _html_result(result: ScanResult) -> str:
    e = html.escape
    if result.error:
        return (
            f'<div class="result"><h2>{e(result.target)}</h2>'
            f'<p class="grade grade-F">F</p><p>Error: {e(result.error)}</p></div>'
        )
    rows = []
    for f in _sorted(result.findings):
        details = e(f.issue or f.description or "")
        if f.issues:
            details += "<ul>" + "".join(
                f'<li class="sev-{s.severity.value}">{e(s.description)}</li>' for s in f.issues
            ) + "</ul>"
        header = f.header if f.cookie is None else f"{f.header} ({f.cookie})"
        rows.append(
            f"<tr><td class=\"sev-{f.severity.value}\">{f.severity.value.upper()}</td>"
            f"<td>{e(f.status.value)}</td><td>{e(header)}</td>"
            f"<td><code>{e(f.value or '')}</code></td><td>{details}</td>"
            f"<td>{e(f.recommendation or '')}</td></tr>"
        )
    rows_html = "".join(rows)
    return f"""<div class="result">
  <h2>{e(result.target)}</h2>
  <p class="grade grade-{e(result.grade)}">{e(result.grade)} <small>{result.score}/100</small></p>
  <p>HTTP {result.status_code} &bull; scanned {e(result.timestamp)}</p>
  <table>
    <tr><th>Severity</th><th>Status</th><th>Header</th><th>Value</th><th>Issue</th><th>Recommendation</th></tr>
    {rows_html}
  </table>
</div>"""


def write_html(results: ScanResult | list[ScanResult], path: str | Path) -> None:
    """Write a self-contained HTML report."""
    if isinstance(results, ScanResult):
        results = [results]
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    sections = "".join(_html_result(r) for r in results)
    doc = f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>Security Header Report</title>
<style>{HTML_STYLE}</style>
</head>
<body>
<h1>Security Header Report</h1>
<p>Generated by HeaderGrade {VERSION}</p>
{sections}
</body>
</html>"""
    with open(path, "w", encoding="utf-8") as f:
        f.write(doc)
