"""Threat Analyzer - Report output"""

from datetime import datetime, timezone
from typing import Dict, List, Optional

from dateutil import parser as date_parser
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

SEVERITY_STYLES = {'critical': 'red bold', 'high': 'red', 'medium': 'yellow', 'low': 'blue'}

# Display order for the alerts table; unlisted severities go last
DISPLAY_SEVERITY_ORDER = {'critical': 0, 'high': 1, 'medium': 2, 'low': 3, 'failed': 3, 'success': 4}
DISPLAY_DEFAULT_ORDER = 5

# (upper bound, label, style); the last band has no bound
THREAT_BANDS = [
    (40, 'Low', 'green'),
    (60, 'Elevated', 'yellow'),
    (80, 'High', 'dark_orange'),
    (None, 'Critical', 'red bold'),
]

APACHE_TIME_FORMAT = "%d/%b/%Y:%H:%M:%S"


def threat_level_band(level: int):
    """Return (label, style) for a 0-100 threat level."""
    for bound, label, style in THREAT_BANDS:
        if bound is None or level < bound:
            return label, style


def parse_alert_time(timestamp: str) -> Optional[datetime]:
    """Best-effort naive UTC datetime for any timestamp the parser emits."""
    try:
        return datetime.strptime(timestamp, APACHE_TIME_FORMAT)
    except (TypeError, ValueError):
        pass

    try:
        moment = date_parser.parse(timestamp)
    except (TypeError, ValueError, OverflowError):
        return None

    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc).replace(tzinfo=None)
    return moment


def sort_alerts_for_display(alerts: List[Dict]) -> List[Dict]:
    """Severity first, then most recent first; unparseable times sink within a severity."""
    by_time = sorted(alerts, key=lambda a: parse_alert_time(a['timestamp']) or datetime.min, reverse=True)
    return sorted(
        by_time,
        key=lambda a: DISPLAY_SEVERITY_ORDER.get(str(a['severity']).lower(), DISPLAY_DEFAULT_ORDER),
    )


def print_report(report: Dict, console: Console, max_alerts: int = 50):
    console.print("\n" + "═" * 70, style="cyan")
    console.print("              SECURITY THREAT REPORT", style="bold cyan")
    console.print("═" * 70, style="cyan")

    level = report['threatLevel']
    label, style = threat_level_band(level)
    console.print(Panel.fit(
        f"[{style}]{level}[/] / 100  [{style}]{label}[/]",
        title="Threat Level",
        border_style="cyan"
    ))

    stats = report['stats']
    console.print(Panel.fit(
        f"Total Events: [cyan]{stats['totalEvents']:,}[/]\n"
        f"Critical Alerts: [{'red' if stats['criticalAlerts'] > 0 else 'green'}]{stats['criticalAlerts']:,}[/]\n"
        f"Active Threats: [{'red' if stats['activeThreats'] > 0 else 'green'}]{stats['activeThreats']:,}[/]\n"
        f"Failed Logins: [yellow]{stats['failedLogins']:,}[/]\n"
        f"Blocked IPs: [cyan]{stats['blockedIPs']:,}[/]\n"
        f"Unique IPs: [cyan]{stats['uniqueIPs']:,}[/]",
        title="Summary",
        border_style="cyan"
    ))

    # Everything below that comes from log lines goes through escape()
    if report['alerts']:
        alerts = sort_alerts_for_display(report['alerts'])
        console.print("\n" + "─" * 70, style="cyan")
        console.print("ALERTS", style="bold red")
        table = Table(box=box.ROUNDED)
        table.add_column("Severity")
        table.add_column("Type", style="cyan")
        table.add_column("IP Address", style="red")
        table.add_column("Country")
        table.add_column("Time", style="dim")
        table.add_column("Message")
        for alert in alerts[:max_alerts]:
            color = SEVERITY_STYLES.get(alert['severity'], 'white')
            table.add_row(
                f"[{color}]{escape(alert['severity'].upper())}[/]",
                escape(alert['type'].replace('_', ' ').title()),
                escape(alert['ip']),
                escape(alert['country']),
                escape(alert['timestamp']),
                escape(alert['message']),
            )
        console.print(table)
        if len(alerts) > max_alerts:
            console.print(f"  ... {len(alerts) - max_alerts} more", style="dim")

    if report['attackMap']:
        console.print("\n" + "─" * 70, style="cyan")
        console.print("ATTACK ORIGINS", style="bold")
        table = Table(box=box.ROUNDED)
        table.add_column("Country", style="cyan")
        table.add_column("Lat / Lng", style="dim")
        table.add_column("Attacks", style="red")
        for entry in report['attackMap']:
            table.add_row(escape(entry['country']), f"{entry['lat']}, {entry['lng']}", str(entry['attacks']))
        console.print(table)

    if report['topIPs']:
        console.print("\n" + "─" * 70, style="cyan")
        console.print("TOP ATTACKERS", style="bold red")
        table = Table(box=box.ROUNDED)
        table.add_column("IP Address", style="red")
        table.add_column("Country")
        table.add_column("Threats", style="yellow")
        for entry in report['topIPs']:
            table.add_row(escape(entry['ip']), escape(entry['country']), str(entry['count']))
        console.print(table)

    if stats['countries']:
        console.print("\n" + "─" * 70, style="cyan")
        console.print("EVENTS BY COUNTRY", style="bold")
        for country, count in sorted(stats['countries'].items(), key=lambda item: -item[1]):
            console.print(f"  {escape(country)}: [cyan]{count}[/]")

    console.print("\n" + "═" * 70, style="cyan")
