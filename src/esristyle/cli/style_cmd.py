# src/esristyle/cli/style_cmd.py
"""
CLI commands to translate ArcGIS layer symbology and try style selection.
"""

import asyncio
import json
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import click
from loguru import logger
from rich.table import Table

from esristyle.config import AppConfig
from esristyle.symbology import (Feature, PillowPatternLoader, StyleError,
                                 StyleJSONEncoder, StyleSelector, StyleTable,
                                 fetch_layer_definition, read_style_definitions)
from esristyle.symbology.colors import METERS_PER_UNIT, scale_to_resolution
from esristyle.symbology.models import ConditionalRule
from esristyle.utils.console import create_console

console = create_console(stderr=True)


def _is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def load_layer_document(source: str, app_config: AppConfig) -> Tuple[Dict[str, Any], Optional[str]]:
    """Read a layer definition from a JSON file or a service URL."""
    if _is_url(source):
        document = fetch_layer_definition(
            source,
            timeout=app_config.global_.request_timeout,
            proxies=app_config.global_.proxy.to_requests_format() or None,
        )
        return document, source

    path = Path(source)
    if not path.exists():
        raise click.BadParameter(f"File not found: {source}", param_hint="SOURCE")

    with open(path, "r", encoding="utf-8") as f:
        return json.load(f), None


def build_table(
    source: str, app_config: AppConfig, units: Optional[str], per_value: bool
) -> StyleTable:
    document, base_url = load_layer_document(source, app_config)

    options = app_config.style.translation_options()
    if units:
        options["meters_per_unit"] = METERS_PER_UNIT[units]
    if per_value:
        options["group_by_label"] = False

    return asyncio.run(
        read_style_definitions(
            document, pattern_loader=PillowPatternLoader(), base_url=base_url, **options
        )
    )


def _describe_style(descriptor) -> str:
    parts = []
    if descriptor.fill:
        parts.append("fill pattern" if descriptor.fill.pattern else f"fill {descriptor.fill.color}")
    if descriptor.stroke:
        parts.append(f"stroke {descriptor.stroke.color} {descriptor.stroke.width}")
    if descriptor.circle:
        parts.append(f"circle r={descriptor.circle.radius:g}")
    if descriptor.icon:
        parts.append("icon")
    if descriptor.text:
        parts.append(f"text {descriptor.text.font}")
    return ", ".join(parts) or "-"


def _describe_filters(rule) -> str:
    if not isinstance(rule, ConditionalRule):
        return "[dim]default[/dim]"

    descriptions = []
    for f in rule.filters:
        operand = f.to_dict()["operand"]
        if isinstance(operand, list):
            operand = ",".join(operand)
        elif isinstance(operand, dict):
            operand = f"{operand['lower']:g}..{operand['upper']:g}"
        descriptions.append(f"{f.attribute_name} {f.operator.value} {operand}")
    return " AND ".join(descriptions)


def display_table(table: StyleTable) -> None:
    rules = Table(title="Feature Rules", show_header=True, header_style="bold magenta")
    rules.add_column("#", style="dim", justify="right")
    rules.add_column("Title", style="cyan")
    rules.add_column("Filters", style="yellow")
    rules.add_column("Style", style="green")

    for index, rule in enumerate(table.feature_rules):
        rules.add_row(str(index), rule.title or "", _describe_filters(rule), _describe_style(rule.style))
    console.print(rules)

    if not table.label_rules:
        console.print("[dim]No label rules[/dim]")
        return

    labels = Table(title="Label Rules", show_header=True, header_style="bold magenta")
    labels.add_column("Scale", style="cyan", justify="right")
    labels.add_column("Resolution", style="cyan", justify="right")
    labels.add_column("Template", style="yellow")
    labels.add_column("Style", style="green")

    for rule in table.label_rules:
        labels.add_row(
            f"1:{rule.min_scale:g} - 1:{rule.max_scale:g}",
            f"{rule.min_resolution:.4g} - {rule.max_resolution:.4g}",
            repr(rule.template),
            _describe_style(rule.style),
        )
    console.print(labels)


def parse_attributes(values: Tuple[str, ...]) -> Dict[str, str]:
    attributes = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"Expected KEY=VALUE, got '{item}'", param_hint="--attribute")
        attributes[key] = value
    return attributes


@click.group(name="style")
@click.pass_context
def style_commands(ctx):
    """Translate ArcGIS symbology and select feature styles."""
    ctx.ensure_object(dict)


@style_commands.command()
@click.pass_context
@click.argument("source")
@click.option(
    "--units",
    type=click.Choice(sorted(METERS_PER_UNIT)),
    help="Projection unit used for scale to resolution conversion (default: from config)",
)
@click.option(
    "--per-value", is_flag=True, help="One rule per unique value instead of per label"
)
@click.option("--export", "export_format", type=click.Choice(["json"]), help="Export the style table")
@click.option(
    "--output", "-o", type=click.Path(path_type=Path), help="Export file (default: stdout)"
)
def translate(ctx, source, units, per_value, export_format, output):
    """Translate the drawingInfo of SOURCE (JSON file or layer URL)."""
    app_config: AppConfig = ctx.obj["config"]

    try:
        table = build_table(source, app_config, units, per_value)
    except StyleError as e:
        console.print(f"[red]Translation failed: {e}[/red]")
        raise click.Abort()

    if export_format == "json":
        document = json.dumps(table.to_dict(), cls=StyleJSONEncoder, indent=2)
        if output:
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_text(document, encoding="utf-8")
            console.print(f"[green]Exported to {output}[/green]")
        else:
            click.echo(document)
        return

    display_table(table)


@style_commands.command()
@click.pass_context
@click.argument("source")
@click.option(
    "--attribute", "-a", "attribute_values", multiple=True, help="Feature attribute as KEY=VALUE"
)
@click.option("--id", "feature_id", help="Feature id used for $id in labels")
@click.option("--resolution", type=float, help="Map resolution (units per pixel)")
@click.option("--scale", type=float, help="Map scale denominator, converted to a resolution")
@click.option(
    "--units",
    type=click.Choice(sorted(METERS_PER_UNIT)),
    help="Projection unit (default: from config)",
)
def select(ctx, source, attribute_values, feature_id, resolution, scale, units):
    """Select the styles of one feature described on the command line."""
    app_config: AppConfig = ctx.obj["config"]

    if resolution is not None and scale is not None:
        raise click.UsageError("Use either --resolution or --scale, not both")

    meters_per_unit = (
        METERS_PER_UNIT[units] if units else app_config.style.resolve_meters_per_unit()
    )
    if scale is not None:
        resolution = scale_to_resolution(scale, meters_per_unit)
    elif resolution is None:
        resolution = 0.0

    try:
        table = build_table(source, app_config, units, per_value=False)
    except StyleError as e:
        console.print(f"[red]Translation failed: {e}[/red]")
        raise click.Abort()

    selector = StyleSelector(
        table,
        hidden_attribute=app_config.style.hidden_attribute,
        keep_leftovers=app_config.style.keep_leftovers,
    )
    feature = Feature(id=feature_id, attributes=parse_attributes(attribute_values))
    logger.debug(f"Selecting style at resolution {resolution:g} for {feature}")

    styles = selector.select_style(feature, resolution)
    if styles is None:
        console.print("[yellow]No style applies to this feature[/yellow]")
        click.echo("null")
        return

    click.echo(json.dumps([style.to_dict() for style in styles], cls=StyleJSONEncoder, indent=2))
