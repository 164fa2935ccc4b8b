"""Command-line interface for venue location lookups."""

import asyncio
import json

import click

from venue_locator.core.config import settings
from venue_locator.core.geocoding.assessment import (
    assess_location_accuracy,
    suggested_radius,
)
from venue_locator.core.geocoding.distance import compass_name, format_distance
from venue_locator.core.geocoding.exceptions import InvalidRangeFormat
from venue_locator.core.geocoding.providers import build_providers
from venue_locator.core.geocoding.range_filter import filter_candidates, parse_distance_range
from venue_locator.core.geocoding.reconciler import ProviderReconciler
from venue_locator.core.logging import configure_logging
from venue_locator.models.geographic import Candidate, Position, ResolvedLocation


def _parse_origin(ctx: click.Context, param: click.Parameter, value: str | None) -> Position | None:
    if value is None:
        return None
    try:
        lat_text, lon_text = value.split(",")
        return Position(latitude=float(lat_text), longitude=float(lon_text))
    except ValueError as e:
        raise click.BadParameter(f"expected LAT,LON within range, got '{value}'") from e


def _parse_range(ctx: click.Context, param: click.Parameter, value: str):
    try:
        return parse_distance_range(value)
    except InvalidRangeFormat as e:
        raise click.BadParameter(str(e)) from e


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool):
    """Resolve locations and rank venues by distance."""
    configure_logging(
        level="debug" if verbose else settings.LOG_LEVEL,
        json_logs=settings.JSON_LOGS,
    )


@cli.command()
@click.argument("latitude", type=click.FloatRange(-90, 90))
@click.argument("longitude", type=click.FloatRange(-180, 180))
@click.option(
    "--accuracy",
    "-a",
    type=click.FloatRange(min=0),
    default=None,
    help="Accuracy radius of the fix in meters",
)
def reverse(latitude: float, longitude: float, accuracy: float | None):
    """Reverse geocode LATITUDE LONGITUDE with every configured provider."""
    providers = build_providers(settings)
    if not providers:
        raise click.ClickException("No geocoding providers configured")

    reconciler = ProviderReconciler(providers, timeout=settings.GEOCODING_TIMEOUT)
    position = Position(latitude=latitude, longitude=longitude, accuracy_m=accuracy)
    scored = asyncio.run(reconciler.score_all(position))

    if not scored:
        click.echo("No provider returned an address; coordinates only.")
        return

    for address in scored:
        issues = f"  [{'; '.join(address.issues)}]" if address.issues else ""
        click.echo(
            f"{address.confidence:>3}  {address.source:<10} {address.short_label or '-'}{issues}"
        )

    best = ResolvedLocation(position=position, address=scored[0])
    assessment = assess_location_accuracy(best)
    click.echo(
        f"\nBest: {scored[0].source} ({'accurate' if assessment.is_accurate else 'imprecise'},"
        f" {assessment.confidence}/100), suggested range {suggested_radius(best)} km"
    )
    for recommendation in assessment.recommendations:
        click.echo(f"  - {recommendation}")


@cli.command(name="filter")
@click.option(
    "--origin",
    callback=_parse_origin,
    default=None,
    help="Origin as LAT,LON; omit to list venues unfiltered",
)
@click.option(
    "--range",
    "distance_range",
    callback=_parse_range,
    default=settings.DEFAULT_DISTANCE_RANGE,
    show_default=True,
    help="Distance window in km as MIN-MAX",
)
@click.argument("file", type=click.File("r"))
def filter_command(origin: Position | None, distance_range, file):
    """Rank the venues in a JSON FILE by distance from an origin."""
    try:
        records = json.load(file)
    except json.JSONDecodeError as e:
        raise click.ClickException(f"Invalid JSON: {e}") from e
    if not isinstance(records, list):
        raise click.ClickException("Expected a JSON list of venues")

    try:
        candidates = [Candidate.from_mapping(record) for record in records]
    except (AttributeError, TypeError, ValueError) as e:
        raise click.ClickException(f"Invalid venue record: {e}") from e

    result = filter_candidates(candidates, origin, distance_range)

    for ranked in result.kept:
        label = ranked.candidate.name or str(ranked.candidate.id)
        if ranked.distance_km is None:
            click.echo(label)
            continue
        click.echo(
            f"{format_distance(ranked.distance_km):>7}  {ranked.direction:<2} "
            f"({compass_name(ranked.bearing_deg)})  {label}"
        )

    if result.origin_known:
        click.echo(
            f"\n{result.matched_count} within {distance_range} km, "
            f"{result.excluded_out_of_range} out of range, "
            f"{result.excluded_no_coords} without coordinates"
        )


if __name__ == "__main__":
    cli()
