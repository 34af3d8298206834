"""Cache warming: pre-populate cached voter rows for a set of address ids."""

import asyncio
from pathlib import Path

import typer


def warm_cache(
    county: str = typer.Option(..., "--county", help="County code (e.g. VOL)"),
    party: str = typer.Option("ALL", "--party", help="Party code, or ALL"),
    address_ids: str | None = typer.Option(None, "--address-ids", help="Comma-separated address ids"),
    address_id_file: Path | None = typer.Option(  # noqa: B008
        None, "--address-id-file", help="File with one address id per line", exists=True, dir_okay=False
    ),
    bbox: str | None = typer.Option(None, "--bbox", help="latMin,lonMin,latMax,lonMax"),
    from_address: str | None = typer.Option(None, "--from-address", help="Warm around a geocoded address"),
    radius: float = typer.Option(0.1, "--radius", help="Radius in miles for --from-address", min=0.0001),
    chunk_size: int | None = typer.Option(None, "--chunk-size", help="Address ids per registry query", min=1),
    strategy: str | None = typer.Option(
        None, "--strategy", help="Join strategy: registry (vm_in), address (in), derived or diagnostic"
    ),
    respect_ttl: bool = typer.Option(  # noqa: FBT001
        False, "--respect-ttl", help="Only fetch ids without fresh cache rows"
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Fetch but do not write the cache"),  # noqa: FBT001
) -> None:
    """Fetch registry rows for address ids and write them to the result cache."""
    asyncio.run(
        _warm_cache(
            county=county,
            party=party,
            address_ids=address_ids,
            address_id_file=address_id_file,
            bbox=bbox,
            from_address=from_address,
            radius=radius,
            chunk_size=chunk_size,
            strategy=strategy,
            respect_ttl=respect_ttl,
            dry_run=dry_run,
        )
    )


def parse_address_ids(raw: str | None = None, path: Path | None = None) -> list[int]:
    """Collect ids from a comma-separated list and/or a one-per-line file.

    Blank entries are skipped; order is kept and duplicates dropped.

    Raises:
        typer.BadParameter: If an entry is not an integer.
    """
    entries: list[str] = []
    if raw:
        entries.extend(raw.split(","))
    if path is not None:
        entries.extend(path.read_text(encoding="utf-8").splitlines())

    ids: list[int] = []
    for entry in entries:
        entry = entry.strip()
        if not entry:
            continue
        try:
            ids.append(int(entry))
        except ValueError as e:
            msg = f"Invalid address id: {entry!r}"
            raise typer.BadParameter(msg) from e
    return list(dict.fromkeys(ids))


async def _warm_cache(
    *,
    county: str,
    party: str,
    address_ids: str | None,
    address_id_file: Path | None,
    bbox: str | None,
    from_address: str | None,
    radius: float,
    chunk_size: int | None,
    strategy: str | None,
    respect_ttl: bool,
    dry_run: bool,
) -> None:
    """Async implementation of the warm-cache command."""
    from voter_radius.core.config import get_settings
    from voter_radius.lib.errors import RetrievalError
    from voter_radius.lib.fetcher import canonical_strategy_name
    from voter_radius.lib.locator import BoundingBox
    from voter_radius.services.retrieval_service import retrieval_service_scope

    settings = get_settings()
    ids = parse_address_ids(address_ids, address_id_file)
    try:
        box = BoundingBox.parse(bbox) if bbox else None
        strategy = canonical_strategy_name(strategy) if strategy else settings.fetch_strategy
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e

    try:
        async with retrieval_service_scope(settings) as service:
            if not ids and box is not None:
                ids = await service.ids_in_box(box)
            if not ids and from_address:
                ids = await service.ids_near_address(from_address, radius)
            if not ids:
                typer.echo("No address ids provided or found.", err=True)
                raise typer.Exit(code=1)

            size = chunk_size or settings.fetch_chunk_size
            typer.echo(
                f"County: {county.upper()}, party: {party.upper()}, ids: {len(ids)}, "
                f"strategy: {strategy}, chunk: {size}"
            )
            summary = await service.warm(
                county,
                ids,
                party,
                strategy=strategy,
                chunk_size=size,
                respect_ttl=respect_ttl,
                dry_run=dry_run,
            )
    except RetrievalError as e:
        typer.echo(f"Error: {e.message}", err=True)
        raise typer.Exit(code=1) from e

    typer.echo(f"Missing ids to fetch: {summary.fetched_ids}")
    if summary.fetched_ids == 0:
        typer.echo("Nothing to do (cache fresh).")
        return
    typer.echo(f"Total rows fetched from registry: {summary.rows}")
    typer.echo(f"Chunks: {summary.chunks}, elapsed: {summary.elapsed_ms:.2f} ms")
    if summary.dry_run:
        typer.echo("Dry-run: not writing cache.")
        return
    typer.echo(f"Cache warm complete: {summary.written} rows written.")
