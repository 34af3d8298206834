"""Nearby-voter search from the command line."""

import asyncio

import typer


def search(
    address: str = typer.Option(..., "--address", help="Free-text origin address"),
    radius: float = typer.Option(..., "--radius", help="Search radius in miles"),
    county: str = typer.Option(..., "--county", help="County code (e.g. VOL)"),
    party: str = typer.Option("ALL", "--party", help="Party code, or ALL"),
    order: str = typer.Option("street", "--order", help="Ordering: street or route"),
    as_json: bool = typer.Option(False, "--json", help="Print the full result as JSON"),  # noqa: FBT001
) -> None:
    """Find voters registered within a radius of an address."""
    asyncio.run(_search(address, radius, county, party, order, as_json))


def _format_record(position: int, record) -> str:
    address = (record.voter_address or "").replace("\n", ", ")
    name = record.voter_name or " ".join(p for p in (record.first_name, record.last_name) if p)
    return f"{position:>4}. {record.voter_id}  {name}  {record.party or '-'}  {address}"


async def _search(address: str, radius: float, county: str, party: str, order: str, as_json: bool) -> None:
    """Async implementation of the search command."""
    from voter_radius.core.config import get_settings
    from voter_radius.lib.errors import RetrievalError
    from voter_radius.schemas.nearby import SearchRequest
    from voter_radius.services.retrieval_service import retrieval_service_scope

    if order not in ("street", "route"):
        typer.echo(f"Error: --order must be street or route, got {order!r}", err=True)
        raise typer.Exit(code=1)

    settings = get_settings()
    request = SearchRequest(address=address, radius=radius, county=county, party=party, order=order)
    try:
        async with retrieval_service_scope(settings) as service:
            result = await service.search(request)
    except RetrievalError as e:
        typer.echo(f"Error: {e.message}", err=True)
        raise typer.Exit(code=1) from e

    if as_json:
        typer.echo(result.model_dump_json(indent=2))
        return

    typer.echo(f"Origin: {result.latitude:.6f}, {result.longitude:.6f}  radius: {result.radius} mi")
    typer.echo(
        f"County: {result.county}  party: {result.party}  addresses: {result.candidates}  "
        f"cached: {result.cache_hits}  fetched: {result.fetched}"
    )
    if not result.records:
        typer.echo("No voters found.")
        return
    for position, record in enumerate(result.records, start=1):
        typer.echo(_format_record(position, record))
