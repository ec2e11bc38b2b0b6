"""Geocoding CLI commands for batch runs and address normalization."""

import asyncio
from pathlib import Path

import typer

geocode_app = typer.Typer()


@geocode_app.command("run")
def run_batch(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Text file with one address per line"),  # noqa: B008
    output_dir: Path | None = typer.Option(None, "--output-dir", help="Artifact directory (default from settings)"),  # noqa: B008
    concurrency: int | None = typer.Option(None, "--concurrency", min=1, help="Rows in flight at once"),  # noqa: B008
    checkpoint_interval: int | None = typer.Option(None, "--checkpoint-interval", min=1, help="Rows per checkpoint"),  # noqa: B008
) -> None:
    """Geocode every address in FILE and write result artifacts."""
    addresses = _read_addresses(file)
    if not addresses:
        typer.echo(f"No addresses found in {file}", err=True)
        raise typer.Exit(code=1)
    ok = asyncio.run(_run_batch(addresses, file.name, output_dir, concurrency, checkpoint_interval))
    if not ok:
        raise typer.Exit(code=1)


@geocode_app.command("normalize")
def normalize(
    address: str = typer.Argument(..., help="Raw address"),  # noqa: B008
) -> None:
    """Print the normalized form of ADDRESS with its confidence."""
    from geobatch.lib.address import normalize_address, validate_address

    result = normalize_address(address)
    validation = validate_address(address)
    typer.echo(f"Original:    {result.original}")
    typer.echo(f"Normalized:  {result.normalized}")
    typer.echo(f"Confidence:  {result.confidence}")
    for note in result.corrections:
        typer.echo(f"  - {note}")
    typer.echo(f"Valid shape: {'yes' if validation.is_valid else 'no'} ({validation.confidence})")
    for issue in validation.issues:
        typer.echo(f"  ! {issue}")


def _read_addresses(path: Path) -> list[str]:
    """Read non-blank lines; a leading byte-order mark is ignored."""
    text = path.read_text(encoding="utf-8-sig")
    return [line.strip() for line in text.splitlines() if line.strip()]


async def _run_batch(
    addresses: list[str],
    source_name: str,
    output_dir: Path | None,
    concurrency: int | None,
    checkpoint_interval: int | None,
) -> bool:
    """Async implementation of a batch run. Returns True when the job completed."""
    from geobatch.core.config import get_settings
    from geobatch.lib.geocoder import create_geocode_client
    from geobatch.models.job import JobStatus
    from geobatch.services.artifact_service import FileArtifactWriter
    from geobatch.services.batch_service import create_batch_job, process_batch
    from geobatch.services.job_store import JobStore

    settings = get_settings()
    if not settings.naver_configured:
        typer.echo("Naver credentials are not configured (NAVER_CLIENT_ID / NAVER_CLIENT_SECRET)", err=True)
        return False

    store = JobStore()
    client = create_geocode_client(settings)
    writer = FileArtifactWriter(output_dir or settings.output_dir, top_n=settings.report_top_n, source_name=source_name)

    job = create_batch_job(store, addresses)
    typer.echo(f"Batch job created: {job.job_id} ({job.total_count} rows)")

    try:
        await process_batch(
            store,
            client,
            job.job_id,
            addresses,
            checkpoint_interval=checkpoint_interval or settings.batch_checkpoint_interval,
            concurrency=concurrency or settings.batch_concurrency,
            writer=writer,
        )
    except Exception as e:
        typer.echo(f"Batch failed: {e}", err=True)

    final = store.get_job(job.job_id)
    if final is None:
        return False
    typer.echo(f"\nBatch {final.status}:")
    typer.echo(f"  Total rows:   {final.total_count}")
    typer.echo(f"  Processed:    {final.processed_count}")
    typer.echo(f"  Succeeded:    {final.success_count}")
    typer.echo(f"  Failed:       {final.failed_count}")
    typer.echo(f"  Cache size:   {client.cache_size}")
    typer.echo(f"  Artifacts:    {final.artifact_status}")
    for path in final.artifact_paths:
        typer.echo(f"    {path}")
    if final.artifact_error:
        typer.echo(f"  Artifact error: {final.artifact_error}", err=True)
    return final.status == JobStatus.COMPLETED
