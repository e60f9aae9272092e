"""
PlasmoAP Command Line Interface.

Built with Click; human-readable messages go to stderr through rich so
that tabular results on stdout can be piped.

Usage:
    plasmoap score proteins.fasta > scores.tsv
    plasmoap score proteins.fasta -f json -o scores.json --workers 4
    plasmoap score-sequence MKILLLCIIF... --signal-peptide true --cleaved FKNTQ...
    plasmoap validate-sequence -f proteins.fasta
    plasmoap info
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

from .. import __version__

# Results on stdout, messages and progress on stderr
console = Console()
err_console = Console(stderr=True)

TSV_HEADER = ["Name", "PlasmoAP Score", "Apicoplast Targeted", "Points"]
EXPLAIN_HEADER = ["Signal Peptide", "Set 1", "Set 2", "Additional"]


def print_banner():
    """Print the PlasmoAP banner."""
    err_console.print(
        f"[bold blue]PlasmoAP v{__version__}[/bold blue] "
        "[dim]apicoplast targeting prediction for Plasmodium falciparum[/dim]"
    )


def setup_logging(verbose: bool, quiet: bool):
    level = logging.DEBUG if verbose else logging.ERROR if quiet else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _format_additional(value: Optional[bool]) -> str:
    if value is None:
        return "none"
    return "basic" if value else "acidic"


def _explain_columns(result) -> list[str]:
    outcomes = result.outcomes
    if outcomes is None:
        return ["0", "-", "-", "-"]
    return [
        "1",
        "1" if outcomes.set1.passed else f"0 ({outcomes.set1.failed_criterion})",
        "1" if outcomes.set2.passed else f"0 ({outcomes.set2.failed_criterion})",
        _format_additional(outcomes.additional),
    ]


def _result_row(name: str, result, explain: bool) -> list[str]:
    row = [
        name,
        result.tier.value,
        "1" if result.apicoplast_targeted else "0",
        str(result.points),
    ]
    if explain:
        row.extend(_explain_columns(result))
    return row


def _result_dict(scored) -> dict:
    entry = {
        "id": scored.protein.id,
        "description": scored.protein.description,
        "success": scored.success,
    }
    if not scored.success:
        entry["error"] = scored.error_message
        return entry

    result = scored.result
    entry.update({
        "points": result.points,
        "tier": result.tier.value,
        "apicoplast_targeted": result.apicoplast_targeted,
        "has_signal_peptide": result.has_signal_peptide,
        "outcomes": result.outcomes.model_dump() if result.outcomes else None,
    })
    return entry


@click.group()
@click.version_option(version=__version__, prog_name="PlasmoAP")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.pass_context
def cli(ctx, verbose: bool, quiet: bool):
    """
    PlasmoAP: apicoplast targeting prediction for Plasmodium falciparum.

    \b
    Scores proteins 0-5 from their signal peptide and the composition of
    the transit peptide that follows it:
      0-2 '-'   not targeted
      3   '0'   uncertain
      4   '+'   targeted
      5   '++'  targeted

    Run 'plasmoap COMMAND --help' for command-specific help.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet

    setup_logging(verbose, quiet)
    if not quiet:
        print_banner()


@cli.command("score")
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--output", "-o",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write results to this file instead of stdout"
)
@click.option(
    "--format", "-f", "output_format",
    type=click.Choice(["tsv", "json"]),
    default="tsv",
    help="Output format for results"
)
@click.option("--signalp", type=click.Path(), default=None, help="Path to the SignalP 3.0 executable")
@click.option("--timeout", type=float, default=120.0, help="SignalP timeout per sequence (seconds)")
@click.option("--workers", "-w", type=click.IntRange(min=0), default=0, help="Parallel workers (0 = sequential)")
@click.option("--no-cache", is_flag=True, help="Do not reuse cached SignalP predictions")
@click.option("--explain", is_flag=True, help="Add per-rule columns")
@click.pass_context
def score_cmd(
    ctx,
    input_file: str,
    output: Optional[str],
    output_format: str,
    signalp: Optional[str],
    timeout: float,
    workers: int,
    no_cache: bool,
    explain: bool,
):
    """
    Score every protein in a FASTA file.

    Signal peptides are predicted with SignalP 3.0. Output columns are
    Name, PlasmoAP Score, Apicoplast Targeted (1/0) and Points.

    \b
    Examples:
        plasmoap score proteins.fasta > scores.tsv
        plasmoap score proteome.fasta -w 8 --explain -o scores.tsv
    """
    from ..core.sequence import parse_fasta
    from ..predictors.base import EnvironmentMismatchError, PredictorConfig, get_predictor
    from ..scoring.scorer import DEFAULT_PREDICTOR, PlasmoAP

    quiet = ctx.obj.get("quiet")

    try:
        proteins = list(parse_fasta(Path(input_file)))
    except Exception as e:
        err_console.print(f"[red]✗ Error loading sequences:[/red] {e}")
        sys.exit(1)

    if not quiet:
        err_console.print(f"[green]✓[/green] Loaded {len(proteins)} sequence(s)")

    config = PredictorConfig(
        signalp_path=signalp,
        timeout_seconds=timeout,
        use_cache=not no_cache,
    )
    predictor = get_predictor(DEFAULT_PREDICTOR, config)
    if not predictor.is_available():
        err_console.print(
            "[red]✗ SignalP not found.[/red] Install SignalP 3.0 and pass --signalp "
            "or set PLASMOAP_SIGNALP."
        )
        sys.exit(1)

    scorer = PlasmoAP(predictor=predictor)

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            console=err_console,
            disable=quiet,
        ) as progress:
            task = progress.add_task("Scoring", total=len(proteins))
            scored = scorer.score_records(
                proteins,
                max_workers=workers,
                progress_callback=lambda current, total: progress.update(task, completed=current),
            )
    except EnvironmentMismatchError as e:
        err_console.print(f"[red]✗ {e}[/red]")
        sys.exit(2)

    for entry in scored:
        if not entry.success:
            err_console.print(f"[yellow]Skipped[/yellow] {entry.protein.id}: {entry.error_message}")

    if output_format == "json":
        text = json.dumps([_result_dict(entry) for entry in scored], indent=2) + "\n"
    else:
        header = TSV_HEADER + (EXPLAIN_HEADER if explain else [])
        lines = ["\t".join(header)]
        for entry in scored:
            if entry.success:
                name = entry.protein.description or entry.protein.id
                lines.append("\t".join(_result_row(name, entry.result, explain)))
        text = "\n".join(lines) + "\n"

    if output:
        Path(output).write_text(text)
        if not quiet:
            err_console.print(f"[green]✓[/green] Results saved to: {output}")
    else:
        click.echo(text, nl=False)

    n_failed = sum(1 for entry in scored if not entry.success)
    if n_failed and not quiet:
        err_console.print(f"[yellow]{n_failed} sequence(s) could not be scored[/yellow]")


@cli.command("score-sequence")
@click.argument("sequence")
@click.option(
    "--signal-peptide",
    type=click.BOOL,
    default=None,
    help="Whether the sequence has a signal peptide (skips SignalP; needs --cleaved)"
)
@click.option("--cleaved", default=None, help="Sequence after signal peptide cleavage")
@click.option("--signalp", type=click.Path(), default=None, help="Path to the SignalP 3.0 executable")
@click.option("--explain", is_flag=True, help="Show per-rule outcomes")
def score_sequence(
    sequence: str,
    signal_peptide: Optional[bool],
    cleaved: Optional[str],
    signalp: Optional[str],
    explain: bool,
):
    """
    Score a single sequence given on the command line.

    \b
    Examples:
        plasmoap score-sequence MKILLLCIIFLYYVNAFKNTQKDG...
        plasmoap score-sequence MKILLL... --signal-peptide true --cleaved FKNTQ...
    """
    from ..predictors.base import EnvironmentMismatchError, PredictorConfig, PredictorError
    from ..scoring.scorer import InputContractError, PlasmoAP

    scorer = PlasmoAP(config=PredictorConfig(signalp_path=signalp))

    try:
        result = scorer.calculate_score(sequence, signal_peptide, cleaved)
    except InputContractError as e:
        raise click.UsageError(f"--signal-peptide requires --cleaved ({e})")
    except EnvironmentMismatchError as e:
        err_console.print(f"[red]✗ {e}[/red]")
        sys.exit(2)
    except PredictorError as e:
        err_console.print(f"[red]✗ Signal peptide prediction failed:[/red] {e}")
        sys.exit(1)

    table = Table(show_header=True, header_style="bold")
    for column in TSV_HEADER[1:] + (EXPLAIN_HEADER if explain else []):
        table.add_column(column)
    table.add_row(*_result_row("", result, explain)[1:])
    console.print(table)


@cli.command("validate-sequence")
@click.argument("sequence", required=False)
@click.option("--file", "-f", type=click.Path(exists=True), help="FASTA file to validate")
def validate_sequence(sequence: Optional[str], file: Optional[str]):
    """
    Validate protein sequence(s) before scoring.

    Checks for valid amino acid characters and reports problems that
    would make a record unusable.

    \b
    Examples:
        plasmoap validate-sequence MKILLLCIIFLYYVNAFKNTQKDG
        plasmoap validate-sequence -f proteins.fasta
    """
    from Bio import SeqIO

    from ..core.sequence import SequenceValidator

    validator = SequenceValidator(allow_ambiguous=True)

    sequences_to_check = []

    if sequence:
        sequences_to_check.append(("command_line", sequence))

    if file:
        try:
            # Raw records, so every invalid entry is reported
            for record in SeqIO.parse(file, "fasta"):
                sequences_to_check.append((record.id, str(record.seq)))
        except (OSError, ValueError) as e:
            err_console.print(f"[red]Error reading file:[/red] {e}")
            sys.exit(1)

    if not sequences_to_check:
        err_console.print("[yellow]No sequence provided. Use --help for usage.[/yellow]")
        sys.exit(1)

    all_valid = True

    for seq_id, seq in sequences_to_check:
        is_valid, errors = validator.validate(seq)

        if is_valid:
            console.print(f"[green]✓[/green] {seq_id}: Valid ({len(seq)} residues)")
        else:
            all_valid = False
            console.print(f"[red]✗[/red] {seq_id}: Invalid")
            for error in errors:
                console.print(f"    - {error}")

    sys.exit(0 if all_valid else 1)


@cli.command("info")
@click.option("--signalp", type=click.Path(), default=None, help="Path to the SignalP 3.0 executable")
def info(signalp: Optional[str]):
    """
    Show the PlasmoAP rules, thresholds and predictor status.
    """
    from ..predictors.base import PredictorConfig, get_predictor
    from ..scoring.scorer import DEFAULT_PREDICTOR, PlasmoAP

    details = PlasmoAP().get_info()
    set1, set2, window = details["set1"], details["set2"], details["window"]

    table = Table(title="PlasmoAP rules", show_header=True, header_style="bold cyan")
    table.add_column("Rule", style="bold")
    table.add_column("Points")
    table.add_column("Criteria")
    table.add_row(
        "Set 1", "2",
        f"≤{set1['max_leader_acidic']} acidic in first {set1['leader_length']}; "
        f"enriched window basic:acidic ≥ {set1['window_ratio']}",
    )
    table.add_row(
        "Set 2", "2",
        f"basic:acidic ≥ {set2['leader_ratio']} in first {set2['leader_length']}; "
        f"enriched window basic:acidic ≥ {set2['window_ratio']}",
    )
    table.add_row("Additional", "1", "first charged residue is basic")
    console.print(table)

    console.print(
        f"\nEnriched window: first {window['size']} residues with ≥{window['min_asparagine_lysine']} "
        f"N+K within the {window['search_region']} residues after the leader"
    )

    predictor = get_predictor(DEFAULT_PREDICTOR, PredictorConfig(signalp_path=signalp, use_cache=False))
    status = "[green]available[/green]" if predictor.is_available() else "[red]not found[/red]"
    console.print(f"\n[bold]Signal peptides:[/bold] {predictor.name} {details['signalp_version']} ({status})")
    console.print(f"\n[bold]Citation:[/bold] {details['citation']}")


def main():
    """Main entry point for CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
