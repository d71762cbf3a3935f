"""
Command-line interface for Bloom Engine.
"""
import random
import threading
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from bloom_engine.bloom_filter import BloomFilter
from bloom_engine.config import FilterConfig, configure_logging
from bloom_engine.errors import BloomFilterError
from bloom_engine.hashing import available_strategies
from bloom_engine.metrics import FilterMetrics
from bloom_engine.sizing import false_positive_rate, recommended_parameters


console = Console()


def _load_config(config: Optional[str], **overrides) -> FilterConfig:
    if config and Path(config).exists():
        filter_config = FilterConfig.from_file(config)
        console.print(f"[green]Loaded configuration from {config}[/green]")
        # Command-line logging options win over the file
        options = click.get_current_context().find_root().params
        configure_logging(
            options["log_level"] or filter_config.log_level,
            options["log_file"] or filter_config.log_file,
        )
    else:
        filter_config = FilterConfig()
    for key, value in overrides.items():
        if value is not None:
            setattr(filter_config, key, value)
    filter_config.validate()
    return filter_config


@click.group()
@click.option("--log-level", "-l", help="Log level (default: WARNING)")
@click.option("--log-file", type=click.Path(), help="Write logs to this file")
def main(log_level, log_file):
    """Bloom Engine - probabilistic set membership with tunable false positives."""
    try:
        configure_logging(log_level or "WARNING", log_file)
    except BloomFilterError as e:
        raise click.ClickException(str(e))


@main.command()
@click.option("--expected", "-n", type=int, required=True, help="Expected number of elements")
@click.option("--rate", "-p", type=float, default=0.01, help="Target false positive rate")
def size(expected, rate):
    """Recommend filter parameters for an expected load."""
    try:
        m, k = recommended_parameters(expected, rate)
    except BloomFilterError as e:
        raise click.ClickException(str(e))

    table = Table(title="Recommended Parameters")
    table.add_column("Parameter", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Expected elements", str(expected))
    table.add_row("Target false positive rate", f"{rate:g}")
    table.add_row("Capacity (bits)", str(m))
    table.add_row("Memory (bytes)", str((m + 7) // 8))
    table.add_row("Hash count", str(k))
    table.add_row("Theoretical rate at capacity", f"{false_positive_rate(m, k, expected):.6f}")
    console.print(table)


@main.command()
@click.argument("source", type=click.Path(exists=True, dir_okay=False))
@click.argument("values", nargs=-1, required=True)
@click.option("--config", "-c", type=click.Path(), help="Path to configuration file")
@click.option("--bits", "-m", type=int, help="Capacity in bits")
@click.option("--hashes", "-k", type=int, help="Number of hash positions")
@click.option("--algorithm", "-a", type=click.Choice(available_strategies()), help="Hash algorithm")
def check(source, values, config, bits, hashes, algorithm):
    """Load SOURCE (one value per line) and query VALUES against it."""
    try:
        filter_config = _load_config(
            config, capacity_bits=bits, hash_count=hashes, hash_algorithm=algorithm
        )
        bf = BloomFilter.from_config(filter_config)
        with open(source, "r", encoding="utf-8") as f:
            bf.insert_all(line.rstrip("\n") for line in f if line.strip())

        table = Table(title=f"Membership in {source}")
        table.add_column("Value", style="cyan")
        table.add_column("Result")
        for value in values:
            if bf.contains(value):
                table.add_row(value, "[yellow]possibly present[/yellow]")
            else:
                table.add_row(value, "[green]definitely absent[/green]")
    except BloomFilterError as e:
        raise click.ClickException(str(e))

    console.print(table)
    console.print(f"[dim]{bf!r}[/dim]")


@main.command()
@click.option("--elements", "-n", type=int, default=10000, help="Number of elements to insert")
@click.option("--rate", "-p", type=float, default=0.01, help="Target false positive rate")
@click.option("--queries", "-q", type=int, default=100000, help="Number of absent values to query")
@click.option("--algorithm", "-a", type=click.Choice(available_strategies()), default="blake2b")
@click.option("--threads", "-t", type=int, default=1, help="Insert from this many threads")
@click.option("--seed", type=int, default=0, help="Random seed for generated values")
@click.option("--prometheus", is_flag=True, help="Print the metrics in Prometheus text format")
def simulate(elements, rate, queries, algorithm, threads, seed, prometheus):
    """Measure the observed false positive rate against theory."""
    try:
        config = FilterConfig(
            expected_elements=elements,
            false_positive_rate=rate,
            hash_algorithm=algorithm,
            concurrent=threads > 1,
        )
        metrics = FilterMetrics()
        bf = BloomFilter.from_config(config, metrics=metrics)
    except BloomFilterError as e:
        raise click.ClickException(str(e))

    console.print(Panel.fit(
        f"[bold cyan]Running False Positive Simulation[/bold cyan]\n"
        f"Elements: {elements}\n"
        f"Queries: {queries}\n"
        f"Bits: {bf.capacity_bits}  Hashes: {bf.hash_count}\n"
        f"Algorithm: {algorithm}  Threads: {threads}",
        border_style="cyan"
    ))

    rng = random.Random(seed)
    members = [f"member-{rng.getrandbits(64):016x}-{i}" for i in range(elements)]

    if threads > 1:
        chunks = [members[i::threads] for i in range(threads)]
        workers = [threading.Thread(target=bf.insert_all, args=(chunk,)) for chunk in chunks]
        for worker in workers:
            worker.start()
        for worker in workers:
            worker.join()
    else:
        bf.insert_all(members)

    missing = [value for value in members if value not in bf]
    false_positives = sum(
        1 for i in range(queries) if f"absent-{rng.getrandbits(64):016x}-{i}" in bf
    )
    observed = false_positives / queries if queries else 0.0
    summary = metrics.get_summary()

    table = Table(title="Simulation Results")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("False negatives", str(len(missing)))
    table.add_row("False positives", f"{false_positives} / {queries}")
    table.add_row("Observed rate", f"{observed:.6f}")
    table.add_row("Theoretical rate", f"{bf.estimated_false_positive_rate():.6f}")
    table.add_row("Target rate", f"{rate:g}")
    table.add_row("Fill ratio", f"{bf.fill_ratio():.4f}")
    if summary['insert_latency']:
        table.add_row("Mean insert latency (us)", f"{summary['insert_latency']['mean'] * 1e6:.2f}")
    console.print(table)

    if prometheus:
        click.echo(metrics.export_prometheus(), nl=False)

    if missing:
        raise click.ClickException(f"{len(missing)} inserted values were not found")


@main.command()
@click.argument("output", type=click.Path())
@click.option("--expected", "-n", type=int, default=100000, help="Expected number of elements")
@click.option("--rate", "-p", type=float, default=0.01, help="Target false positive rate")
@click.option("--bits", "-m", type=int, help="Explicit capacity in bits")
@click.option("--hashes", "-k", type=int, help="Explicit number of hash positions")
@click.option("--algorithm", "-a", type=click.Choice(available_strategies()), default="blake2b")
@click.option("--concurrent", is_flag=True, help="Use the lock-striped bit vector")
def generate_config(output, expected, rate, bits, hashes, algorithm, concurrent):
    """Generate a configuration file."""
    config = FilterConfig(
        capacity_bits=bits,
        hash_count=hashes,
        expected_elements=expected,
        false_positive_rate=rate,
        hash_algorithm=algorithm,
        concurrent=concurrent,
    )
    try:
        config.validate()
    except BloomFilterError as e:
        raise click.ClickException(str(e))

    config.to_file(output)
    console.print(f"[green]Configuration saved to {output}[/green]")


@main.command()
def version():
    """Display version information."""
    from . import __version__
    console.print(f"[cyan]Bloom Engine v{__version__}[/cyan]")


if __name__ == "__main__":
    main()
