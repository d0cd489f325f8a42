"""CLI entry point for pcfuse.

Usage:
    pcfuse run --log-file run.log            # Run full pipeline
    pcfuse run-step fuse_frames -i '{...}'   # Run single step
    pcfuse info                              # Show pipeline info
    pcfuse measure cloud.ply 0 0 0 1 0 0     # Distance between two snapped points
    pcfuse preview cloud.ply --mode height   # Render a preview PNG
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from pcfuse.core.logging import setup_logging

app = typer.Typer(name="pcfuse", help="Depth frame to point cloud fusion")
console = Console()

DEFAULT_CONFIG = Path("configs/pipeline.yaml")


@app.command()
def run(
    config: Path = typer.Option(DEFAULT_CONFIG, help="Pipeline config path"),
    log_level: str = typer.Option("INFO", help="Logging level"),
    log_file: Path = typer.Option(None, help="Also append log records to this file"),
) -> None:
    """Run the full pipeline."""
    setup_logging(log_level, log_file=log_file)
    from pcfuse.core.pipeline_runner import run_pipeline

    results = run_pipeline(config)
    for name, output in results.items():
        console.print(f"[green]{name}[/green]: {output.model_dump_json()}")


@app.command()
def run_step(
    step_name: str = typer.Argument(..., help="Step name (e.g. fuse_frames)"),
    config: Path = typer.Option(DEFAULT_CONFIG, help="Pipeline config path"),
    input_json: str = typer.Option(None, "--input", "-i", help="Input as JSON string"),
    log_file: Path = typer.Option(None, help="Also append log records to this file"),
) -> None:
    """Run a single pipeline step."""
    import json

    setup_logging(log_file=log_file)
    from pcfuse.core.pipeline_runner import load_pipeline_config, import_step_class, load_step_config

    pipeline_cfg = load_pipeline_config(config)
    entry = next((s for s in pipeline_cfg.steps if s.name == step_name), None)
    if entry is None:
        console.print(f"[red]Step '{step_name}' not found in pipeline config[/red]")
        raise typer.Exit(1)

    step_cls = import_step_class(entry.module)
    step_config = load_step_config(Path(entry.config_file), step_cls.config_type)
    step_instance = step_cls(config=step_config, data_root=pipeline_cfg.data_root)

    input_data = dict(entry.inputs)
    if input_json:
        input_data.update(json.loads(input_json))
    else:
        schema = step_cls.input_type.model_json_schema()
        required = [f for f in schema.get("required", []) if f not in input_data]
        if required:
            console.print(f"[yellow]Step '{step_name}' requires input fields: {required}[/yellow]")
            console.print("[yellow]Use --input/-i with JSON string, e.g.:[/yellow]")
            console.print(f'  pcfuse run-step {step_name} -i \'{{"field": "value"}}\'')
            raise typer.Exit(1)

    console.print(f"[green]Running step: {step_name}[/green]")
    step_input = step_cls.input_type(**input_data)
    output = step_instance.execute(step_input)
    console.print(f"[green]Done. Output:[/green] {output.model_dump_json(indent=2)}")


@app.command()
def info(config: Path = typer.Option(DEFAULT_CONFIG, help="Pipeline config path")) -> None:
    """Show pipeline steps and their status."""
    from pcfuse.core.pipeline_runner import load_pipeline_config

    pipeline_cfg = load_pipeline_config(config)
    table = Table(title=f"Pipeline: {pipeline_cfg.project_name}")
    table.add_column("#", style="dim")
    table.add_column("Step", style="cyan")
    table.add_column("Module", style="green")
    table.add_column("Enabled", style="yellow")
    table.add_column("Depends On", style="dim")

    for i, step in enumerate(pipeline_cfg.steps, 1):
        table.add_row(
            str(i),
            step.name,
            step.module,
            "Y" if step.enabled else "N",
            ", ".join(step.depends_on) if step.depends_on else "-",
        )
    console.print(table)


@app.command()
def measure(
    ply: Path = typer.Argument(..., help="Point cloud PLY"),
    x1: float = typer.Argument(...),
    y1: float = typer.Argument(...),
    z1: float = typer.Argument(...),
    x2: float = typer.Argument(...),
    y2: float = typer.Argument(...),
    z2: float = typer.Argument(...),
) -> None:
    """Snap two points to the nearest cloud points and print their distance."""
    from pcfuse.utils.geometry import measure as measure_points
    from pcfuse.utils.io import read_ply

    if not ply.exists():
        console.print(f"[red]PLY file not found: {ply}[/red]")
        raise typer.Exit(1)

    snapshot = read_ply(ply)
    if len(snapshot) == 0:
        console.print("[red]Point cloud is empty[/red]")
        raise typer.Exit(1)

    a, b, dist = measure_points(snapshot.positions, (x1, y1, z1), (x2, y2, z2))
    table = Table(title="Measurement")
    table.add_column("Point", style="cyan")
    table.add_column("X")
    table.add_column("Y")
    table.add_column("Z")
    for label, p in (("A", a), ("B", b)):
        table.add_row(label, *(f"{v:.4f}" for v in p))
    console.print(table)
    console.print(f"[green]Distance:[/green] {dist:.4f} m ({dist * 100:.1f} cm)")


@app.command()
def preview(
    ply: Path = typer.Argument(..., help="Point cloud PLY"),
    mode: str = typer.Option("original", help="Color mode: original|depth|height"),
    stride: int = typer.Option(10, help="Plot every N-th point"),
    out: Path = typer.Option(None, help="Save PNG here instead of opening a window"),
) -> None:
    """Render a point cloud preview."""
    from pcfuse.utils.io import read_ply
    from pcfuse.utils.visualization import COLOR_MODES, colorize, plot_point_cloud

    if mode not in COLOR_MODES:
        console.print(f"[red]Unknown color mode '{mode}', expected one of {COLOR_MODES}[/red]")
        raise typer.Exit(1)
    if out is not None:
        import matplotlib

        matplotlib.use("Agg")

    snapshot = colorize(read_ply(ply), mode)
    plot_point_cloud(snapshot, title=ply.name, stride=stride, save_path=out)
    if out is not None:
        console.print(f"[green]Saved preview -> {out}[/green]")


if __name__ == "__main__":
    app()
