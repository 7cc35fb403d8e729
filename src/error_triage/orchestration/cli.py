"""
CLI for training, prediction and registry inspection using Click.
"""

import logging
import sys
from typing import Any, Dict, Optional

import click

from error_triage.data.loaders import NdjsonLoader, iter_records
from error_triage.engine.classifier import load_classifier
from error_triage.exceptions import ErrorTriageError
from error_triage.utils.artifacts_registry import ArtifactsRegistry
from error_triage.utils.config_loader import ConfigLoader
from .orchestrator import create_orchestrator

HANDLED_ERRORS = (ErrorTriageError, ValueError, FileNotFoundError, KeyError)


def fail(message: str):
    click.echo(click.style(f"✗ Error: {message}", fg="red"), err=True)
    sys.exit(1)


def get_config_loader(config_dir: str) -> ConfigLoader:
    """Helper to get initialized config loader."""
    loader = ConfigLoader(config_dir=config_dir)
    try:
        loader.load_all()
    except FileNotFoundError as e:
        fail(str(e))
    return loader


def get_registry(config_loader: ConfigLoader) -> ArtifactsRegistry:
    """Helper to get initialized registry."""
    registry_config = config_loader.get("registry")
    if not registry_config:
        fail("Registry configuration not found")
    return ArtifactsRegistry(registry_config)


def get_training_config(
    config_loader: ConfigLoader, input_path: Optional[str], max_data: Optional[int]
) -> Dict[str, Any]:
    training_config = config_loader.get("training", {})
    corpus_config = training_config.setdefault("corpus", {})

    if input_path:
        corpus_config["input_path"] = input_path
    if max_data is not None:
        corpus_config["max_data"] = max_data

    if not corpus_config.get("input_path"):
        click.echo(click.style("Error: No input path specified", fg="red"), err=True)
        click.echo("Use --input or set training.corpus.input_path", err=True)
        sys.exit(1)

    return training_config


def resolve_corpus_path(ctx_obj, input_path: Optional[str]) -> str:
    path = input_path or ctx_obj["config"].get("training.corpus.input_path")
    if not path:
        fail("No input path specified")
    return path


@click.group()
@click.version_option(version="1.0.0")
@click.option(
    "--config-dir",
    default="configs",
    envvar="ERROR_TRIAGE_CONFIG_DIR",
    show_default=True,
    help="Directory holding *_config.yaml files",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, config_dir, verbose):
    """Error report classifier: TF-IDF features + feed-forward network."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["config"] = get_config_loader(config_dir)


@cli.command()
@click.option("--input", "input_path", type=click.Path(exists=True), help="NDJSON corpus path")
@click.option("--max-data", type=int, help="Maximum number of labelled records to use")
@click.pass_obj
def train(obj, input_path, max_data):
    """Fit the vectorizer, train the model and store a new version."""
    config_loader = obj["config"]
    training_config = get_training_config(config_loader, input_path, max_data)

    registry = get_registry(config_loader)
    orchestrator = create_orchestrator(training_config, registry=registry)

    try:
        version_id = orchestrator.run()
    except HANDLED_ERRORS as e:
        click.echo(click.style(f"✗ Pipeline failed: {e}", fg="red"), err=True)
        sys.exit(1)

    report = orchestrator.context["training_report"]
    click.echo(click.style("✓ Pipeline completed successfully!", fg="green"))
    click.echo(f"Version: {click.style(version_id, fg='cyan')}")
    click.echo(
        f"Trained {report.epochs} epochs, final loss {report.final_loss:.4f}"
    )


@cli.command()
@click.option("--text", required=True, help="Error message")
@click.option("--callstack", default="", help="Error callstack")
@click.option("--version", type=str, help="Version ID to use (default: latest)")
@click.option("--top", type=int, default=3, show_default=True, help="Categories to list")
@click.pass_obj
def predict(obj, text, callstack, version, top):
    """Classify a single error report."""
    registry = get_registry(obj["config"])

    try:
        with registry(mode="load", version_id=version) as reg:
            classifier = load_classifier(reg)
        prediction = classifier.predict(text, callstack)
    except HANDLED_ERRORS as e:
        fail(str(e))

    click.echo(
        f"Category: {click.style(prediction.category, fg='cyan', bold=True)} "
        f"({prediction.confidence:.4f})"
    )
    for score in prediction.all_predictions[:top]:
        click.echo(f"  {click.style(score.category, fg='yellow')}: {score.confidence:.4f}")


@cli.command()
@click.option("--input", "input_path", type=click.Path(exists=True), help="NDJSON corpus path")
@click.option("--max-data", type=int, help="Maximum number of labelled records to use")
@click.option("--version", type=str, help="Version ID to use (default: latest)")
@click.pass_obj
def evaluate(obj, input_path, max_data, version):
    """Count correct and incorrect predictions over a labelled corpus."""
    path = resolve_corpus_path(obj, input_path)
    registry = get_registry(obj["config"])

    try:
        with registry(mode="load", version_id=version) as reg:
            classifier = load_classifier(reg)
        result = classifier.evaluate(iter_records(path, max_data))
    except HANDLED_ERRORS as e:
        fail(str(e))

    click.echo(
        f"{click.style(str(result.successes), fg='green')} successes and "
        f"{click.style(str(result.failures), fg='red')} failures "
        f"(accuracy {result.accuracy:.4f})"
    )


@cli.command()
@click.option("--input", "input_path", type=click.Path(exists=True), help="NDJSON corpus path")
@click.pass_obj
def stats(obj, input_path):
    """Show record count and category distribution of a corpus."""
    path = resolve_corpus_path(obj, input_path)

    try:
        df = NdjsonLoader({"filepath": path}).load()
    except HANDLED_ERRORS as e:
        fail(str(e))

    click.echo(f"Records: {click.style(str(len(df)), fg='cyan')}")
    if df.empty:
        return
    for category, count in df["category"].value_counts(sort=True).items():
        click.echo(f"  {click.style(category, fg='yellow')}: {count}")


@cli.command("list-versions")
@click.pass_obj
def list_versions(obj):
    """List all available versions."""
    registry = get_registry(obj["config"])
    versions = registry.list_versions()

    if not versions:
        click.echo("No versions found")
        return

    click.echo(f"Found {click.style(str(len(versions)), fg='cyan')} version(s):\n")

    for ver in versions:
        try:
            registry.load_version(ver)
        except (FileNotFoundError, ValueError) as e:
            click.echo(f"  {click.style(ver, fg='red')} (Error loading: {e})")
            continue
        version_obj = registry.versions[ver]
        artifact_count = sum(len(arts) for arts in version_obj.artifacts.values())
        click.echo(f"  {click.style(ver, fg='cyan')} (Artifacts: {artifact_count})")


@cli.command()
@click.option("--type", "config_type", type=str, help="Config type to show")
@click.pass_obj
def config(obj, config_type):
    """Display current configuration."""
    config_loader = obj["config"]

    click.echo(click.style("Current Configuration:", fg="yellow", bold=True))
    click.echo()

    if config_type:
        click.echo(f"{click.style(config_type.upper() + ' Config:', fg='cyan')}")
        click.echo(config_loader.get(config_type))
    else:
        for name, cfg in config_loader.configs.items():
            click.echo(f"{click.style(name.upper() + ' Config:', fg='cyan')}")
            click.echo(cfg)
            click.echo()


if __name__ == "__main__":
    cli()
