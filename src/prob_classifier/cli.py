"""Command-line interface for the probabilistic document classifier.

Provides ``classify``, ``demo``, and ``words`` commands with rich terminal
output using the ``click`` and ``rich`` libraries.

Usage::

    prob-doc-classifier classify free asdf bayes
    prob-doc-classifier classify --text "Make money online in our free casino"
    prob-doc-classifier classify --strategy fisher --kb counts.json free monad
    prob-doc-classifier demo
    prob-doc-classifier words --top-n 10

Settings not given on the command line are read from ``PROB_CLASSIFIER_*``
environment variables (a ``.env`` file in the working directory is loaded
first).
"""

from __future__ import annotations

import dataclasses
import json
import logging
import sys
from pathlib import Path

import click
from dotenv import find_dotenv, load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .classifier import ClassificationResult, Classifier, new_classifier
from .config import ClassifierSettings
from .distribution import Distribution
from .knowledge import InMemoryKnowledgeBase, KnowledgeBase, reference_knowledge_base
from .preprocessing import tokenize
from .strategies import available_strategies

console = Console()
err_console = Console(stderr=True)

#: Word lists from the reference corpus run by ``demo``.
DEMO_CORPUS: list[list[str]] = [
    ["free"],
    ["monad"],
    ["free", "asdf", "bayes", "quick", "jump", "test"],
    ["free", "monad", "asdf", "bayes", "quick", "jump", "test"],
]


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )


def _load_knowledge(path: Path | None) -> KnowledgeBase:
    if path is None:
        return reference_knowledge_base()
    return InMemoryKnowledgeBase.load(path)


@click.group()
@click.version_option(package_name="prob-doc-classifier")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def main(verbose: bool) -> None:
    """🧮 Probabilistic document classifier: naive Bayes and Fisher's method.

    Classifies word lists against a table of per-category word counts.
    """
    load_dotenv(find_dotenv(usecwd=True))
    _configure_logging(verbose)


@main.command()
@click.argument("words", nargs=-1)
@click.option("--text", "-t", default=None,
              help="Free text to tokenize and classify (added to WORDS).")
@click.option("--kb", "kb_path", type=click.Path(exists=True, path_type=Path), default=None,
              help="JSON knowledge base (defaults to the built-in Spam/Ham table).")
@click.option("--strategy", "-s", type=click.Choice(available_strategies()), default=None,
              help="Combination strategy.")
@click.option("--top-n", "-n", type=click.IntRange(min=0), default=None,
              help="Number of word classifiers to combine.")
@click.option("--most-informative-first/--least-informative-first", default=None,
              help="Which end of the informativeness ranking to combine first.")
@click.option("--output", "-o", type=click.Choice(["rich", "json"]), default="rich",
              help="Output format.")
def classify(
    words: tuple[str, ...],
    text: str | None,
    kb_path: Path | None,
    strategy: str | None,
    top_n: int | None,
    most_informative_first: bool | None,
    output: str,
) -> None:
    """Classify WORDS and show the per-category scores.

    Example: prob-doc-classifier classify free asdf bayes
    """
    word_list = list(words) + (tokenize(text) if text else [])

    try:
        settings = ClassifierSettings.from_env()
        overrides = {
            "strategy": strategy,
            "top_n": top_n,
            "most_informative_first": most_informative_first,
        }
        settings = dataclasses.replace(
            settings, **{k: v for k, v in overrides.items() if v is not None}
        )
        classifier = new_classifier(_load_knowledge(kb_path), settings=settings)
        result = classifier.explain(word_list)
    except (ValueError, OSError) as e:
        console.print(f"[bold red]Error:[/] {escape(str(e))}")
        sys.exit(1)

    if output == "json":
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        _render_result(result, word_list)


@main.command()
@click.option("--kb", "kb_path", type=click.Path(exists=True, path_type=Path), default=None,
              help="JSON knowledge base (defaults to the built-in Spam/Ham table).")
def demo(kb_path: Path | None) -> None:
    """Run the reference corpus through both strategies."""
    try:
        knowledge = _load_knowledge(kb_path)
        classifiers = [new_classifier(knowledge, name) for name in ("bayes", "fisher")]
    except (ValueError, OSError) as e:
        console.print(f"[bold red]Error:[/] {escape(str(e))}")
        sys.exit(1)

    console.print()
    console.print("[bold]test classifier[/]")
    for data in DEMO_CORPUS:
        console.print(f"use corpus: {escape(str(data))}")
        for classifier in classifiers:
            try:
                dist = classifier.posterior_over_categories(data)
            except ValueError as e:
                console.print(f"[bold red]Error:[/] {escape(str(e))}")
                sys.exit(1)
            _render_distribution(dist, classifier)
        console.print()


@main.command()
@click.option("--kb", "kb_path", type=click.Path(exists=True, path_type=Path), default=None,
              help="JSON knowledge base (defaults to the built-in Spam/Ham table).")
@click.option("--top-n", "-n", type=click.IntRange(min=1), default=20,
              help="Number of words to list.")
def words(kb_path: Path | None, top_n: int) -> None:
    """List known words ranked by informativeness."""
    try:
        classifier = new_classifier(_load_knowledge(kb_path))
    except (ValueError, OSError) as e:
        console.print(f"[bold red]Error:[/] {escape(str(e))}")
        sys.exit(1)

    table = Table(title="Most informative words", show_lines=False)
    table.add_column("#", justify="right", width=4)
    table.add_column("Word", style="cyan")
    table.add_column("Score", justify="right")
    for category in classifier.categories:
        table.add_column(f"P({category})", justify="right")

    for i, (word, score) in enumerate(classifier.most_informative_words(top_n), 1):
        dist = classifier[word].distribution
        table.add_row(
            str(i),
            word,
            f"{score:.4f}",
            *(f"{dist.probability(c):.4f}" for c in classifier.categories),
        )

    console.print(table)


# ------------------------------------------------------------------
# Rich rendering helpers
# ------------------------------------------------------------------

def _render_result(result: ClassificationResult, word_list: list[str]) -> None:
    """Render a ClassificationResult as a panel plus a score table."""
    console.print()
    console.print(Panel(
        f"[bold]{escape(str(result.predicted_class))}[/] ({result.confidence:.1%})\n"
        f"Strategy: {result.strategy} | "
        f"Words: {len(word_list)} | "
        f"Used: {escape(', '.join(result.words_used)) or '-'}",
        title="🧮 Classification",
        border_style="blue",
    ))

    table = Table(show_lines=False)
    table.add_column("Category", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Share", justify="right")
    total = sum(result.scores.values()) or 1.0
    for category, score in sorted(result.scores.items(), key=lambda x: x[1], reverse=True):
        style = "bold green" if category == result.predicted_class else ""
        table.add_row(str(category), f"{score:.6f}", f"{score / total:.1%}", style=style)

    console.print(table)
    console.print()


def _render_distribution(dist: Distribution, classifier: Classifier) -> None:
    """Print a distribution the way the reference script does."""
    console.print(f"[dim]{classifier.strategy_name}[/]")
    for category, mass in dist.items():
        console.print(f"  {escape(str(category))}: {mass:.6f}")


if __name__ == "__main__":
    main()
