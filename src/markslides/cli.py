"""markslides CLI entrypoint."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from markslides.exceptions import MarkslidesError
from markslides.parser.base import Presentation
from markslides.parser.block_parser import Parser
from markslides.parser.resolver import resolve_presentation
from markslides.renderer.html_renderer import HTMLRenderer

logger = logging.getLogger(__name__)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument(
    "input_paths",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option("--output", "-o", type=click.Path(path_type=Path), required=True, help="Output HTML path")
@click.option("--language", default="java", show_default=True, help="Default language of untagged code blocks")
@click.option("--front-matter", type=click.IntRange(min=0), default=0, show_default=True, help="Pages before the first slide")
@click.option("--slide-language", default="en", show_default=True, help="Language of the slides (quotes, labels)")
@click.option("--title1", default="", help="Main title")
@click.option("--title2", default="", help="Subtitle")
@click.option("--author", default="", help="Author shown on the title page")
@click.option("--animate", is_flag=True, help="Emit one slide section per animation step")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def main(
    input_paths: tuple[Path, ...],
    output: Path,
    language: str,
    front_matter: int,
    slide_language: str,
    title1: str,
    title2: str,
    author: str,
    animate: bool,
    verbose: bool,
) -> None:
    """Compile Markdown chapter files (in the given order) into one HTML presentation."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    presentation = Presentation(
        slide_language=slide_language,
        title1=title1,
        title2=title2,
        author=author,
        default_language=language,
    )
    parser = Parser(front_matter=front_matter)

    try:
        for input_path in input_paths:
            logger.debug("Parsing %s", input_path)
            parser.parse(input_path, language, presentation)
        resolve_presentation(presentation)
        presentation.build_toc()
        html = HTMLRenderer(animate=animate).render(presentation)
    except MarkslidesError as exc:
        raise click.ClickException(str(exc)) from exc

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(html, encoding="utf-8")

    click.echo(f"Rendered: {output}")


if __name__ == "__main__":  # pragma: no cover
    main()
