import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Type

import click
from pydantic_settings import (
    BaseSettings,
    JsonConfigSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

from jsdocgen.errors import JsdocError
from jsdocgen.generator import JsdocGenerator, apply_edit
from jsdocgen.logger import logger, setup_stderr_logging
from jsdocgen.models import TextPosition
from jsdocgen.parsers import Dialect
from jsdocgen.scanner import apply_edits, generate_for_file, generate_for_workspace
from jsdocgen.settings import CONFIG_SECTION, RenderConfig, option_table, resolve_render_config


# Settings loading helpers
def load_settings(
    env_prefix: Optional[str] = None,
    env_file: Optional[str] = None,
    toml_file: Optional[str] = None,
    json_file: Optional[str] = None,
    **kwargs,
) -> RenderConfig:
    """
    Build a RenderConfig from keyword overrides, environment variables, an
    optional .env file and optional TOML / JSON files, in that priority.
    """
    config_dict = SettingsConfigDict(
        env_prefix=env_prefix if env_prefix is not None else "JSDOC_GENERATOR_",
        env_file=env_file,
        toml_file=toml_file,
        json_file=json_file,
    )

    class Settings(RenderConfig):
        model_config = config_dict

        @classmethod
        def settings_customise_sources(
            cls,
            settings_cls: Type[BaseSettings],
            init_settings: PydanticBaseSettingsSource,
            env_settings: PydanticBaseSettingsSource,
            dotenv_settings: PydanticBaseSettingsSource,
            file_secret_settings: PydanticBaseSettingsSource,
        ) -> Tuple[PydanticBaseSettingsSource, ...]:
            sources = [init_settings, env_settings, dotenv_settings]
            if toml_file:
                sources.append(TomlConfigSettingsSource(settings_cls))
            if json_file:
                sources.append(JsonConfigSettingsSource(settings_cls))
            return tuple(sources)

    return Settings(**kwargs)


def load_host_settings(path: Path) -> RenderConfig:
    """
    Read an editor style settings file with flat ``jsdoc-generator.*`` keys.
    """
    with open(path, encoding="utf-8") as f:
        data: Dict[str, Any] = json.load(f)
    return resolve_render_config(lambda key, default: data.get(key, default))


def load_config_file(path: Optional[Path]) -> RenderConfig:
    if path is None:
        return load_settings()
    suffix = path.suffix.lower()
    if suffix == ".toml":
        return load_settings(toml_file=str(path))
    if suffix == ".json":
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        if any(str(k).startswith(f"{CONFIG_SECTION}.") for k in data):
            return load_host_settings(path)
        return load_settings(json_file=str(path))
    return load_settings(env_file=str(path))


def print_options() -> None:
    """Print the option table: host key, default and effect."""
    click.echo("Options:")
    for opt in option_table():
        click.echo(f"  {opt.key:<50} {opt.description} [default: {opt.default!r}]")


def _setup_logging(debug: bool) -> None:
    setup_stderr_logging(logging.DEBUG if debug else logging.WARNING)


def _read(path: Path) -> str:
    with open(path, encoding="utf-8", newline="") as f:
        return f.read()


def _write(path: Path, text: str) -> None:
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(text)


_path_argument = click.argument(
    "path",
    type=click.Path(exists=True, file_okay=True, dir_okay=False, readable=True, path_type=Path),
)
_config_option = click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Settings file (.toml, .json or .env).",
)
_language_option = click.option(
    "--language",
    type=click.Choice([d.value for d in Dialect]),
    default=None,
    help="Grammar to parse with (default: from the file extension).",
)
_debug_option = click.option(
    "--debug/--no-debug", default=False, help="Enable debug logging."
)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
def main() -> None:
    """Generate JSDoc comments for JavaScript and TypeScript sources."""


@main.command("file")
@_path_argument
@click.option(
    "--write/--no-write",
    default=False,
    help="Write the result back to PATH instead of printing it.",
)
@_config_option
@_language_option
@_debug_option
def file_command(
    path: Path,
    write: bool,
    config_file: Optional[Path],
    language: Optional[str],
    debug: bool,
) -> None:
    """
    Document every declaration of PATH.
    """
    _setup_logging(debug)
    config = load_config_file(config_file)
    text = _read(path)
    try:
        result = generate_for_file(text, config, dialect=language, path=path)
    except JsdocError as ex:
        raise click.ClickException(ex.message)
    out = apply_edits(text, result.edits)

    if write:
        _write(path, out)
        click.echo(f"Documented {len(result.edits)} declarations in {path}")
    else:
        click.echo(out, nl=False)
    for skipped in result.skipped:
        click.echo(
            f"Skipped line {skipped.line + 1}: {skipped.message}", err=True
        )
    logger.debug("File done", path=str(path), edits=len(result.edits))


@main.command("cursor")
@_path_argument
@click.option("--line", type=int, required=True, help="1-based cursor line.")
@click.option("--column", type=int, default=1, help="1-based cursor column.")
@click.option(
    "--write/--no-write",
    default=False,
    help="Write the result back to PATH instead of printing it.",
)
@_config_option
@_language_option
@_debug_option
def cursor_command(
    path: Path,
    line: int,
    column: int,
    write: bool,
    config_file: Optional[Path],
    language: Optional[str],
    debug: bool,
) -> None:
    """
    Document the declaration at or below LINE of PATH.
    """
    _setup_logging(debug)
    generator = JsdocGenerator(load_config_file(config_file))
    text = _read(path)
    position = TextPosition(line=max(line - 1, 0), character=max(column - 1, 0))
    try:
        edit = generator.generate_at(text, position, dialect=language, path=path)
    except JsdocError as ex:
        raise click.ClickException(ex.message)
    out = apply_edit(text, edit)
    if write:
        _write(path, out)
        click.echo(f"Documented {edit.name or edit.kind.value} in {path}")
    else:
        click.echo(out, nl=False)


@main.command("options")
def options_command() -> None:
    """
    Print the configuration options.
    """
    print_options()


@main.command("workspace")
def workspace_command() -> None:
    """
    Document every file of the workspace.
    """
    click.echo(generate_for_workspace(), err=True)


if __name__ == "__main__":
    main()
