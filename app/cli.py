from __future__ import annotations

import logging
from pathlib import Path

import click

from config.settings import load_settings
from driver import BatchDriver, PluginCompilerError, split_classpath
from toolchain import ScriptDefinition

logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
logger = logging.getLogger("plugin_compiler")


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("input_dir", type=click.Path(file_okay=False, path_type=Path))
@click.argument("output_dir", type=click.Path(file_okay=False, path_type=Path))
@click.argument("manifest_path", type=click.Path(dir_okay=False, path_type=Path))
@click.argument("classpath", type=str)
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="JSON/JSONC settings file.",
)
@click.option("--suffix", type=str, default=None, help="File name suffix of plugin scripts (default: .plugin.py).")
@click.option("--max-depth", type=click.IntRange(min=0), default=None, help="Maximum directory depth searched (default: 1024).")
@click.option("--template", type=str, default=None, help="Script template class as 'module:Class'.")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging.")
def main(
    input_dir: Path,
    output_dir: Path,
    manifest_path: Path,
    classpath: str,
    config_file: Path | None,
    suffix: str | None,
    max_depth: int | None,
    template: str | None,
    verbose: bool,
) -> None:
    """Compile every plugin script under INPUT_DIR into OUTPUT_DIR and write MANIFEST_PATH.

    CLASSPATH is a colon-separated list of extra import locations.
    """
    try:
        settings = load_settings(config_file).override(
            script_suffix=suffix,
            max_search_depth=max_depth,
            script_template=template,
            log_level="DEBUG" if verbose else None,
        )
        logging.getLogger().setLevel(settings.logging_level)

        driver = BatchDriver(
            script_template=ScriptDefinition.load(settings.script_template),
            script_suffix=settings.script_suffix,
            max_search_depth=settings.max_search_depth,
        )
        report = driver.run(input_dir, output_dir, manifest_path, split_classpath(classpath))
    except (PluginCompilerError, OSError, ValueError, ImportError) as e:
        logger.exception("Build failed: %s", e)
        raise SystemExit(1) from e

    click.echo(f"Compiled {len(report.results)} plugin(s).")


if __name__ == "__main__":
    main()
