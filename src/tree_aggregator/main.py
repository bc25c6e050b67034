# src/tree_aggregator/main.py
import os
import subprocess
from enum import Enum
from pathlib import Path
from typing import List, Optional

import typer
from platformdirs import user_downloads_dir
from typing_extensions import Annotated

from .errors import UnitLoadError
from .ignore_file import IGNORE_FILENAME, load_ignore_patterns
from .logging_config import setup_logging
from .logic import aggregate
from .paths import Caller
from .render import render_json, render_tree, render_yaml

try:
    from importlib.metadata import PackageNotFoundError, version
    __version__ = version("tree-aggregator")
except PackageNotFoundError:
    # 패키지가 설치되지 않은 상태 (소스 트리에서 직접 실행)
    __version__ = "0.1.0"  # pyproject.toml 과 일치시킬 것


class OutputFormat(str, Enum):
    json = "json"
    yaml = "yaml"
    tree = "tree"


class LogLevel(str, Enum):
    debug = "debug"
    info = "info"
    warning = "warning"
    error = "error"


_EXTENSIONS = {OutputFormat.json: "json", OutputFormat.yaml: "yaml", OutputFormat.tree: "txt"}


# --- Typer 앱 생성 및 기본 설정 ---
app = typer.Typer(
    name="tagr",
    help="Loads every unit (Python module, JSON or YAML file) under a directory into one nested structure.",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool):
    if value:
        typer.echo(f"tagr version: {__version__}")
        raise typer.Exit()


@app.callback()
def main_options(
    version: Annotated[Optional[bool], typer.Option(
        "--version", "-v",
        help="Show the application's version and exit.",
        callback=version_callback,
        is_eager=True,
    )] = None,
):
    """
    tagr: aggregate a directory tree of units.
    """


def _default_output_path(fmt: OutputFormat) -> Path:
    filename = f"tagr_output.{_EXTENSIONS[fmt]}"
    try:
        return Path(user_downloads_dir()) / filename
    except Exception as e:  # 다운로드 폴더를 알 수 없으면 현재 디렉토리
        typer.secho(f"Warning: Could not determine Downloads directory ({e}). Using current directory for output.", fg=typer.colors.YELLOW, err=True)
        return Path.cwd() / filename


# --- 'run' 하위 명령어 ---
@app.command()
def run(
    input_path: Annotated[Path, typer.Argument(
        help="Directory (or single file) to aggregate.",
        exists=True,
        file_okay=True,
        dir_okay=True,
        readable=True,
        resolve_path=True,
    )] = Path("."),
    output_path: Annotated[Optional[str], typer.Option(
        "--output", "-o",
        help="Output file. Use '-' for stdout. Defaults to 'tagr_output.<ext>' in the Downloads folder.",
    )] = None,
    output_format: Annotated[OutputFormat, typer.Option(
        "--format", "-f", help="Output format.",
    )] = OutputFormat.json,
    recurse: Annotated[bool, typer.Option(
        "--recurse/--no-recurse", help="Recurse into subdirectories.",
    )] = True,
    index_prop: Annotated[bool, typer.Option(
        "--index-prop", help="Keep index files as an 'index' key instead of merging them into their directory.",
    )] = False,
    index_name: Annotated[str, typer.Option(
        "--index-name", help="Base name of index files.",
    )] = "index",
    exclude: Annotated[Optional[List[str]], typer.Option(
        "--exclude", "-e", help=f"Name pattern to exclude (gitwildmatch). Added to {IGNORE_FILENAME} rules.",
    )] = None,
    keep_siblings: Annotated[bool, typer.Option(
        "--keep-siblings", help="Do not drop files next to an index file.",
    )] = False,
    keep_children: Annotated[bool, typer.Option(
        "--keep-children", help="Do not drop subdirectories of a directory holding an index file.",
    )] = False,
    log_level: Annotated[LogLevel, typer.Option(
        "--log-level", help="Logging level.",
    )] = LogLevel.warning,
):
    """
    Aggregates all units under INPUT_PATH and writes the nested result.
    Names matching .tagrignore rules in INPUT_PATH are excluded.
    """
    setup_logging(log_level.value)

    # --- 1. 제외 규칙 ---
    ignore_root = input_path if input_path.is_dir() else input_path.parent
    patterns = load_ignore_patterns(ignore_root) + list(exclude or [])

    options = {
        "recurse": recurse,
        "index_prop": index_prop,
        "index_name": index_name,
        "exclude": {
            "files": patterns or None,
            "siblings": not keep_siblings,
            "children": not keep_children,
        },
    }

    # --- 2. 집계 ---
    try:
        result = aggregate(str(input_path), options, caller=Caller(path=Path.cwd() / "tagr"))
    except FileNotFoundError as e:
        typer.secho(f"Error: Input path or a required file not found: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    except PermissionError as e:
        typer.secho(f"Error: Permission denied accessing path or file: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    except UnitLoadError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    except Exception as e:
        typer.secho(f"An unexpected error occurred during run: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=3)

    # --- 3. 출력 ---
    if output_format is OutputFormat.yaml:
        rendered = render_yaml(result)
    elif output_format is OutputFormat.tree:
        rendered = render_tree(result, root_name=input_path.name)
    else:
        rendered = render_json(result)

    if output_path == "-":
        typer.echo(rendered)
        return

    target_file = Path(output_path).resolve() if output_path else _default_output_path(output_format)
    try:
        target_file.parent.mkdir(parents=True, exist_ok=True)
        target_file.write_text(rendered + "\n", encoding="utf-8")
        typer.secho(f"Successfully generated output to {target_file}", fg=typer.colors.GREEN, err=True)
    except OSError as e:
        typer.secho(f"Error writing output file {target_file}: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2)


# --- 'ignore' 하위 명령어 ---
@app.command()
def ignore():
    """
    Opens the .tagrignore file in the current directory for editing.
    Creates the file if it doesn't exist.
    """
    ignore_file_path = Path.cwd() / IGNORE_FILENAME

    try:
        if not ignore_file_path.exists():
            typer.echo(f"'{ignore_file_path.name}' not found. Creating empty file...")
            ignore_file_path.touch()
            typer.secho(f"Created '{ignore_file_path.name}'.", fg=typer.colors.GREEN)
    except OSError as e:
        typer.secho(f"An error occurred creating {IGNORE_FILENAME}: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    typer.echo(f"Attempting to open '{ignore_file_path.name}' in your editor...")

    # EDITOR 환경 변수가 있으면 우선 사용, 없으면 typer.launch
    editor = os.environ.get("EDITOR")
    try:
        if editor:
            subprocess.run([editor, str(ignore_file_path)], check=True)
        else:
            typer.launch(str(ignore_file_path), locate=False)
        typer.echo("Editor launched. Please edit and save the file.")
    except (OSError, subprocess.CalledProcessError) as e:
        typer.secho(f"Failed to launch editor: {e}", fg=typer.colors.RED, err=True)
        typer.echo("Please open the file manually.")


if __name__ == "__main__":
    app()
