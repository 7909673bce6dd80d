import json
from importlib.metadata import PackageNotFoundError, version as package_version
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import typer

from recordpack.core.types import TaggedValue
from recordpack.diff import Differ, assert_trees, render_diff, render_diff_summary
from recordpack.storage import StorageError, YamlAssertionValueStore, read_recording

app = typer.Typer(help="RecordKit CLI")


@dataclass(slots=True)
class _OutputOptions:
    quiet: bool = False
    stable_json: bool = True


_OUTPUT_OPTIONS = _OutputOptions()


def _resolve_cli_version() -> str:
    try:
        return package_version("recordkit")
    except PackageNotFoundError:
        from recordkit import __version__ as local_version

        return local_version


def _version_callback(value: bool) -> None:
    if not value:
        return
    typer.echo(_resolve_cli_version(), color=False)
    raise typer.Exit()


@app.callback()
def app_options(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show RecordKit version and exit.",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        help="Suppress non-error text output.",
    ),
    stable_json: bool = typer.Option(
        True,
        "--stable-json/--pretty-json",
        help="Emit stable compact JSON (or pretty JSON).",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Log debug details to stderr.",
    ),
) -> None:
    """Global output controls for all CLI commands."""
    _OUTPUT_OPTIONS.quiet = quiet
    _OUTPUT_OPTIONS.stable_json = stable_json
    if debug:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


def _echo(message: str, *, err: bool = False, force: bool = False) -> None:
    if _OUTPUT_OPTIONS.quiet and not err and not force:
        return
    typer.echo(message, err=err)


def _echo_json(payload: dict[str, Any], *, err: bool = False) -> None:
    if _OUTPUT_OPTIONS.stable_json:
        rendered = json.dumps(
            _jsonable(payload),
            ensure_ascii=True,
            sort_keys=True,
            separators=(",", ":"),
        )
    else:
        rendered = json.dumps(
            _jsonable(payload),
            ensure_ascii=True,
            sort_keys=True,
            indent=2,
        )
    typer.echo(rendered, err=err)


def _jsonable(value: Any) -> Any:
    if isinstance(value, TaggedValue):
        return {f"!{value.tag}": _jsonable(value.value)}
    if isinstance(value, dict):
        return {str(key): _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


def _parse_field_pairs(raw_pairs: list[str], option_name: str) -> list[tuple[str, str]]:
    pairs: list[tuple[str, str]] = []
    for raw in raw_pairs:
        class_name, separator, field_key = raw.rpartition("=")
        if not separator or not class_name or not field_key:
            raise typer.BadParameter(
                f"expected CLASS=FIELD, got {raw!r}",
                param_hint=option_name,
            )
        pairs.append((class_name, field_key))
    return pairs


@app.command()
def diff(
    before: Path = typer.Argument(..., help="Path to the recorded .yml file."),
    after: Path = typer.Argument(..., help="Path to the .yml file to compare against it."),
    identifying_field: list[str] = typer.Option(
        [],
        "--identifying-field",
        help="CLASS=FIELD whose mismatch makes two objects wholly different. Repeatable.",
    ),
    non_sequence_field: list[str] = typer.Option(
        [],
        "--non-sequence-field",
        help="CLASS=FIELD whose list is compared by index. Repeatable.",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Emit machine-readable diff output.",
    ),
) -> None:
    """Diff the recorded values of two recording files."""
    try:
        before_recording = read_recording(before)
        after_recording = read_recording(after)
    except StorageError as error:
        message = f"diff failed: {error}"
        if json_output:
            _echo_json(
                {
                    "status": "error",
                    "exit_code": 1,
                    "message": message,
                    "before_path": str(before),
                    "after_path": str(after),
                }
            )
        else:
            _echo(message, err=True)
        raise typer.Exit(code=1) from error

    differ = Differ()
    for class_name, field_key in _parse_field_pairs(identifying_field, "--identifying-field"):
        differ = differ.with_identifying_field(class_name, field_key)
    for class_name, field_key in _parse_field_pairs(non_sequence_field, "--non-sequence-field"):
        differ = differ.with_non_sequence_field(class_name, field_key)

    result = assert_trees(before_recording.values, after_recording.values, differ=differ)

    if json_output:
        diff_payload = result.to_dict()
        _echo_json(
            {
                **diff_payload,
                "diff_status": diff_payload.get("status"),
                "status": "ok",
                "exit_code": 0,
                "message": "diff completed",
                "before_path": str(before),
                "after_path": str(after),
            }
        )
        return

    _echo(f"before={before} after={after} {render_diff_summary(result.diff)}")
    if not result.passed:
        _echo(render_diff(result.diff))


@app.command()
def names(
    directory: Path = typer.Argument(..., help="Directory holding .yml recordings."),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Emit machine-readable output.",
    ),
) -> None:
    """List the test names that have recordings in a directory."""
    if not directory.is_dir():
        message = f"names failed: not a directory: {directory}"
        if json_output:
            _echo_json({"status": "error", "exit_code": 1, "message": message, "names": []})
        else:
            _echo(message, err=True)
        raise typer.Exit(code=1)

    store = YamlAssertionValueStore(directory, dict)
    stored = store.stored_names()
    if json_output:
        _echo_json(
            {
                "status": "ok",
                "exit_code": 0,
                "directory": str(directory),
                "names": stored,
            }
        )
        return
    for name in stored:
        _echo(name)


def main() -> None:
    app()
