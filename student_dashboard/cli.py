"""
CLI commands for the student collection.

Registered on the Flask CLI as ``flask students``. Every command works
against the app's in-process store, or against a running service when
``--api-url`` is given.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import click
from flask import current_app
from flask.cli import with_appcontext

from student_dashboard.clients import HttpStudentTransport, StoreStudentTransport, TransportCollection
from student_dashboard.records import FilterSpec, ImportMode, apply_filters
from student_dashboard.records.errors import StudentRecordsError
from student_dashboard.records.filters import SORT_KEYS
from student_dashboard.records.reconcile import export_csv, import_csv
from student_dashboard.records.types import DEFAULT_AVATAR_TEMPLATE
from student_dashboard.utils.app_services import get_student_store
from student_dashboard.utils.uploads import decode_upload


def _resolve_transport(api_url: Optional[str]):
    if api_url:
        timeout = current_app.config.get("STUDENTS_API_TIMEOUT_SECONDS", 10.0)
        return HttpStudentTransport(api_url, timeout=timeout, logger=current_app.logger)
    return StoreStudentTransport(get_student_store())


def _format_row(record) -> str:
    return "\t".join(
        [str(record.id), record.name, record.email, record.course, record.grade, record.enrollment_date]
    )


api_url_option = click.option(
    "--api-url",
    default=None,
    help="Base URL of a running student service. Defaults to the in-process store.",
)


@click.group(name="students")
def students_cli():
    """Student collection commands."""


@students_cli.command("list")
@click.option("--search", help="Case-insensitive substring of the name or the email.")
@click.option("--name", help="Case-insensitive substring of the name.")
@click.option("--email", help="Case-insensitive substring of the email.")
@click.option("--course", help="Exact course.")
@click.option("--grade", help="Exact grade.")
@click.option("--from", "date_from", help="Earliest enrollment date (YYYY-MM-DD).")
@click.option("--to", "date_to", help="Latest enrollment date (YYYY-MM-DD).")
@click.option("--min-performance", type=int, help="Lowest attendance percentage.")
@click.option("--max-performance", type=int, help="Highest attendance percentage.")
@click.option("--sort", help=f"One of: {', '.join(SORT_KEYS)}.")
@click.option("--direction", type=click.Choice(["asc", "desc"]), default="asc", show_default=True)
@click.option("--json", "as_json", is_flag=True, help="Emit JSON instead of a table.")
@api_url_option
@with_appcontext
def students_list(
    search,
    name,
    email,
    course,
    grade,
    date_from,
    date_to,
    min_performance,
    max_performance,
    sort,
    direction,
    as_json: bool,
    api_url: Optional[str],
):
    """List students matching the given filters."""
    try:
        spec = FilterSpec.coerce(
            search=search,
            name=name,
            email=email,
            course=course,
            grade=grade,
            enrollment_date_from=date_from,
            enrollment_date_to=date_to,
            performance_min=min_performance,
            performance_max=max_performance,
            sort=sort,
            direction=direction,
        )
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc

    try:
        students = apply_filters(_resolve_transport(api_url).list_students(), spec)
    except StudentRecordsError as exc:
        raise click.ClickException(str(exc)) from exc

    if as_json:
        click.echo(json.dumps([student.to_dict() for student in students], indent=2))
        return
    if not students:
        click.echo("No students found.")
        return
    for student in students:
        click.echo(_format_row(student))


@students_cli.command("import")
@click.argument("file_path", type=click.Path(path_type=Path, exists=True, dir_okay=False))
@click.option(
    "--mode",
    type=click.Choice([mode.value for mode in ImportMode]),
    default=None,
    help="Merge into or replace a non-empty collection. Required when students already exist.",
)
@click.option("--summary-json", is_flag=True, help="Print the import summary as JSON.")
@api_url_option
@with_appcontext
def students_import(file_path: Path, mode: Optional[str], summary_json: bool, api_url: Optional[str]):
    """Import students from a CSV file."""
    collection = TransportCollection(_resolve_transport(api_url))
    try:
        report = import_csv(
            collection,
            decode_upload(file_path.read_bytes()),
            mode,
            avatar_template=current_app.config.get("STUDENTS_AVATAR_PLACEHOLDER_URL", DEFAULT_AVATAR_TEMPLATE),
        )
    except StudentRecordsError as exc:
        raise click.ClickException(str(exc)) from exc

    for diagnostic in report.diagnostics:
        click.echo(f"Warning: {diagnostic}", err=True)
    for error in report.errors:
        click.echo(error.message, err=True)

    summary = report.summary
    if summary_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
    else:
        click.echo(
            f"Imported {summary.imported_count} students "
            f"(mode={summary.mode.value}, existing={summary.existing_before}, removed={summary.removed}, "
            f"skipped rows={len({error.row for error in report.errors})})"
        )


@students_cli.command("export")
@click.option(
    "--output",
    "output_path",
    type=click.Path(path_type=Path, dir_okay=False, writable=True),
    default=None,
    help="File to write. Prints to stdout when omitted.",
)
@api_url_option
@with_appcontext
def students_export(output_path: Optional[Path], api_url: Optional[str]):
    """Export students as CSV."""
    try:
        students = _resolve_transport(api_url).list_students()
    except StudentRecordsError as exc:
        raise click.ClickException(str(exc)) from exc

    text = export_csv(students)
    if output_path is None:
        click.echo(text, nl=False)
        return
    output_path.write_text(text, encoding="utf-8")
    click.echo(f"Exported {len(students)} students to {output_path}")
