#!/usr/bin/env python3
"""
packet-import - CLI tool for loading CSV files into MySQL tables.

Rows are sent as multi-row INSERT statements packed up to the server's
max_allowed_packet, inside one transaction when more than one statement is
needed.
"""
import logging
import sys
from typing import List, Optional, Sequence

import click
import polars as pl
from pymysql.converters import escape_item
from rich.console import Console
from rich.table import Table

from packet_import import config
from packet_import.adapters.mysql import MySQLAdapter
from packet_import.errors import PacketImportError
from packet_import.importer import BulkImporter, ImportOptions, ImportRequest
from packet_import.packer import QUERY_OVERHEAD, fragment_size, statement_size
from packet_import.statement import ColumnList, build_insert_prefix

# Initialize console for rich output
console = Console()

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> logging.Logger:
    """Set up logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format=config.LOG_FORMAT,
        datefmt=config.LOG_DATE_FORMAT,
    )
    return logging.getLogger("packet_import")


def split_columns(value: Optional[str]) -> List[str]:
    """Parse a comma-separated column list option."""
    if not value:
        return []
    return [col.strip() for col in value.split(",") if col.strip()]


def read_csv_rows(csv_file: str, delimiter: str, columns: Sequence[str]) -> pl.DataFrame:
    """
    Read a CSV file as text columns.

    Args:
        csv_file: Path to the CSV file (must have a header row)
        delimiter: CSV delimiter
        columns: Columns to keep, in order; all columns when empty

    Returns:
        DataFrame with every column read as a string
    """
    df = pl.read_csv(
        csv_file,
        separator=delimiter,
        has_header=True,
        infer_schema_length=0,
        null_values=["NULL", "\\N"],
    )
    if columns:
        df = df.select(list(columns))
    return df


def print_plan(batches: List[List[str]], prefix: str, suffix: str) -> None:
    """Print a table with one line per statement of an import plan."""
    reserved = QUERY_OVERHEAD + fragment_size(prefix) + fragment_size(suffix)

    table = Table(title="Import plan")
    table.add_column("Statement", justify="right")
    table.add_column("Rows", justify="right")
    table.add_column("Bytes", justify="right")

    for number, batch in enumerate(batches, start=1):
        table.add_row(str(number), str(len(batch)), str(statement_size(batch, reserved)))

    console.print(table)


@click.group()
@click.version_option(version="0.1.0")
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
def cli(verbose: bool):
    """
    packet-import - load CSV files into MySQL with packet-sized INSERT statements.
    """
    setup_logging(verbose)


@cli.command()
@click.argument('csv_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--table', '-t', 'table_name', required=True, help='Target table name')
@click.option('--columns', '-c', help='Comma-separated CSV columns to load (default: all)')
@click.option('--delimiter', '-d', default=config.DEFAULT_CSV_DELIMITER, help='CSV delimiter (default: comma)')
@click.option('--max-bytes', default=4_194_304, type=int,
              help='Packet limit to plan against in bytes (default: 4194304, 0 for no limit)')
def plan(csv_file: str, table_name: str, columns: Optional[str], delimiter: str, max_bytes: int):
    """
    Show how a CSV file would be split into INSERT statements.

    No database connection is made; values are quoted with utf8mb4 rules.
    """
    cols = split_columns(columns)
    try:
        df = read_csv_rows(csv_file, delimiter, cols)
    except Exception as e:
        logger.error(f"Error reading CSV: {str(e)}", exc_info=True)
        console.print(f"[bold red]Error:[/bold red] Failed to read {csv_file}: {str(e)}")
        sys.exit(1)

    if df.height == 0:
        console.print("[bold yellow]No rows to import[/bold yellow]")
        return

    fragments = [escape_item(row, config.DEFAULT_CHARSET) for row in df.iter_rows()]
    request = ImportRequest(
        build_insert_prefix(table_name, cols or df.columns),
        fragments=fragments,
        options=ImportOptions(allow_oversized=True),
        table_name=table_name,
    )

    importer = BulkImporter(adapter=None)
    prefix, suffix = importer.statement_parts(request)
    batches = importer.plan(request, max_bytes=max_bytes)
    print_plan(batches, prefix, suffix)
    console.print(f"[bold]{df.height} rows in {len(batches)} statement(s)[/bold]")


@cli.command('import-csv')
@click.argument('csv_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--table', '-t', 'table_name', required=True, help='Target table name')
@click.option('--columns', '-c', help='Comma-separated CSV columns to load (default: all)')
@click.option('--delimiter', '-d', default=config.DEFAULT_CSV_DELIMITER, help='CSV delimiter (default: comma)')
@click.option('--ignore-duplicates', is_flag=True, help='Skip rows that violate a unique key (INSERT IGNORE)')
@click.option('--update-columns', help='Comma-separated columns to update on a duplicate key')
@click.option('--force-single-statement', is_flag=True, help='Send all rows in one statement')
@click.option('--allow-oversized', is_flag=True, help='Send rows larger than the packet limit on their own')
@click.option('--dry-run', is_flag=True, help='Show the import plan without inserting anything')
@click.option('--host', default=config.DEFAULT_MYSQL_HOST, help='MySQL host')
@click.option('--port', default=config.DEFAULT_MYSQL_PORT, type=int, help='MySQL port (default: 3306)')
@click.option('--user', default=config.DEFAULT_MYSQL_USER, help='MySQL user')
@click.option('--password', default=config.DEFAULT_MYSQL_PASSWORD, help='MySQL password')
@click.option('--database', default=config.DEFAULT_MYSQL_DATABASE, help='MySQL database')
def import_csv(csv_file: str, table_name: str, columns: Optional[str], delimiter: str,
               ignore_duplicates: bool, update_columns: Optional[str],
               force_single_statement: bool, allow_oversized: bool, dry_run: bool,
               host: str, port: int, user: str, password: Optional[str],
               database: Optional[str]):
    """
    Load a CSV file into a MySQL table.

    The CSV header names the target columns. All rows are inserted or none
    are; the generated auto-increment ids are reported when available.
    """
    if ignore_duplicates and update_columns:
        console.print("[bold red]Error:[/bold red] --ignore-duplicates and --update-columns cannot be combined")
        sys.exit(1)

    cols = split_columns(columns)
    try:
        df = read_csv_rows(csv_file, delimiter, cols)
    except Exception as e:
        logger.error(f"Error reading CSV: {str(e)}", exc_info=True)
        console.print(f"[bold red]Error:[/bold red] Failed to read {csv_file}: {str(e)}")
        sys.exit(1)

    if df.height == 0:
        console.print("[bold yellow]No rows to import[/bold yellow]")
        return

    params = config.mysql_connection_params(
        host=host, port=port, user=user, password=password, database=database
    )
    try:
        adapter = MySQLAdapter(connection_params=params)
    except RuntimeError as e:
        console.print(f"[bold red]Error:[/bold red] {str(e)}")
        sys.exit(1)

    upsert_columns = split_columns(update_columns)
    options = ImportOptions(
        force_single_statement=force_single_statement,
        ignore_duplicates=ignore_duplicates,
        upsert_spec=ColumnList(upsert_columns) if upsert_columns else None,
        allow_oversized=allow_oversized,
    )

    try:
        request = ImportRequest(
            build_insert_prefix(table_name, cols or df.columns),
            fragments=[adapter.literal_row(row) for row in df.iter_rows()],
            options=options,
            table_name=table_name,
        )
        importer = BulkImporter(adapter)

        if dry_run:
            console.print("[bold blue]Running in DRY RUN mode - no rows will be inserted[/bold blue]")
            prefix, suffix = importer.statement_parts(request)
            print_plan(importer.plan(request), prefix, suffix)
            return

        with console.status(f"[bold blue]Importing {df.height} rows into {table_name}...[/bold blue]"):
            result = importer.import_rows(request)
    except PacketImportError as e:
        logger.error(f"Import failed: {str(e)}")
        console.print(f"[bold red]Error during import:[/bold red] {str(e)}")
        sys.exit(1)
    finally:
        adapter.close()

    console.print(f"[bold green]✓[/bold green] Imported {df.height} rows "
                  f"in {result.num_inserts} statement(s)")
    if result.ids:
        console.print(f"  - Generated ids: {result.ids[0]}..{result.ids[-1]} ({len(result.ids)} rows)")
    elif ignore_duplicates:
        console.print("  - Generated ids are not reported with --ignore-duplicates")


def main():
    """Entry point for the packet-import command."""
    cli()


if __name__ == "__main__":
    main()
