"""
MySQL example for packet_import.

This example loads a few thousand generated products into MySQL, first as
plain inserts and then as an upsert, and prints how the rows were split
into statements and which ids they received.

Requirements:
- MySQL or MariaDB server with InnoDB (innodb_autoinc_lock_mode 0 or 1)
- packet-import: pip install packet-import
"""
import argparse
import logging
import os

from packet_import import BulkImporter, ColumnList, ImportOptions, ImportRequest, QueryCollector
from packet_import.adapters.mysql import MySQLAdapter
from packet_import.statement import build_insert_prefix

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def get_connection_params():
    """Get MySQL connection parameters from environment or defaults."""
    return {
        "host": os.environ.get("MYSQL_HOST", "localhost"),
        "port": int(os.environ.get("MYSQL_PORT", 3306)),
        "database": os.environ.get("MYSQL_DATABASE", "test"),
        "user": os.environ.get("MYSQL_USER", "root"),
        "password": os.environ.get("MYSQL_PASSWORD", ""),
        "autocommit": True,
    }


def setup_database(adapter: MySQLAdapter) -> None:
    """Create the example table."""
    logger.info("Setting up database tables...")
    adapter.execute("DROP TABLE IF EXISTS products")
    adapter.execute("""
    CREATE TABLE products (
        id INT AUTO_INCREMENT PRIMARY KEY,
        sku VARCHAR(32) NOT NULL UNIQUE,
        name VARCHAR(100) NOT NULL,
        price DECIMAL(10, 2) NOT NULL
    ) ENGINE=InnoDB
    """)


def product_rows(adapter: MySQLAdapter, count: int, price_factor: float = 1.0):
    """Generate quoted product rows."""
    return [
        adapter.literal_row((f"SKU-{i:06d}", f"Product {i}", round(i * 0.5 * price_factor, 2)))
        for i in range(count)
    ]


def main():
    parser = argparse.ArgumentParser(description="packet_import MySQL example")
    parser.add_argument("--rows", type=int, default=5000, help="Number of products to insert")
    parser.add_argument("--max-packet-size", type=int, default=65536,
                        help="Packet limit to use instead of the server's max_allowed_packet")
    args = parser.parse_args()

    adapter = MySQLAdapter(connection_params=get_connection_params(),
                           max_packet_size=args.max_packet_size)
    try:
        setup_database(adapter)
        prefix = build_insert_prefix("products", ["sku", "name", "price"])

        collector = QueryCollector()
        importer = BulkImporter(adapter, query_collector=collector)
        result = importer.import_rows(ImportRequest(
            prefix, fragments=product_rows(adapter, args.rows), table_name="products"))
        logger.info(f"Inserted {len(result.ids)} products in {result.num_inserts} statements "
                    f"(ids {result.ids[0]}..{result.ids[-1]})")
        logger.info(f"Statement stats: {collector.get_stats()}")

        # Re-import half of the rows with new prices plus some new ones
        upsert = ImportRequest(
            prefix,
            fragments=product_rows(adapter, args.rows + args.rows // 2, price_factor=1.1)[args.rows // 2:],
            options=ImportOptions(upsert_spec=ColumnList(["name", "price"])),
            table_name="products",
        )
        result = importer.import_rows(upsert)
        logger.info(f"Upsert created {len(result.ids)} new products in {result.num_inserts} statements")
    finally:
        adapter.close()


if __name__ == "__main__":
    main()
