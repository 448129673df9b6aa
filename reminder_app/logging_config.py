"""
This module sets up logging for the application, optionally into SQLite.
"""
import logging
import sqlite3
from logging import Handler, LogRecord
from typing import Optional


class SQLiteHandler(Handler):
    """
    A logging handler that writes records to an SQLite database.
    """

    def __init__(self, db_path: str):
        super().__init__()
        self.db_path = db_path
        conn = sqlite3.connect(self.db_path)
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS logs (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    timestamp DATETIME DEFAULT CURRENT_TIMESTAMP,
                    level TEXT NOT NULL,
                    message TEXT NOT NULL,
                    logger_name TEXT
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    def emit(self, record: LogRecord) -> None:
        """
        Writes the log record to the database.
        """
        try:
            conn = sqlite3.connect(self.db_path)
            try:
                conn.execute(
                    "INSERT INTO logs (level, message, logger_name) VALUES (?, ?, ?)",
                    (record.levelname, self.format(record), record.name),
                )
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error:
            self.handleError(record)


def setup_logging(level: str = "INFO", db_path: Optional[str] = None) -> None:
    """
    Configures the root logger with a console handler and, when `db_path`
    is given, an SQLiteHandler.
    """
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove any existing handlers to avoid duplicates
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if db_path:
        db_handler = SQLiteHandler(db_path)
        db_handler.setFormatter(formatter)
        logger.addHandler(db_handler)
        logging.info(f"Logging configured to use console and database {db_path}.")
    else:
        logging.info("Logging configured to use the console.")
