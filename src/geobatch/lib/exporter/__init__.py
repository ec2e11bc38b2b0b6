"""Exporter library — CSV output for job results and aggregate tables."""

from geobatch.lib.exporter.csv_writer import ERROR_COLUMNS, RESULT_COLUMNS, render_csv, write_csv

__all__ = [
    "ERROR_COLUMNS",
    "RESULT_COLUMNS",
    "render_csv",
    "write_csv",
]
