from .csv_exporter import CsvTradeExporter

__all__ = ['CsvTradeExporter']
