"""
CSV Delivery

Writes an assembled CSV document to its destination. Kept apart from the
exporter so row building stays free of I/O.
"""

import logging
import os
from pathlib import Path
from typing import Iterable, Union

logger = logging.getLogger(__name__)

CSV_CONTENT_TYPE = 'text/csv;charset=utf-8;'
ROW_TERMINATOR = '\n'


class FileDelivery:
    """
    Saves CSV documents under an output directory.

    Usage:
        delivery = FileDelivery("output")
        path = delivery.deliver(csv_text, "shopify-products-2025-01-31.csv")
    """

    content_type = CSV_CONTENT_TYPE

    def __init__(self, output_dir: Union[str, Path] = "output"):
        self.output_dir = Path(output_dir)

    def deliver(self, csv_content: Union[str, Iterable[str]], filename: str) -> Path:
        """
        Write the CSV to output_dir/filename as UTF-8.

        Args:
            csv_content: Full CSV text, or an iterable of lines without
                terminators (streamed to disk one line at a time)
            filename: Target file name

        Returns:
            Path of the written file
        """
        os.makedirs(self.output_dir, exist_ok=True)
        path = self.output_dir / os.path.basename(filename)

        with open(path, 'w', encoding='utf-8', newline='') as f:
            if isinstance(csv_content, str):
                f.write(csv_content)
            else:
                for index, line in enumerate(csv_content):
                    if index:
                        f.write(ROW_TERMINATOR)
                    f.write(line)

        logger.info("Wrote %s", path)
        return path
