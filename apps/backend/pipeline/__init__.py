"""
Crawl-and-extract pipeline.

Harvested listing items are grouped into bounded batches and sent to the
structured-extraction service concurrently; failed batches cost records,
never the whole crawl.
"""

__version__ = "0.1.0"
