"""
Package for pulling Notion pages and databases into Markdown and CSV files.
"""

from .config import load_token, ensure_directories
from .references import normalize_reference
from .notion_client import NotionDownloader
from .rich_text import render_rich_text
from .markdown_converter import convert_block_to_markdown, convert_blocks_to_markdown
from .csv_converter import convert_entries_to_csv, extract_property_value
from .main import NotionPuller, PullReport, TraversalTask, pull, main

__all__ = [
    'load_token',
    'ensure_directories',
    'normalize_reference',
    'NotionDownloader',
    'render_rich_text',
    'convert_block_to_markdown',
    'convert_blocks_to_markdown',
    'convert_entries_to_csv',
    'extract_property_value',
    'NotionPuller',
    'PullReport',
    'TraversalTask',
    'pull',
    'main'
]
