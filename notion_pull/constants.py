"""
Constants and configuration values for the Notion pull system.
"""

# Notion API version with database containers and data sources
NOTION_API_VERSION = "2025-09-03"

# Page size used for every paginated endpoint
PAGE_SIZE = 100

# Block types rendered as list items (no blank line between siblings)
LIST_ITEM_TYPES = {"bulleted_list_item", "numbered_list_item", "to_do"}

# Block types whose children are indented one level deeper
NESTING_TYPES = LIST_ITEM_TYPES | {"toggle", "callout"}

# Block types that point at a separate resource and are never expanded
CHILD_RESOURCE_TYPES = {"child_page", "child_database"}

# Block types rendered as plain links to a hosted or external file
FILE_BLOCK_TYPES = {"video", "audio", "file", "pdf"}

# Block types that produce no output of their own
STRUCTURAL_BLOCK_TYPES = {
    "table_of_contents", "breadcrumb", "column_list", "column", "synced_block"
}

# Notion API error codes meaning "not there or not shared"
NOT_FOUND_ERROR_CODES = {"object_not_found", "unauthorized", "restricted_resource"}

# Output layout
DATABASE_INDEX_FILENAME = "_index.csv"
MARKDOWN_INDENT = "    "
MAX_FILENAME_LENGTH = 200

# Fallback titles
UNTITLED_PAGE = "Untitled"
UNTITLED_DATABASE = "Untitled Database"

# Partial-failure policies
ON_ERROR_ABORT = "abort"
ON_ERROR_SKIP = "skip"
ON_ERROR_POLICIES = (ON_ERROR_ABORT, ON_ERROR_SKIP)
