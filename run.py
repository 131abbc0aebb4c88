#!/usr/bin/env python3
"""
Simplified script to run the Notion pull.
Equivalent to the ``notion-pull`` console script.
"""

from notion_pull.main import main

if __name__ == "__main__":
    main()
