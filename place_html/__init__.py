"""
place-html

Keeps HTML snippets in sync with the script files that embed them, by
splicing each snippet into its paired script between sentinel comments.
"""

__version__ = "1.0.0"
