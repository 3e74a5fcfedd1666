"""cdoc: documentation generator for source code comments.

Walks a source tree, extracts documentation comments from each source
file and writes them as a mirrored tree of Markdown files.
"""

__version__ = "0.1.0"
