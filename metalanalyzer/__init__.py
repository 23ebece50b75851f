"""Analysis toolkit for the Metal Shading Language: settings, AST indexing, definition lookup and completion."""

__version__ = "0.1.5"