"""Completion: cursor context detection, builtin conversion and completion items."""