"""Completion items built from the builtin database, plus static Metal completion tables."""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass
from enum import Enum, IntEnum


class BuiltinKind(Enum):
    """Category of a builtin Metal symbol."""

    KEYWORD = "keyword"
    TYPE = "type"
    FUNCTION = "function"
    ATTRIBUTE = "attribute"
    SNIPPET = "snippet"
    CONSTANT = "constant"


@dataclass(frozen=True)
class BuiltinEntry:
    """One builtin keyword, type, function, attribute, snippet or constant."""

    label: str
    kind: BuiltinKind
    detail: str = ""
    documentation: str = ""
    insert_text: str | None = None
    is_snippet: bool = False


class CompletionItemKind(IntEnum):
    """Completion item kinds with their protocol values."""

    TEXT = 1
    METHOD = 2
    FUNCTION = 3
    CONSTRUCTOR = 4
    FIELD = 5
    VARIABLE = 6
    CLASS = 7
    INTERFACE = 8
    MODULE = 9
    PROPERTY = 10
    UNIT = 11
    VALUE = 12
    ENUM = 13
    KEYWORD = 14
    SNIPPET = 15
    COLOR = 16
    FILE = 17
    REFERENCE = 18
    FOLDER = 19
    ENUM_MEMBER = 20
    CONSTANT = 21
    STRUCT = 22
    EVENT = 23
    OPERATOR = 24
    TYPE_PARAMETER = 25


class InsertTextFormat(IntEnum):
    """How the client interprets ``insert_text``."""

    PLAIN_TEXT = 1
    SNIPPET = 2


@dataclass(frozen=True)
class CompletionItem:
    """One completion proposal; ``documentation`` is Markdown."""

    label: str
    kind: CompletionItemKind | None = None
    detail: str | None = None
    documentation: str | None = None
    insert_text: str | None = None
    insert_text_format: InsertTextFormat | None = None
    sort_text: str | None = None


_KIND_MAP = {
    BuiltinKind.KEYWORD: CompletionItemKind.KEYWORD,
    BuiltinKind.TYPE: CompletionItemKind.CLASS,
    BuiltinKind.FUNCTION: CompletionItemKind.FUNCTION,
    BuiltinKind.ATTRIBUTE: CompletionItemKind.PROPERTY,
    BuiltinKind.SNIPPET: CompletionItemKind.SNIPPET,
    BuiltinKind.CONSTANT: CompletionItemKind.CONSTANT,
}


def builtin_to_completion_item(entry: BuiltinEntry, sort_prefix: str) -> CompletionItem:
    """Turn a builtin entry into a completion item sorted under ``sort_prefix``."""
    is_snippet = entry.is_snippet or (entry.insert_text is not None and "$" in entry.insert_text)
    return CompletionItem(
        label=entry.label,
        kind=_KIND_MAP[entry.kind],
        detail=entry.detail,
        documentation=entry.documentation or None,
        insert_text=entry.insert_text,
        insert_text_format=InsertTextFormat.SNIPPET if is_snippet else InsertTextFormat.PLAIN_TEXT,
        sort_text=f"{sort_prefix}_{entry.label}",
    )


def _is_ident_char(ch: str) -> bool:
    return ch.isalnum() or ch == "_"


def first_identifier(s: str) -> str | None:
    """Return the identifier at the start of ``s`` after trimming, or None."""
    ident = []
    for ch in s.strip():
        if not _is_ident_char(ch):
            break
        ident.append(ch)
    return "".join(ident) or None


def detect_function_name(line: str, keywords: Collection[str] = frozenset()) -> str | None:
    """Return the name before the first ``(`` in a line such as ``vertex float4 myFunc(``.

    Keywords (``if``, ``while`` ...) are not function names.
    """
    paren_idx = line.find("(")
    if paren_idx < 0:
        return None
    words = line[:paren_idx].split()
    if not words:
        return None
    name = words[-1]
    if not all(_is_ident_char(ch) for ch in name):
        return None
    if not (name[0].isalpha() or name[0] == "_"):
        return None
    if name in keywords:
        return None
    return name


_DIRECTIVE_DOCS = {
    "include": "Include a header file",
    "define": "Define a preprocessor macro",
    "undef": "Undefine a preprocessor macro",
    "if": "Conditional compilation",
    "ifdef": "Conditional compilation — if defined",
    "ifndef": "Conditional compilation — if not defined",
    "elif": "Else-if conditional compilation",
    "else": "Else branch of conditional compilation",
    "endif": "End conditional compilation block",
    "pragma": "Compiler pragma directive",
    "line": "Set line number for diagnostics",
    "error": "Generate a compiler error",
    "warning": "Generate a compiler warning",
}

PREPROCESSOR_DIRECTIVES: tuple[tuple[str, str], ...] = tuple(_DIRECTIVE_DOCS.items())

_HEADER_DOCS = {
    "metal_stdlib": (
        "The main Metal standard library header. Includes math, "
        "geometric, texture, and other built-in functions."
    ),
    "metal_compute": "Metal compute-specific functions and types.",
    "metal_graphics": "Metal graphics (render pipeline) specific functions and types.",
    "metal_geometric": (
        "Geometric functions: `normalize`, `dot`, `cross`, "
        "`distance`, `length`, `reflect`, `refract`."
    ),
    "metal_math": "Math functions: trigonometry, exponential, clamping, etc.",
    "metal_matrix": "Matrix types and operations.",
    "metal_pack": "Pack and unpack functions for compressed data formats.",
    "metal_texture": "Texture types and sampling functions.",
    "metal_atomic": "Atomic operations for shared memory synchronization.",
    "metal_integer": (
        "Integer math functions: `abs`, `clamp`, `min`, `max`, "
        "`popcount`, etc."
    ),
    "metal_relational": (
        "Relational and logical functions: `all`, `any`, `isfinite`, "
        "`isinf`, `isnan`, `select`, `step`."
    ),
    "metal_simdgroup": (
        "SIMD-group (warp/wavefront) functions: shuffle, reduce, "
        "prefix sum, ballot."
    ),
    "metal_common": "Common functions shared across Metal library components.",
    "simd/simd.h": "SIMD types and functions shared with the CPU side.",
}

METAL_HEADERS: tuple[tuple[str, str], ...] = tuple(_HEADER_DOCS.items())

# name -> (return type, parameter list, documentation)
_TEXTURE_METHOD_SPECS = {
    "sample": (
        "T", "sampler s, float2 coord",
        "Sample the texture at the given coordinates using a sampler.",
    ),
    "read": (
        "T", "uint2 coord",
        "Read a texel at the specified integer coordinates (no filtering).",
    ),
    "write": (
        "void", "T value, uint2 coord",
        "Write a value to the texture at the specified integer coordinates.",
    ),
    "get_width": (
        "uint", "uint lod = 0",
        "Return the width of the texture in texels at the given mip level.",
    ),
    "get_height": (
        "uint", "uint lod = 0",
        "Return the height of the texture in texels at the given mip level.",
    ),
    "get_depth": (
        "uint", "uint lod = 0",
        "Return the depth of a 3-D texture at the given mip level.",
    ),
    "get_num_mip_levels": (
        "uint", "",
        "Return the number of mip levels in the texture.",
    ),
    "get_num_samples": (
        "uint", "",
        "Return the number of samples per texel (MSAA textures).",
    ),
    "sample_compare": (
        "float", "sampler s, float2 coord, float compare_value",
        "Sample a depth texture and compare against a reference value.",
    ),
    "gather": (
        "vec<T, 4>", "sampler s, float2 coord, int2 offset = int2(0)",
        "Gather four texels that would be used for bilinear filtering.",
    ),
    "fence": (
        "void", "",
        "Ensure all previous writes to this texture are visible to subsequent reads.",
    ),
    "get_array_size": (
        "uint", "",
        "Return the number of slices in a texture array.",
    ),
}

TEXTURE_METHODS: tuple[tuple[str, str, str], ...] = tuple(
    (name, f"{ret} {name}({params})", doc)
    for name, (ret, params, doc) in _TEXTURE_METHOD_SPECS.items()
)