"""
Configuration for reference resolution.

Defines which declaration lines are import bindings and which keywords
precede a declared name.
"""

# A definition declared on a line matching any of these is an import binding,
# not a usage site; its references are never requested.
IMPORT_PATTERNS = [
    r"\bimport\b",          # Python, JavaScript, TypeScript, Java, Go
    r"^\s*(pub\s+)?use\s",  # Rust, PHP
    r"\brequire\s*\(",      # CommonJS
]

# Keywords that may sit at a definition's reported position. Longer keywords
# first, since matching stops at the first hit.
DECLARATION_KEYWORDS = [
    "async def",
    "def",
    "class",
    "function",
    "func",
    "fn",
]
