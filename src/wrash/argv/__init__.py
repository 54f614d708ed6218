"""Turn a raw command line into an argument vector."""

from wrash.argv.errors import (
    ArgumentError,
    ExpansionError,
    InvalidEscape,
    UnexpectedCharacter,
    UnexpectedEndOfLine,
    UnterminatedSequence,
)
from wrash.argv.expand import (
    default_home,
    expand,
    expand_filenames,
    expand_quotes,
    expand_tilde,
    expand_vars,
)
from wrash.argv.split import escape_literal, split_words, unescape_literal

__all__ = [
    # Errors
    "ArgumentError",
    "ExpansionError",
    "InvalidEscape",
    "UnexpectedCharacter",
    "UnexpectedEndOfLine",
    "UnterminatedSequence",
    # Expansion
    "default_home",
    "escape_literal",
    "expand",
    "expand_filenames",
    "expand_quotes",
    "expand_tilde",
    "expand_vars",
    "split_words",
    "unescape_literal",
]
