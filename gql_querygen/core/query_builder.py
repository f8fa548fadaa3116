"""Query text for generated modules.

The generated module stores the operation document as written. The only
change made is adding '__typename' to selection sets that resolve to an
interface or union, since the response cannot be decoded without it.
"""

from collections.abc import Iterable

TYPENAME_FIELD = "__typename"


def build_query_text(source: str, typename_offsets: Iterable[int] = ()) -> str:
    """Insert '__typename' after the '{' found at each offset.

    Offsets refer to the original source; insertions are applied from the
    end so earlier offsets stay valid.
    """
    text = source
    for offset in sorted(set(typename_offsets), reverse=True):
        if offset >= len(source) or source[offset] != "{":
            raise ValueError(f"No selection set starts at offset {offset}")
        insertion = f" {TYPENAME_FIELD}"
        following = source[offset + 1:offset + 2]
        if following and not following.isspace():
            insertion += " "
        text = text[:offset + 1] + insertion + text[offset + 1:]
    return text
