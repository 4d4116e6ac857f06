"""
Command Reply Rendering

Renders raw Redis replies the way redis-cli prints them.
"""

from typing import Any

from redisweb.codec.quoting import from_bytes, is_text, quote


def render_reply(reply: Any, indent: int = 0) -> str:
    """
    Render a raw reply as text

    Args:
        reply: Reply as returned without response callbacks
        indent: Column nested array items are aligned to

    Returns:
        str: redis-cli style text, e.g. "(integer) 3" or "1) \"a\""
    """
    if reply is None:
        return "(nil)"
    if isinstance(reply, bool):
        return "(integer) 1" if reply else "(integer) 0"
    if isinstance(reply, int):
        return f"(integer) {reply}"
    if isinstance(reply, float):
        return f"(double) {reply!r}"
    if isinstance(reply, (bytes, str)):
        text = from_bytes(reply) if isinstance(reply, bytes) else reply
        return text if is_text(text) else quote(text)
    if isinstance(reply, dict):
        reply = [item for pair in reply.items() for item in pair]
    if isinstance(reply, (list, tuple, set)):
        items = list(reply)
        if not items:
            return "(empty array)"
        width = len(str(len(items)))
        lines = []
        for index, item in enumerate(items, start=1):
            prefix = f"{index:>{width}}) "
            lines.append(prefix + render_reply(item, indent + len(prefix)))
        return ("\n" + " " * indent).join(lines)
    return str(reply)
