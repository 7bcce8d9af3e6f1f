"""Projection of pandoc key/value attributes onto HTML attributes."""
from __future__ import annotations

from typing import List, Tuple

# Attribute names pandoc's HTML writer passes through unprefixed.
HTML5_ATTRIBUTES = frozenset(
    {
        "abbr",
        "accept",
        "accept-charset",
        "accesskey",
        "action",
        "allow",
        "allowfullscreen",
        "alt",
        "async",
        "autocapitalize",
        "autocomplete",
        "autofocus",
        "autoplay",
        "charset",
        "checked",
        "cite",
        "class",
        "color",
        "cols",
        "colspan",
        "content",
        "contenteditable",
        "controls",
        "coords",
        "crossorigin",
        "data",
        "datetime",
        "decoding",
        "default",
        "defer",
        "dir",
        "dirname",
        "disabled",
        "download",
        "draggable",
        "enctype",
        "enterkeyhint",
        "for",
        "form",
        "formaction",
        "formenctype",
        "formmethod",
        "formnovalidate",
        "formtarget",
        "headers",
        "height",
        "hidden",
        "high",
        "href",
        "hreflang",
        "http-equiv",
        "id",
        "inert",
        "inputmode",
        "integrity",
        "is",
        "ismap",
        "itemid",
        "itemprop",
        "itemref",
        "itemscope",
        "itemtype",
        "kind",
        "label",
        "lang",
        "list",
        "loading",
        "loop",
        "low",
        "max",
        "maxlength",
        "media",
        "method",
        "min",
        "minlength",
        "multiple",
        "muted",
        "name",
        "nomodule",
        "nonce",
        "novalidate",
        "open",
        "optimum",
        "pattern",
        "ping",
        "placeholder",
        "playsinline",
        "poster",
        "preload",
        "readonly",
        "referrerpolicy",
        "rel",
        "required",
        "reversed",
        "role",
        "rows",
        "rowspan",
        "sandbox",
        "scope",
        "selected",
        "shape",
        "size",
        "sizes",
        "slot",
        "span",
        "spellcheck",
        "src",
        "srcdoc",
        "srclang",
        "srcset",
        "start",
        "step",
        "style",
        "tabindex",
        "target",
        "title",
        "translate",
        "type",
        "usemap",
        "value",
        "width",
        "wrap",
    }
)


def to_html5_keyvals(keyvals: List[Tuple[str, str]]) -> List[Tuple[str, str]]:
    """Pass known HTML5 attributes through, prefix unknown ones with ``data-``.

    See https://pandoc.org/MANUAL.html#extension-link_attributes
    """
    result = []
    for key, value in keyvals:
        if key in HTML5_ATTRIBUTES or key.startswith("data-") or key.startswith("aria-"):
            result.append((key, value))
        else:
            result.append((f"data-{key}", value))
    return result
