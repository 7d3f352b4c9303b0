"""Foreach expansion for token resolution.

Handles a leading ``#foreach(name1,name2,...)`` marker:
- each named property holds a ``;``-delimited list
- the rest of the buffer is emitted once per list index
- inside each copy ``${name1}`` resolves to that index's element
- ragged lists pad with empty strings
"""
from __future__ import annotations

import re
from typing import TYPE_CHECKING, Dict, List, Optional

from ...context import ProcessingContext

if TYPE_CHECKING:
    from .variables import TokenResolver


class ForeachExpander:
    """Expand ``#foreach(...)`` templates into repeated copies.

    Example:
        Properties: {"SomeVal": "One;Two", "SomeOtherVal": "Alpha"}
        Template: #foreach(SomeVal,SomeOtherVal)<e a="${SomeVal}" b="${SomeOtherVal}"/>
        Output:
        <e a="One" b="Alpha"/><e a="Two" b=""/>
    """

    # Leading whitespace is kept; the marker itself is removed.
    FOREACH_PATTERN = re.compile(
        r"^(?P<whitespace>\s*)(?P<foreachstart>#\s*foreach\s*\(\s*)(?P<names>[^)]+?)(?P<foreachend>\s*\)\s*)",
        re.IGNORECASE,
    )

    def __init__(self, resolver: "TokenResolver") -> None:
        self.resolver = resolver

    def expand(self, content: str, context: ProcessingContext) -> Optional[str]:
        """Expand ``content`` if it starts with a foreach marker.

        Returns:
            The concatenated expansions, or None when there is no marker
        """
        match = self.FOREACH_PATTERN.match(content)
        if not match:
            return None

        body = content[:match.start("foreachstart")] + content[match.end("foreachend"):]
        names = [n.strip() for n in match.group("names").split(",") if n.strip()]

        lists: Dict[str, List[str]] = {}
        for name in names:
            lists[name] = self._values_for(name, context)

        count = max((len(values) for values in lists.values()), default=0)

        results: List[str] = []
        for index in range(count):
            overrides = {
                name: (values[index].strip() if index < len(values) else "")
                for name, values in lists.items()
            }
            results.append(self.resolver.substitute(body, context, overrides) or "")
        return "".join(results)

    def _values_for(self, name: str, context: ProcessingContext) -> List[str]:
        prop = context.properties.get(name)
        if prop is None:
            return []
        value = self.resolver.substitute(prop.value, context)
        if not value:
            return []
        return value.split(";")


__all__ = ["ForeachExpander"]
