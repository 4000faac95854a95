"""Filter engine for tool catalogs.

Narrows a connection's tool list in two stages: the connection's own
rule set first, then the global rule set over what survived. A tool
removed by an earlier stage cannot be brought back by a later include.
"""

from typing import Any, Mapping, Optional

from hub.patterns import matches_any
from shared.models import FilterRuleSet

TOOLS_KEY = "tools"


def tool_name(tool: Any) -> Optional[str]:
    """Return the tool's name, or None if it has no usable one."""
    if isinstance(tool, Mapping):
        name = tool.get("name")
    else:
        name = getattr(tool, "name", None)
    if isinstance(name, str) and name:
        return name
    return None


def _matched(tool: Any, patterns: list[str]) -> bool:
    # A nameless tool matches nothing
    name = tool_name(tool)
    return name is not None and matches_any(name, patterns)


def filter_tools(tools: list[Any], rule_set: Optional[FilterRuleSet]) -> list[Any]:
    """
    Apply one filter stage to a list of tool descriptors.

    Nameless tools are dropped by an active include list and kept by an
    exclude list. The input list is never modified.

    Args:
        tools: Tool descriptors (mappings or objects with ``name``)
        rule_set: Stage rules; None means no filtering

    Returns:
        New list with the surviving tools in their original order
    """
    filtered = list(tools)
    if rule_set is None:
        return filtered

    if rule_set.include:
        filtered = [tool for tool in filtered if _matched(tool, rule_set.include)]

    if rule_set.exclude:
        filtered = [tool for tool in filtered if not _matched(tool, rule_set.exclude)]

    return filtered


def apply_filters(
    tool_list: Any,
    per_connection: Optional[FilterRuleSet] = None,
    global_rules: Optional[FilterRuleSet] = None
) -> Any:
    """
    Filter a tool catalog with the per-connection, then the global rules.

    Anything other than a mapping holding a ``tools`` list is returned
    unchanged.

    Returns:
        A new catalog with the same keys and a filtered ``tools`` list
    """
    if not isinstance(tool_list, Mapping) or not isinstance(tool_list.get(TOOLS_KEY), list):
        return tool_list

    tools = filter_tools(tool_list[TOOLS_KEY], per_connection)
    tools = filter_tools(tools, global_rules)

    return {**tool_list, TOOLS_KEY: tools}
