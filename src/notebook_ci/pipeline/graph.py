from __future__ import annotations

from typing import Any, cast

from langgraph.graph import END, StateGraph

from .nodes.publisher import publisher_node
from .nodes.runner import runner_node
from .nodes.workspace import workspace_node
from .state import State


def _route_after_run(state: dict[str, Any]) -> str:
    return "publisher" if state["run_config"].commit else END


def build_graph() -> Any:
    g = StateGraph(State)
    g.add_node("workspace", cast(Any, workspace_node))
    g.add_node("runner", cast(Any, runner_node))
    g.add_node("publisher", cast(Any, publisher_node))
    g.set_entry_point("workspace")
    g.add_edge("workspace", "runner")
    g.add_conditional_edges("runner", _route_after_run, {"publisher": "publisher", END: END})
    g.add_edge("publisher", END)
    return g.compile()
