"""Workflow engine: the state machines that build the graph."""

from archflow.engine.base import Workflow, WorkflowContext, attach_to_architecture
from archflow.engine.component_flow import ComponentCreationWorkflow, ComponentFlowState
from archflow.engine.connection_flow import ConnectionFlowState, ConnectionWorkflow
from archflow.engine.deletion import delete_component, delete_link
from archflow.engine.engine import WorkflowEngine
from archflow.engine.selection import SelectionState

__all__ = [
    "Workflow",
    "WorkflowContext",
    "attach_to_architecture",
    "ComponentCreationWorkflow",
    "ComponentFlowState",
    "ConnectionFlowState",
    "ConnectionWorkflow",
    "delete_component",
    "delete_link",
    "WorkflowEngine",
    "SelectionState",
]
