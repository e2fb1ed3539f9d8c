"""
Tool Contract Registry.

Declares the two surface-mutation tools offered to the model.

Tool "execution" in this server means *observed and relayed*, never
*performed*. The handlers registered here are inert: they mutate nothing,
validate nothing, and only return an acknowledgment so the model-calling
protocol can complete the tool round trip. The authoritative signal is the
invocation request the orchestrator reads from the model's stream, not the
handler's return value.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from agents import FunctionTool
from agents.tool_context import ToolContext

logger = logging.getLogger(__name__)


ADD_OR_UPDATE_SURFACE = "addOrUpdateSurface"
DELETE_SURFACE = "deleteSurface"


@dataclass
class ToolContract:
    """
    A tool declared to the model.

    The acknowledgment is what the inert handler returns for every call.
    """
    name: str
    description: str
    input_schema: Dict[str, Any]
    acknowledgment: Dict[str, Any] = field(default_factory=dict)

    async def invoke(self, ctx: ToolContext[Any], arguments: str) -> str:
        """Acknowledge a call without acting on it."""
        logger.debug(f"Acknowledging {self.name} call: {arguments}")
        return json.dumps(self.acknowledgment)

    def as_function_tool(self) -> FunctionTool:
        """Expose the contract as an Agents SDK function tool."""
        return FunctionTool(
            name=self.name,
            description=self.description,
            params_json_schema=self.input_schema,
            on_invoke_tool=self.invoke,
            # definition is free-form JSON, which strict schemas cannot express
            strict_json_schema=False,
        )


ADD_OR_UPDATE_SURFACE_CONTRACT = ToolContract(
    name=ADD_OR_UPDATE_SURFACE,
    description="Add or update a UI surface.",
    input_schema={
        "type": "object",
        "properties": {
            "surfaceId": {
                "type": "string",
                "description": "Unique identifier of the surface to add or replace",
            },
            "definition": {
                "description": "The surface definition. Must conform to the widget catalog schema.",
            },
        },
        "required": ["surfaceId", "definition"],
    },
    acknowledgment={"status": "updated"},
)

DELETE_SURFACE_CONTRACT = ToolContract(
    name=DELETE_SURFACE,
    description="Delete a UI surface.",
    input_schema={
        "type": "object",
        "properties": {
            "surfaceId": {
                "type": "string",
                "description": "Unique identifier of the surface to remove",
            },
        },
        "required": ["surfaceId"],
    },
    acknowledgment={"status": "deleted"},
)


class ToolContractRegistry:
    """
    Registry of the tools declared to the model.

    Defaults to the two surface tools. Contracts are kept in registration
    order, which is the order they are declared to the model.
    """

    def __init__(self, contracts: Optional[List[ToolContract]] = None):
        self._contracts: Dict[str, ToolContract] = {}
        if contracts is None:
            contracts = [ADD_OR_UPDATE_SURFACE_CONTRACT, DELETE_SURFACE_CONTRACT]
        for contract in contracts:
            self.register(contract)

    def register(self, contract: ToolContract):
        """
        Register a tool contract.

        Args:
            contract: The contract to declare; replaces one with the same name
        """
        self._contracts[contract.name] = contract

    def get(self, name: str) -> Optional[ToolContract]:
        """Get a contract by tool name."""
        return self._contracts.get(name)

    def get_tool_names(self) -> List[str]:
        """Get all registered tool names."""
        return list(self._contracts.keys())

    def get_contracts(self) -> List[ToolContract]:
        return list(self._contracts.values())

    def as_function_tools(self) -> List[FunctionTool]:
        """Get every contract as an Agents SDK function tool."""
        return [contract.as_function_tool() for contract in self._contracts.values()]
