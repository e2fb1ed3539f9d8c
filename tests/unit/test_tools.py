import asyncio
import json

from agents import FunctionTool

from core.tools import (
    ADD_OR_UPDATE_SURFACE,
    DELETE_SURFACE,
    ToolContract,
    ToolContractRegistry,
)


def test_default_registry_declares_both_surface_tools():
    registry = ToolContractRegistry()

    assert registry.get_tool_names() == [ADD_OR_UPDATE_SURFACE, DELETE_SURFACE]


def test_add_or_update_requires_surface_id_and_definition():
    contract = ToolContractRegistry().get(ADD_OR_UPDATE_SURFACE)

    assert contract.input_schema["required"] == ["surfaceId", "definition"]
    assert contract.input_schema["properties"]["surfaceId"]["type"] == "string"


def test_delete_requires_surface_id():
    contract = ToolContractRegistry().get(DELETE_SURFACE)

    assert contract.input_schema["required"] == ["surfaceId"]


def test_handlers_acknowledge_without_acting():
    registry = ToolContractRegistry()
    arguments = json.dumps({"surfaceId": "main", "definition": {"widget": "card"}})

    updated = asyncio.run(registry.get(ADD_OR_UPDATE_SURFACE).invoke(None, arguments))
    deleted = asyncio.run(registry.get(DELETE_SURFACE).invoke(None, json.dumps({"surfaceId": "main"})))

    assert json.loads(updated) == {"status": "updated"}
    assert json.loads(deleted) == {"status": "deleted"}


def test_function_tools_are_non_strict():
    tools = ToolContractRegistry().as_function_tools()

    assert all(isinstance(tool, FunctionTool) for tool in tools)
    assert [tool.name for tool in tools] == [ADD_OR_UPDATE_SURFACE, DELETE_SURFACE]
    assert all(tool.strict_json_schema is False for tool in tools)
    assert tools[0].params_json_schema["required"] == ["surfaceId", "definition"]


def test_register_replaces_contract_with_same_name():
    replacement = ToolContract(
        name=DELETE_SURFACE,
        description="Remove a surface.",
        input_schema={"type": "object", "properties": {}},
        acknowledgment={"status": "gone"},
    )
    registry = ToolContractRegistry()

    registry.register(replacement)

    assert registry.get(DELETE_SURFACE) is replacement
    assert len(registry.get_contracts()) == 2


def test_unknown_tool_is_absent():
    assert ToolContractRegistry().get("renderChart") is None


def test_empty_registry():
    assert ToolContractRegistry(contracts=[]).as_function_tools() == []
