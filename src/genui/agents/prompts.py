"""
Prompt Builder
System prompt text that teaches the model to use the UI tools.
"""

from ..core.config import get_settings
from ..core.json import safe_json_dumps
from ..functions.base import FunctionRegistry
from .tools import ToolRegistry


def gen_ui_tech_prompt(tool_names: list[str], root_id: str | None = None) -> str:
    """
    Instructions for using the UI generation tools.

    Args:
        tool_names: Names of the UI tools offered to the model
        root_id: Root component id the model should use (default from Settings)

    Returns:
        Prompt fragment

    Raises:
        ValueError: If no tool names are given
    """
    if not tool_names:
        raise ValueError("At least one tool name is required")

    root_id = root_id or get_settings().default_root_id
    if len(tool_names) > 1:
        quoted = ", ".join(f'"{name}"' for name in tool_names)
        tool_description = f"the following UI generation tools: {quoted}"
    else:
        tool_description = f'the UI generation tool "{tool_names[0]}"'

    return (
        f"To show generated UI, use {tool_description}.\n"
        "When generating UI, always provide a unique surfaceId to identify the UI surface:\n"
        "\n"
        "* To create new UI, use a new surfaceId.\n"
        "* To update existing UI, use the existing surfaceId.\n"
        "\n"
        f"Use the root component id: '{root_id}'.\n"
        f"Ensure one of the generated components has an id of '{root_id}'.\n"
    )


class PromptBuilder:
    """Builds system prompts from instructions, tools and client functions."""

    @staticmethod
    def build_system(
        instructions: str,
        tools: ToolRegistry | None = None,
        functions: FunctionRegistry | None = None,
        root_id: str | None = None,
    ) -> str:
        """
        Build the system prompt for a UI-generating conversation.

        Args:
            instructions: App-specific instructions
            tools: Tools the model may call
            functions: Client functions usable in bindings
            root_id: Root component id

        Returns:
            Complete system prompt
        """
        parts = [instructions.strip()]

        if tools is not None and len(tools):
            ui_names = [tool.name for tool in tools.list_tools("ui")]
            if ui_names:
                parts.append(gen_ui_tech_prompt(ui_names, root_id))
            parts.append(tools.get_tools_description())

        if functions is not None and len(functions):
            lines = ["=== CLIENT FUNCTIONS ==="]
            lines.append('Call these in bindings as {"function": name, "args": {...}}.')
            for description in functions.describe_all():
                lines.append(
                    f"  - {description['name']}: {description['description']} "
                    f"args={safe_json_dumps(description['parameters'].get('properties', {}))} "
                    f"returns={description['returnType']}"
                )
            parts.append("\n".join(lines))

        return "\n\n".join(parts)
