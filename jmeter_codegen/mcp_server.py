"""MCP Server for JMeter DSL Code Generator.

This module provides a Model Context Protocol (MCP) server that exposes
test plan conversion and thread group reconstruction to AI assistants.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, List

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from jmeter_codegen.core.builders.thread_group import Stage, reconstruct_thread_group
from jmeter_codegen.core.generator import DslCodeGenerator
from jmeter_codegen.core.jmx_reader import JMXReader
from jmeter_codegen.core.settings import load_settings
from jmeter_codegen.exceptions import CodegenException

logger = logging.getLogger(__name__)

# Initialize MCP Server
app = Server("jmeter-dsl-codegen")


@app.list_tools()
async def list_tools() -> List[Tool]:
    """List available MCP tools for DSL code generation.

    Returns:
        List of available tools with their schemas
    """
    return [
        Tool(
            name="convert_jmx_to_dsl",
            description=(
                "Convert a JMeter JMX test plan into a jmeter-java-dsl JUnit 5 test class. "
                "Accepts a JMX file path or the JMX content. Returns the Java code, "
                "warnings about unsupported elements and required imports."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "jmx_path": {
                        "type": "string",
                        "description": "Path to JMX file to convert",
                    },
                    "jmx_content": {
                        "type": "string",
                        "description": "JMX content to convert, used when jmx_path is not given",
                    },
                    "class_name": {
                        "type": "string",
                        "description": "Name of generated test class (default: PerformanceTest)",
                    },
                    "output_path": {
                        "type": "string",
                        "description": "Java file to write generated code to (optional)",
                    },
                },
                "required": [],
            },
        ),
        Tool(
            name="reconstruct_thread_group",
            description=(
                "Build the simplest jmeter-java-dsl threadGroup call for a load profile given "
                "as stages. A stage with 0 threads is an initial delay. Durations are seconds "
                "or JMeter expressions such as ${__P(RAMP)}."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "stages": {
                        "type": "array",
                        "description": "Load stages in order",
                        "items": {
                            "type": "object",
                            "properties": {
                                "threads": {
                                    "type": ["integer", "string"],
                                    "description": "Threads of the stage",
                                },
                                "duration": {
                                    "type": ["integer", "string", "null"],
                                    "description": "Stage duration in seconds (optional)",
                                },
                                "iterations": {
                                    "type": ["integer", "string", "null"],
                                    "description": "Iterations per thread (optional)",
                                },
                            },
                            "required": ["threads"],
                        },
                    },
                    "name": {
                        "type": "string",
                        "description": "Thread group name (default: Thread Group)",
                    },
                },
                "required": ["stages"],
            },
        ),
    ]


@app.call_tool()
async def call_tool(name: str, arguments: Any) -> List[TextContent]:
    """Handle tool calls from MCP clients.

    Args:
        name: Name of the tool to execute
        arguments: Tool arguments as dictionary

    Returns:
        List of TextContent with tool execution results

    Raises:
        ValueError: If tool name is not recognized
    """
    if name == "convert_jmx_to_dsl":
        return await _convert_jmx_to_dsl(arguments or {})
    elif name == "reconstruct_thread_group":
        return await _reconstruct_thread_group(arguments or {})
    else:
        raise ValueError(f"Unknown tool: {name}")


def _error_response(e: Exception) -> List[TextContent]:
    return [
        TextContent(
            type="text",
            text=json.dumps(
                {"success": False, "error": str(e), "error_type": type(e).__name__},
                indent=2,
            ),
        )
    ]


async def _convert_jmx_to_dsl(arguments: Dict[str, Any]) -> List[TextContent]:
    """Convert a JMX test plan into DSL code.

    Args:
        arguments: Dictionary with 'jmx_path' or 'jmx_content' key, and
            optional 'class_name' and 'output_path' keys

    Returns:
        List with single TextContent containing conversion results
    """
    try:
        jmx_path = arguments.get("jmx_path")
        jmx_content = arguments.get("jmx_content")
        if not jmx_path and not jmx_content:
            raise ValueError("jmx_path or jmx_content is required")

        settings = load_settings().with_overrides(class_name=arguments.get("class_name"))
        reader = JMXReader()
        plan = reader.read(jmx_path) if jmx_path else reader.read_string(jmx_content)
        result = DslCodeGenerator(settings).generate(plan)

        response = {"success": True, **result.to_dict()}
        output_path = arguments.get("output_path")
        if output_path:
            path = Path(output_path)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(result.code, encoding="utf-8")
            response["output_path"] = str(path.absolute())
            logger.info("Generated DSL code written to %s", path)

        return [TextContent(type="text", text=json.dumps(response, indent=2))]

    except (CodegenException, ValueError) as e:
        return _error_response(e)


async def _reconstruct_thread_group(arguments: Dict[str, Any]) -> List[TextContent]:
    """Reconstruct a thread group call from load stages.

    Args:
        arguments: Dictionary with 'stages' list and optional 'name' key

    Returns:
        List with single TextContent containing the generated call
    """
    try:
        stages_data = arguments.get("stages")
        if not isinstance(stages_data, list):
            raise ValueError("stages is required and must be a list")
        stages = []
        for stage in stages_data:
            if not isinstance(stage, dict) or stage.get("threads") is None:
                raise ValueError(f"Invalid stage {stage!r}: threads is required")
            stages.append(
                Stage.from_values(stage["threads"], stage.get("duration"), stage.get("iterations"))
            )

        call = reconstruct_thread_group(stages, arguments.get("name"))
        response = {
            "success": True,
            "code": call.build_code(),
            "imports": sorted(call.get_imports()),
            "static_imports": sorted(call.get_static_imports()),
        }
        return [TextContent(type="text", text=json.dumps(response, indent=2))]

    except (CodegenException, ValueError) as e:
        return _error_response(e)


async def main() -> None:
    """Main entry point for MCP server.

    Starts the MCP server using stdio transport for communication
    with MCP clients.
    """
    async with stdio_server() as (read_stream, write_stream):
        await app.run(read_stream, write_stream, app.create_initialization_options())


def run_server() -> None:
    """Synchronous wrapper to run the MCP server.

    This is called from the CLI mcp command.
    """
    asyncio.run(main())


if __name__ == "__main__":
    run_server()
