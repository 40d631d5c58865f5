"""
AIOS Command Line Interface

Main entry point for the aios CLI.
"""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Dict, Optional, Tuple

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from aios_core.config import CORE_SCOPE, ToolPaths
from aios_core.exceptions import AIOSError, get_error_code
from aios_core.logging_config import setup_logging

console = Console()
err_console = Console(stderr=True)


def _fail(error: AIOSError) -> None:
    err_console.print(f"[red]Error:[/red] {escape(str(error))}")
    sys.exit(get_error_code(error))


def _parse_args(pairs: Tuple[str, ...]) -> Dict[str, str]:
    args = {}
    for pair in pairs:
        if "=" not in pair:
            raise click.BadParameter(f"expected key=value, got '{pair}'", param_hint="--arg")
        key, value = pair.split("=", 1)
        args[key.strip()] = value
    return args


@click.group()
@click.version_option(package_name="aios-core")
@click.option("--root", type=click.Path(file_okay=False), help="Project root (default: discovered from cwd)")
@click.option("--verbose", "-v", is_flag=True, help="Show debug output")
@click.pass_context
def main(ctx: click.Context, root: Optional[str], verbose: bool):
    """AIOS: AI agent framework tooling"""
    setup_logging(level=logging.DEBUG if verbose else None)
    ctx.ensure_object(dict)
    ctx.obj["root"] = Path(root) if root else None


def _get_resolver(ctx: click.Context):
    from aios_core.tools import ToolResolver

    root = ctx.obj.get("root") if ctx.obj else None
    try:
        paths = ToolPaths.for_root(root) if root else ToolPaths.discover()
    except AIOSError as e:
        _fail(e)
    return ToolResolver(paths)


@main.group()
def tools():
    """Inspect and validate tool definitions."""
    pass


@tools.command("list")
@click.option("--pack", help="Only list tools visible to this expansion pack")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_context
def list_tools(ctx: click.Context, pack: Optional[str], json_output: bool):
    """List every discoverable tool.

    Examples:
        aios tools list
        aios tools list --pack hybrid-ops
    """
    from aios_core.tools import loader

    resolver = _get_resolver(ctx)
    try:
        if pack:
            tool_ids = loader.list_documents(resolver.search_roots(pack))
        else:
            tool_ids = resolver.list_available_tools()
    except AIOSError as e:
        _fail(e)

    if json_output:
        print(json.dumps(tool_ids, indent=2))
        return

    if not tool_ids:
        console.print("[yellow]No tools found[/yellow]")
        console.print(f"[dim]Searched: {', '.join(str(p) for p in resolver.search_roots(pack))}[/dim]")
        return

    console.print(f"[bold blue]Available tools ({len(tool_ids)})[/bold blue]")
    for tool_id in tool_ids:
        console.print(f"  {tool_id}")


@tools.command()
@click.argument("tool_id")
@click.option("--pack", help="Resolve in the scope of an expansion pack")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_context
def show(ctx: click.Context, tool_id: str, pack: Optional[str], json_output: bool):
    """Resolve a tool and show its definition."""
    resolver = _get_resolver(ctx)
    try:
        tool = asyncio.run(resolver.resolve_tool(tool_id, expansion_pack=pack))
    except AIOSError as e:
        _fail(e)

    validators = tool.executable_knowledge.validators if tool.executable_knowledge else []

    if json_output:
        print(tool.model_dump_json(indent=2))
        return

    table = Table(title=f"Tool: {tool.id}", show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("Name", tool.name)
    table.add_row("Type", tool.type.value)
    table.add_row("Version", tool.version)
    table.add_row("Schema", f"v{tool.schema_version}")
    table.add_row("Knowledge", tool.knowledge_strategy.value)
    table.add_row("Scope", tool.scope)
    table.add_row("Source", str(tool.source_path))
    if tool.commands:
        table.add_row("Commands", ", ".join(str(c) for c in tool.commands))
    if tool.health_check:
        table.add_row("Health check", tool.health_check.method)
    if validators:
        table.add_row("Validators", ", ".join(f"{v.id} ({v.validates})" for v in validators))
    console.print(table)
    console.print(f"[dim]{escape(tool.description)}[/dim]")


@tools.command()
@click.argument("tool_id")
@click.option("--pack", help="Check in the scope of an expansion pack")
@click.pass_context
def exists(ctx: click.Context, tool_id: str, pack: Optional[str]):
    """Exit 0 if a tool definition exists, 1 otherwise."""
    resolver = _get_resolver(ctx)
    try:
        found = asyncio.run(resolver.tool_exists(tool_id, expansion_pack=pack))
    except AIOSError as e:
        _fail(e)
    if found:
        console.print(f"[green]✓[/green] {tool_id}")
    else:
        console.print(f"[red]✗[/red] {tool_id} not found")
    sys.exit(0 if found else 1)


@tools.command("validate")
@click.argument("tool_id")
@click.argument("command")
@click.option("--arg", "arg_pairs", multiple=True, help="Command argument as key=value (repeatable)")
@click.option("--pack", help="Resolve in the scope of an expansion pack")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_context
def validate_command(
    ctx: click.Context,
    tool_id: str,
    command: str,
    arg_pairs: Tuple[str, ...],
    pack: Optional[str],
    json_output: bool
):
    """Validate a command against a tool's embedded validators.

    Commands without a validator pass automatically.

    Examples:
        aios tools validate github-cli pr-create --arg title="Fix bug"
    """
    from aios_core.tools import ToolValidationHelper

    args = _parse_args(arg_pairs)
    resolver = _get_resolver(ctx)

    async def _run():
        tool = await resolver.resolve_tool(tool_id, expansion_pack=pack)
        helper = ToolValidationHelper(tool.executable_knowledge)
        return await helper.validate(command, args)

    try:
        result = asyncio.run(_run())
    except AIOSError as e:
        _fail(e)

    if json_output:
        print(json.dumps(result.to_dict(), indent=2))
    elif result.valid:
        console.print(f"[green]✓[/green] {tool_id} {command}: valid")
    else:
        console.print(f"[red]✗[/red] {tool_id} {command}: invalid")
        for error in result.errors:
            console.print(f"  - {escape(error)}")
    sys.exit(0 if result.valid else 1)


@tools.command()
@click.option("--pack", help="Verify in the scope of an expansion pack")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_context
def verify(ctx: click.Context, pack: Optional[str], json_output: bool):
    """Resolve every tool and report schema version or error.

    Without --pack, core and common tools are resolved unscoped and each
    expansion pack's own tools are resolved in that pack's scope.
    """
    from aios_core.tools import loader

    resolver = _get_resolver(ctx)
    if pack:
        try:
            roots = resolver.search_roots(pack)
        except AIOSError as e:
            _fail(e)
        targets = [(tool_id, pack) for tool_id in loader.list_documents(roots)]
    else:
        targets = [(tool_id, None) for tool_id in loader.list_documents(resolver.search_roots())]
        for name in resolver.paths.expansion_pack_names():
            targets.extend(
                (tool_id, name) for tool_id in loader.list_documents([resolver.paths.pack_tools(name)])
            )

    async def _verify():
        report = []
        for tool_id, scope in targets:
            entry = {"id": tool_id, "scope": scope or CORE_SCOPE}
            try:
                tool = await resolver.resolve_tool(tool_id, expansion_pack=scope)
                entry.update(ok=True, schema_version=tool.schema_version)
            except AIOSError as e:
                entry.update(ok=False, error=e.message)
            report.append(entry)
        return report

    report = asyncio.run(_verify())
    failures = [entry for entry in report if not entry["ok"]]

    if json_output:
        print(json.dumps({"tools": report, "failures": len(failures)}, indent=2))
    else:
        table = Table(title="Tool verification")
        table.add_column("Tool")
        table.add_column("Scope")
        table.add_column("Status")
        table.add_column("Detail")
        for entry in report:
            if entry["ok"]:
                table.add_row(entry["id"], entry["scope"], "[green]ok[/green]", f"schema v{entry['schema_version']}")
            else:
                table.add_row(entry["id"], entry["scope"], "[red]error[/red]", escape(entry["error"]))
        console.print(table)
        console.print(f"{len(report) - len(failures)}/{len(report)} tools resolved")

    sys.exit(1 if failures else 0)


if __name__ == "__main__":
    main()
