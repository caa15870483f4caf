"""sigapi CLI - Main Entry Point.

Commands:
    export   - Build the OpenAPI document and print or write it
    routes   - List documented routes
    serve    - Serve the document with Swagger UI and ReDoc
"""

import importlib
import logging
import sys
from pathlib import Path
from typing import Any, Callable, Optional

import click

from . import __version__, __cli_name__
from .colors import error, info, method_badge, success, table
from ..config import Settings
from ..context import DocContext, default_context
from ..faults import Fault
from ..patterns import route_specificity
from ..router import Router

logger = logging.getLogger("sigapi.cli")


class SigapiGroup(click.Group):
    """Click group listing commands in aligned, coloured columns."""

    def format_commands(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        commands = []
        for subcommand in self.list_commands(ctx):
            cmd = self.get_command(ctx, subcommand)
            if cmd is None or cmd.hidden:
                continue
            commands.append((subcommand, cmd.get_short_help_str(limit=48)))

        if commands:
            with formatter.section(click.style("Commands", fg="cyan", bold=True)):
                max_len = max(len(c[0]) for c in commands) + 2
                for name, help_text in commands:
                    formatter.write(f"  {click.style(name.ljust(max_len), fg='green')} {help_text}\n")


def load_target(target: str) -> DocContext:
    """
    Resolve ``module[:attr]`` to a documentation context.

    ``attr`` may name a ``Router``, a ``DocContext`` or a zero-argument
    callable returning either. Without ``attr`` the module is imported for
    its registrations and the default context is used.
    """
    module_name, _, attr = target.partition(":")
    module = importlib.import_module(module_name)
    if not attr:
        return default_context()

    try:
        obj: Any = getattr(module, attr)
    except AttributeError:
        raise click.BadParameter(f"'{module_name}' has no attribute '{attr}'", param_hint="TARGET") from None

    if callable(obj) and not isinstance(obj, (Router, DocContext)):
        obj = obj()
    if isinstance(obj, Router):
        return obj.context
    if isinstance(obj, DocContext):
        return obj
    raise click.BadParameter(
        f"'{target}' is a {type(obj).__name__}, expected Router or DocContext",
        param_hint="TARGET",
    )


def _fail(fault: Fault) -> None:
    """Log ``fault`` at its severity, print it and exit with status 1."""
    logger.log(fault.severity.log_level, "%s", fault, extra={"fault": fault.to_dict()})
    error(f"✗ {fault}")
    sys.exit(1)


def _initializer(config_path: Optional[str]) -> Optional[Callable[[], Any]]:
    if not config_path:
        return None
    settings = Settings.load(path=config_path)
    return lambda: settings.openapi


@click.group(cls=SigapiGroup)
@click.version_option(version=__version__, prog_name=__cli_name__)
@click.option('--verbose', '-v', is_flag=True, help='Verbose output')
@click.option('--app-dir', default='.', show_default=True,
              type=click.Path(file_okay=False), help='Directory added to the import path')
@click.pass_context
def cli(ctx, verbose: bool, app_dir: str):
    """OpenAPI documents from handler signatures.

    \b
    Quick start:
      sigapi routes myapp.api:router
      sigapi export myapp.api:router -o openapi.json
      sigapi serve myapp.api:router
    """
    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    app_path = str(Path(app_dir).resolve())
    if app_path not in sys.path:
        sys.path.insert(0, app_path)


@cli.command('export')
@click.argument('target')
@click.option('--format', 'fmt', type=click.Choice(['json', 'yaml']), default='json',
              show_default=True, help='Output format')
@click.option('--output', '-o', type=click.Path(dir_okay=False), help='Write to file instead of stdout')
@click.option('--config', 'config_path', type=click.Path(exists=True, dir_okay=False),
              help='YAML or JSON config supplying document metadata')
def export(target: str, fmt: str, output: Optional[str], config_path: Optional[str]):
    """
    Build the OpenAPI document of TARGET.

    Examples:
      sigapi export myapp.api:router
      sigapi export myapp.api:router --format yaml -o openapi.yaml
    """
    try:
        context = load_target(target)
        document = context.build(_initializer(config_path))
    except Fault as e:
        _fail(e)

    text = document.to_yaml() if fmt == 'yaml' else document.to_json(indent=2)

    if output:
        Path(output).write_text(text if text.endswith("\n") else text + "\n")
        success(f"✓ Wrote {len(document.paths)} path(s) to {output}")
    else:
        click.echo(text)


@cli.command('routes')
@click.argument('target')
def routes(target: str):
    """
    List the documented routes of TARGET, most specific first.

    Examples:
      sigapi routes myapp.api:router
    """
    try:
        document = load_target(target).build()
    except Fault as e:
        _fail(e)

    rows = []
    for path in sorted(document.paths, key=lambda p: (-route_specificity(p), p)):
        for method, operation in document.paths[path].items():
            rows.append([method_badge(method.upper()), path, operation.get("operationId", "")])

    if not rows:
        info("No routes registered")
        return

    table(["Method", "Path", "Operation"], rows)


@cli.command('serve')
@click.argument('target')
@click.option('--host', default='127.0.0.1', show_default=True, help='Bind host')
@click.option('--port', default=8000, show_default=True, type=int, help='Bind port')
@click.option('--config', 'config_path', type=click.Path(exists=True, dir_okay=False),
              help='YAML or JSON config supplying document metadata')
@click.pass_context
def serve(ctx, target: str, host: str, port: int, config_path: Optional[str]):
    """
    Serve the document of TARGET with Swagger UI and ReDoc.

    Examples:
      sigapi serve myapp.api:router --port 8080
    """
    import uvicorn

    from ..docs_app import DocsApp

    try:
        context = load_target(target)
        settings = Settings.load(path=config_path) if config_path else None
    except Fault as e:
        _fail(e)

    app = DocsApp(
        context,
        initializer=(lambda: settings.openapi) if settings else None,
        config=settings.openapi if settings else None,
    )

    verbose = ctx.obj.get('verbose', False)
    info(f"Serving docs at http://{host}:{port}{app.config.docs_path}")

    uvicorn.run(
        app=app,
        host=host,
        port=port,
        log_level="info" if verbose else "warning",
        access_log=verbose,
    )


def main():
    """Entry point for `sigapi` command."""
    cli(obj={})


if __name__ == '__main__':
    main()
