"""
CLI 命令：campamento
层级浏览与增删改入口
"""
import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Awaitable, Callable, List, Optional

import click

from campamento.config_manager import CampamentoConfig, get_config
from campamento.exceptions import AuthError, CampamentoError, ConfigError, NavigationError
from campamento.gateway.parsing import build_tree, tree_to_wire
from campamento.hierarchy.models import LEVELS, HierarchyNode, Level
from campamento.hierarchy.navigation import NavigationController
from campamento.hierarchy.tree import HierarchyTree
from campamento.logger import setup_logging
from campamento.session import CampamentoSession


MORE_ROOTS_NOTICE = "ℹ️ Hay más elementos raíz de los que se cargaron; aumenta PAGE_LIMIT para verlos"


async def open_session(config: CampamentoConfig) -> CampamentoSession:
    """Start an authenticated session; tests replace this with a faked transport."""
    return await CampamentoSession.start(config)


def _run(ctx: click.Context, action: Callable[[CampamentoSession], Awaitable[Any]]) -> Any:
    config = ctx.obj["config"]

    async def runner():
        session = await open_session(config)
        try:
            return await action(session)
        finally:
            await session.close()

    try:
        return asyncio.run(runner())
    except CampamentoError as e:
        click.echo(f"❌ {e.get_user_message()}", err=True)
        ctx.exit(1)


def _format_node(node: HierarchyNode) -> str:
    if node.level == Level.ORGANIZACION:
        mark = "🏢"
    else:
        mark = "✅" if node.is_done else "⬜"
    return f"{mark} [{node.config.singular_name}] {node.titulo}  ({node.id})"


def _echo_tree(tree: HierarchyTree) -> None:
    if len(tree) == 0:
        click.echo("ℹ️ La jerarquía está vacía")
        return
    for node, depth in tree.walk():
        click.echo(f"{'  ' * depth}{_format_node(node)}")


def _echo_children(children: List[HierarchyNode]) -> None:
    if not children:
        click.echo("  (sin elementos)")
        return
    for i, child in enumerate(children, 1):
        click.echo(f"  {i}. {_format_node(child)}")


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Ruta a runtime.yaml",
)
@click.option("-v", "--verbose", is_flag=True, help="Mostrar logs de depuración en consola")
@click.pass_context
def campamento(ctx: click.Context, config_path: Optional[Path], verbose: bool):
    """Campamento: Visión → Meta → Objetivo → Misión → Tarea"""
    setup_logging(console_level=logging.DEBUG if verbose else logging.WARNING)
    try:
        config = get_config(config_path)
    except ConfigError as e:
        click.echo(f"❌ {e.get_user_message()}", err=True)
        ctx.exit(1)
    ctx.obj = {"config": config}


@campamento.command()
@click.option("--json", "as_json", is_flag=True, help="Salida en el formato anidado de la API")
@click.option(
    "--file",
    "dump_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Leer un volcado JSON en lugar de llamar a la API",
)
@click.pass_context
def tree(ctx: click.Context, as_json: bool, dump_file: Optional[Path]):
    """Mostrar la jerarquía completa"""
    if dump_file is not None:
        try:
            with open(dump_file, "r", encoding="utf-8") as f:
                data = json.load(f)
            hierarchy = build_tree(data if isinstance(data, list) else [data])
        except json.JSONDecodeError as e:
            click.echo(f"❌ JSON inválido en {dump_file.name}: {e}", err=True)
            ctx.exit(1)
        except CampamentoError as e:
            click.echo(f"❌ {e.get_user_message()}", err=True)
            ctx.exit(1)
    else:
        async def fetch(session: CampamentoSession):
            return session.store.tree, session.has_more_roots

        hierarchy, has_more = _run(ctx, fetch)
        if has_more:
            click.echo(MORE_ROOTS_NOTICE, err=True)

    if as_json:
        click.echo(json.dumps(tree_to_wire(hierarchy), ensure_ascii=False, indent=2))
    else:
        _echo_tree(hierarchy)


@campamento.command()
@click.argument("node_id", required=False)
@click.pass_context
def ls(ctx: click.Context, node_id: Optional[str]):
    """Listar los hijos de ID (o las raíces)"""

    async def action(session: CampamentoSession):
        node = session.store.require_node(node_id) if node_id else None
        title = node.titulo if node else session.navigation.current_node().titulo
        click.echo(f"📂 {title}")
        _echo_children(session.store.get_children(node))
        if node is None and session.has_more_roots:
            click.echo(MORE_ROOTS_NOTICE, err=True)

    _run(ctx, action)


@campamento.command()
@click.argument("parent_id", required=False)
@click.option("-t", "--titulo", prompt="Título", help="Título del nuevo elemento")
@click.option("-d", "--descripcion", default=None, help="Descripción opcional")
@click.pass_context
def create(ctx: click.Context, parent_id: Optional[str], titulo: str, descripcion: Optional[str]):
    """Crear un hijo de PARENT_ID (sin PARENT_ID: un elemento raíz)"""

    async def action(session: CampamentoSession):
        if parent_id:
            parent = session.store.require_node(parent_id)
        else:
            parent = session.navigation.current_node()
        node = await session.service.create_child(parent, titulo, descripcion)
        click.echo(f"✅ Creado: {_format_node(node)}")

    _run(ctx, action)


@campamento.command()
@click.argument("node_id")
@click.option("-t", "--titulo", default=None, help="Nuevo título")
@click.option("-d", "--descripcion", default=None, help="Nueva descripción")
@click.pass_context
def update(ctx: click.Context, node_id: str, titulo: Optional[str], descripcion: Optional[str]):
    """Editar el título o la descripción de ID"""
    if titulo is None and descripcion is None:
        click.echo("❌ Indica --titulo o --descripcion", err=True)
        ctx.exit(1)

    async def action(session: CampamentoSession):
        node = session.store.require_node(node_id)
        updated = await session.service.update_item(node, titulo=titulo, descripcion=descripcion)
        click.echo(f"✅ Actualizado: {_format_node(updated)}")

    _run(ctx, action)


@campamento.command()
@click.argument("node_id")
@click.pass_context
def done(ctx: click.Context, node_id: str):
    """Marcar/desmarcar ID como completado (solo ese elemento)"""

    async def action(session: CampamentoSession):
        node = session.store.require_node(node_id)
        updated = await session.service.toggle_done(node)
        click.echo(f"{'✅ Completado' if updated.is_done else '⬜ Pendiente'}: {updated.titulo}")

    _run(ctx, action)


@campamento.command()
@click.argument("node_id")
@click.confirmation_option(prompt="⚠️ ¿Eliminar el elemento y todo su contenido? Esta acción no se puede deshacer")
@click.pass_context
def delete(ctx: click.Context, node_id: str):
    """Eliminar ID"""

    async def action(session: CampamentoSession):
        node = session.store.require_node(node_id)
        await session.service.delete_item(node)
        click.echo(f"🗑️ Eliminado: {node.titulo}")

    _run(ctx, action)


# ---------------------------------------------------------------------------
# browse
# ---------------------------------------------------------------------------
BROWSE_HELP = "número = entrar · b = atrás · 0 = inicio · j N = saltar a la miga N · n = crear · r = recargar · q = salir"


def _echo_location(nav: NavigationController) -> None:
    crumbs = nav.breadcrumbs()
    if crumbs:
        click.echo(" › ".join(f"[{i}] {label}" for i, label in crumbs))
    current = nav.current_node()
    click.echo(f"\n📂 {current.titulo}")
    if current.descripcion:
        click.echo(f"   {current.descripcion}")


def _create_label(nav: NavigationController) -> Optional[str]:
    current = nav.current_node()
    if current.is_root:
        level = nav.child_level()
        return f"+ Nueva {LEVELS[level].singular_name}"
    return current.config.create_label


def _browse_step(nav: NavigationController, command: str) -> None:
    """Apply one browse command to the navigation stack."""
    if command == "b":
        nav.navigate_back()
    elif command == "0":
        nav.reset_navigation()
    elif command.startswith("j"):
        arg = command[1:].strip()
        try:
            index = int(arg)
        except ValueError:
            raise NavigationError(f"Índice inválido: {arg!r}")
        nav.navigate_to_index(index)
    elif command.isdigit():
        children = nav.current_children()
        position = int(command)
        if not 1 <= position <= len(children):
            raise NavigationError(f"No hay elemento {position}")
        nav.navigate_forward(children[position - 1])
    else:
        raise NavigationError(f"Comando desconocido: {command!r}")


@campamento.command()
@click.pass_context
def browse(ctx: click.Context):
    """Navegar la jerarquía de forma interactiva"""

    async def action(session: CampamentoSession):
        nav = session.navigation
        click.echo(BROWSE_HELP)
        while True:
            _echo_location(nav)
            _echo_children(nav.current_children())
            command = click.prompt("›", default="q", show_default=False).strip().lower()
            if command == "q":
                return
            if command == "n":
                label = _create_label(nav)
                if label is None:
                    click.echo(f"⚠️ Una {nav.current_node().config.singular_name} no tiene hijos", err=True)
                    continue
                titulo = click.prompt(label)
                try:
                    node = await session.service.create_child(nav.current_node(), titulo)
                except AuthError:
                    raise
                except CampamentoError as e:
                    click.echo(f"❌ {e.get_user_message()}", err=True)
                    continue
                click.echo(f"✅ Creado: {_format_node(node)}")
                continue
            if command == "r":
                try:
                    await session.refresh()
                except AuthError:
                    raise
                except CampamentoError as e:
                    click.echo(f"❌ {e.get_user_message()}", err=True)
                continue
            try:
                _browse_step(nav, command)
            except NavigationError as e:
                click.echo(f"⚠️ {e.message}", err=True)

    _run(ctx, action)
