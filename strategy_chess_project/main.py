#!/usr/bin/env python3
"""
Strategy Chess 主入口文件

提供统一的命令行接口来启动API服务器和查看棋盘。
"""

import sys
from pathlib import Path
from typing import Iterable, Optional, Tuple

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

# 添加项目根目录到Python路径
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from strategy_chess_project import __version__, __description__
from strategy_chess_project.src.strategy_chess_engine.config import ConfigManager
from strategy_chess_project.src.strategy_chess_engine.rules_engine import (
    ChessBoard, Color, legal_attacks, legal_moves
)
from strategy_chess_project.src.strategy_chess_engine.rules_engine.pieces import PIECE_NAMES
from strategy_chess_project.src.strategy_chess_engine.utils import setup_logger_from_config

console = Console()

DEFAULT_CONFIG_DIR = "strategy_chess_project/configs/strategy_chess_engine"


def print_banner():
    """打印项目横幅"""
    banner_text = Text()
    banner_text.append("♞ Strategy Chess ♞\n", style="bold blue")
    banner_text.append(f"版本: {__version__}\n", style="green")
    banner_text.append(__description__, style="white")

    panel = Panel(
        banner_text,
        title="策略象棋系统",
        title_align="center",
        border_style="blue",
        padding=(1, 2)
    )
    console.print(panel)


def render_board(board: ChessBoard,
                 moves: Iterable[Tuple[int, int]] = (),
                 attacks: Iterable[Tuple[int, int]] = (),
                 selected: Optional[Tuple[int, int]] = None) -> Table:
    """
    把棋盘渲染为rich表格

    移动目标显示为绿色，攻击目标显示为红色。
    """
    moves, attacks = set(moves), set(attacks)
    table = Table(show_header=True, header_style="bold", show_lines=True)
    table.add_column("", justify="center")
    for file_name in "abcdefgh":
        table.add_column(file_name, justify="center", width=4)

    for row in range(8):
        cells = []
        for col in range(8):
            pos = (row, col)
            piece = board.get_piece_at(pos)
            label = " " if piece is None else piece.letter
            if piece is not None and piece.state is not None:
                label += str(piece.state)
            if pos == selected:
                style = "bold reverse"
            elif pos in attacks:
                style = "bold red"
            elif pos in moves:
                label, style = "·", "green"
            elif piece is not None and piece.color is Color.WHITE:
                style = "bold white"
            else:
                style = "cyan"
            cells.append(Text(label, style=style))
        table.add_row(str(8 - row), *cells)
    return table


@click.group()
@click.version_option(version=__version__, prog_name="Strategy Chess")
@click.option('--debug', is_flag=True, help='启用调试模式')
@click.option('--config-dir', type=click.Path(), default=DEFAULT_CONFIG_DIR, help='配置目录')
@click.pass_context
def cli(ctx: click.Context, debug: bool, config_dir: str):
    """策略象棋系统 - 变体象棋规则引擎、会话管理与联机中继"""
    ctx.ensure_object(dict)
    ctx.obj['config_dir'] = config_dir
    ctx.obj['debug'] = debug
    if debug:
        console.print("[yellow]调试模式已启用[/yellow]")


@cli.command()
@click.option('--host', type=str, default=None, help='服务器主机地址')
@click.option('--port', type=int, default=None, help='API服务端口')
@click.pass_context
def serve(ctx: click.Context, host: Optional[str], port: Optional[int]):
    """启动API服务器与联机中继"""
    from strategy_chess_project.src.strategy_chess_engine.session_interface import create_api_server

    config_manager = ConfigManager(ctx.obj['config_dir'])
    system_config = config_manager.get_system_config()
    server_config = config_manager.get_server_config()
    game_config = config_manager.get_game_config()

    setup_logger_from_config(system_config, debug=ctx.obj['debug'])

    host = host or server_config.host
    port = port or server_config.port
    console.print(f"[green]API服务器将在 {host}:{port} 启动，中继路径 {server_config.relay_path}[/green]")

    server = create_api_server(server_config=server_config, game_config=game_config)
    server.run(host=host, port=port)


@cli.command()
def board():
    """显示开局局面"""
    console.print(render_board(ChessBoard.initial()))


@cli.command()
@click.argument('row', type=click.IntRange(0, 7))
@click.argument('col', type=click.IntRange(0, 7))
def reach(row: int, col: int):
    """显示开局局面上指定格子的移动和攻击集合"""
    initial = ChessBoard.initial()
    pos = (row, col)
    piece = initial.get_piece_at(pos)
    if piece is None:
        console.print(f"[yellow]格子 ({row}, {col}) 为空[/yellow]")
        return

    moves = legal_moves(initial, pos)
    attacks = legal_attacks(initial, pos)
    console.print(render_board(initial, moves, attacks, selected=pos))
    console.print(f"{piece.color.value} {PIECE_NAMES[piece.kind]}: "
                  f"[green]{len(moves)} 个移动目标[/green], [red]{len(attacks)} 个攻击目标[/red]")


@cli.command()
def info():
    """显示系统信息"""
    print_banner()


def main():
    """主函数"""
    cli()


if __name__ == "__main__":
    main()
