"""Interactive command loop for a chat node."""

from __future__ import annotations

import ipaddress
import sys
from typing import Optional, TextIO

from chainchat import logger
from chainchat.node import P2PNode

_HELP = """
Comandos disponíveis:
  chat <mensagem>         - Minera e envia uma nova mensagem
  history                 - Lista todo o histórico de chats
  peers                   - Mostra os peers conectados e conhecidos
  status                  - Exibe o status geral do nó
  addpeer <ip>            - Adiciona e conecta a um novo peer pelo IP
  filechat <arquivo>      - Envia mensagens de um arquivo texto
  help                    - Mostra esta ajuda
  quit                    - Sai do programa
"""

_ALIASES = {
    "c": "chat",
    "h": "history",
    "p": "peers",
    "s": "status",
    "a": "addpeer",
    "f": "filechat",
    "?": "help",
    "q": "quit",
}


def print_help(out: Optional[TextIO] = None) -> None:
    """Write the command summary."""
    out = sys.stdout if out is None else out
    out.write(_HELP + "\n")


def _chat(node: P2PNode, message: str, out: TextIO) -> None:
    with node.archive_lock:
        try:
            node.archive.add_message(message)
        except ValueError as exc:
            print(exc, file=out)


def _history(node: P2PNode, out: TextIO) -> None:
    with node.archive_lock:
        chats = list(node.archive.chats)
    if not chats:
        print("O histórico de chats está vazio.", file=out)
        return
    print(f"--- Histórico de Chats ({len(chats)} mensagens) ---", file=out)
    width = len(str(len(chats)))
    for index, chat in enumerate(chats):
        print(f"[{index:0{width}}] {chat.message}", file=out)
    print("-------------------------------------------", file=out)


def _peers(node: P2PNode, out: TextIO) -> None:
    with node.peers_lock:
        ips = node.peers.get_ips()
    if not ips:
        print("Nenhum peer conectado.", file=out)
        return
    print(f"--- Peers Conhecidos ({len(ips)}) ---", file=out)
    for ip in ips:
        print(f"- {ipaddress.IPv4Address(ip)}", file=out)
    print("-----------------------------", file=out)


def _status(node: P2PNode, out: TextIO) -> None:
    with node.peers_lock:
        peer_count = len(node.peers.get_ips())
    with node.archive_lock:
        archive_len = len(node.archive)
    print("--- Status do Nó ---", file=out)
    print(f"Porta TCP: {node.port}", file=out)
    print(f"Peers conhecidos: {peer_count}", file=out)
    print(f"Mensagens no arquivo: {archive_len}", file=out)
    print("--------------------", file=out)


def _filechat(node: P2PNode, path: str, out: TextIO, err: TextIO) -> None:
    try:
        handle = open(path, "rb")
    except OSError as exc:
        print(f"Erro ao abrir o arquivo '{path}': {exc}", file=err)
        return
    with handle:
        for raw in handle:
            try:
                line = raw.decode("utf-8")
            except UnicodeDecodeError:
                break
            line = line.removesuffix("\n").removesuffix("\r")
            _chat(node, line, out)


def handle_command(
    node: P2PNode,
    line: str,
    out: Optional[TextIO] = None,
    err: Optional[TextIO] = None,
) -> bool:
    """Run one command line; return False when the user asked to quit."""
    out = sys.stdout if out is None else out
    err = sys.stderr if err is None else err
    parts = line.split()
    if not parts:
        return True
    command, args = parts[0], parts[1:]
    name = _ALIASES.get(command, command)

    if name == "chat":
        if not args:
            print("Uso: chat <mensagem>", file=err)
        else:
            _chat(node, " ".join(args), out)
    elif name == "history":
        _history(node, out)
    elif name == "peers":
        _peers(node, out)
    elif name == "status":
        _status(node, out)
    elif name == "addpeer":
        if args:
            node.connect_to_peer(args[0])
        else:
            print("Uso: addpeer <ip>", file=out)
    elif name == "filechat":
        if not args:
            print("Uso: filechat <caminho_do_arquivo>", file=err)
        else:
            _filechat(node, args[0], out, err)
    elif name == "help":
        print_help(out)
    elif name == "quit":
        return False
    else:
        print(
            f"Comando desconhecido: '{command}'. "
            "Digite 'help' para ver a lista de comandos.",
            file=out,
        )
    return True


def user_input_loop(
    node: P2PNode,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
    stderr: Optional[TextIO] = None,
) -> None:
    """Read commands until quit or end of input."""
    stdin = sys.stdin if stdin is None else stdin
    stdout = sys.stdout if stdout is None else stdout
    stderr = sys.stderr if stderr is None else stderr
    print_help(stdout)
    while True:
        stdout.write("> ")
        stdout.flush()
        line = stdin.readline()
        if not line:
            break
        if not handle_command(node, line, stdout, stderr):
            break


def main(argv: Optional[list[str]] = None) -> int:
    """Start a node, optionally join a first peer, and run the command loop."""
    args = sys.argv[1:] if argv is None else list(argv)
    initial_peer = args[0] if args else None

    logger.set_log_level(logger.LogLevel.OFF)
    logger.info("Iniciando Chat P2P com Blockchain...")
    if initial_peer:
        logger.info(f"Tentando conectar ao peer inicial: {initial_peer}")
    else:
        logger.info("Nenhum peer inicial especificado. Aguardando conexões...")

    node = P2PNode()
    try:
        node.start_listener()
    except OSError as exc:
        print(f"Falha ao iniciar o listener TCP: {exc}", file=sys.stderr)

    if initial_peer:
        node.connect_to_peer(initial_peer)

    user_input_loop(node)
    return 0


if __name__ == "__main__":
    sys.exit(main())