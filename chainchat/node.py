"""Peer-to-peer node: TCP listener, peer connections and protocol handling."""

from __future__ import annotations

import ipaddress
import socket
import struct
import threading
import time
from typing import Callable, Optional

from chainchat import logger
from chainchat.archive import Archive
from chainchat.message import (
    CODE_SIZE,
    HASH_SIZE,
    DecodeError,
    MessageType,
    is_valid_message_type,
)
from chainchat.peer import PeerList

TCP_PORT = 51511
REQUEST_INTERVAL = 5.0


def _read_exact(stream: socket.socket, size: int) -> bytes:
    """Read exactly ``size`` bytes or raise ConnectionError on end of stream."""
    buffer = bytearray()
    while len(buffer) < size:
        chunk = stream.recv(size - len(buffer))
        if not chunk:
            raise ConnectionError("connection closed by peer")
        buffer += chunk
    return bytes(buffer)


def _spawn(target: Callable[..., object], *args: object) -> None:
    threading.Thread(target=target, args=args, daemon=True).start()


class P2PNode:
    """A chat node that shares its peer list and chat archive with its peers."""

    def __init__(self, port: int = TCP_PORT) -> None:
        self.port = port
        self.peers = PeerList()
        self.archive = Archive()
        self.peers_lock = threading.Lock()
        self.archive_lock = threading.Lock()
        self.request_interval = REQUEST_INTERVAL
        self._send_lock = threading.Lock()
        self._listener: Optional[socket.socket] = None

    def start_listener(self) -> int:
        """Bind the TCP listener, accept peers in the background; return the bound port.

        Raises OSError if the port cannot be bound.
        """
        listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            listener.bind(("0.0.0.0", self.port))
            listener.listen()
        except OSError:
            listener.close()
            raise
        self._listener = listener
        bound = listener.getsockname()[1]
        logger.info(f"Escutando por conexões na porta {bound}")
        _spawn(self._accept_loop, listener)
        return bound

    def _accept_loop(self, listener: socket.socket) -> None:
        while True:
            try:
                conn, _ = listener.accept()
            except OSError as exc:
                if listener.fileno() == -1:
                    return
                logger.warn(f"Falha ao aceitar conexão: {exc}")
                continue
            _spawn(self._handle_peer_connection, conn)

    def connect_to_peer(self, peer_addr: str) -> None:
        """Connect to ``peer_addr`` ("ip" or "ip:port") in the background."""
        host, port = self._split_address(peer_addr)
        _spawn(self._connect, host, port, peer_addr)

    def _split_address(self, peer_addr: str) -> tuple[str, int]:
        if peer_addr.count(":") == 1:
            host, _, port = peer_addr.partition(":")
            if port.isdigit():
                return host, int(port)
        return peer_addr, self.port

    def _connect(self, host: str, port: int, label: str) -> None:
        try:
            stream = socket.create_connection((host, port))
        except OSError as exc:
            logger.warn(f"Falha ao conectar ao peer {label}: {exc}")
            return
        logger.info(f"Conectado com sucesso ao peer: {label}")
        self._handle_peer_connection(stream)

    def _handle_peer_connection(self, stream: socket.socket) -> None:
        with stream:
            try:
                peer = stream.getpeername()
            except OSError:
                logger.warn("Conexão terminada antes de identificar o IP do peer")
                return
            if stream.family != socket.AF_INET:
                logger.warn(f"Conexão de peer IPv6 não suportada: {peer}")
                return
            peer_ip = int(ipaddress.IPv4Address(peer[0]))
            label = f"{peer[0]}:{peer[1]}"
            with self.peers_lock:
                self.peers.add_peer(peer_ip)
            logger.debug(f"Novo peer conectado: {label}")
            _spawn(self._peer_requester, stream)
            try:
                self._serve(stream, label)
            finally:
                with self.peers_lock:
                    self.peers.remove_peer(peer_ip)

    def _serve(self, stream: socket.socket, label: str) -> None:
        while True:
            try:
                type_byte = _read_exact(stream, 1)[0]
            except OSError:
                logger.info(f"Peer {label} desconectado.")
                return
            if not is_valid_message_type(type_byte):
                continue
            if not self.handle_message(MessageType(type_byte), stream):
                return

    def _peer_requester(self, stream: socket.socket) -> None:
        while True:
            time.sleep(self.request_interval)
            logger.debug("Enviando pedido de lista de peers")
            try:
                self._send(stream, bytes([MessageType.PEER_REQUEST]))
            except OSError:
                logger.warn("Falha ao enviar pedido de lista de peers.")
                return
            logger.debug("Enviando pedido de arquivo de chats")
            try:
                self._send(stream, bytes([MessageType.ARCHIVE_REQUEST]))
            except OSError:
                logger.warn("Falha ao enviar pedido de arquivo de chats.")
                return
            if not self._handle_archive_request(stream):
                logger.warn("Falha ao propagar arquivo de chats para o peer.")
                return

    def _send(self, stream: socket.socket, data: bytes) -> None:
        with self._send_lock:
            stream.sendall(data)

    def handle_message(self, msg_type: MessageType, stream: socket.socket) -> bool:
        """Handle one message whose type byte was already read.

        Returns False when the connection should be dropped.
        """
        handlers = {
            MessageType.PEER_REQUEST: self._handle_peer_request,
            MessageType.PEER_RESPONSE: self._handle_peer_response,
            MessageType.ARCHIVE_REQUEST: self._handle_archive_request,
            MessageType.ARCHIVE_RESPONSE: self._handle_archive_response,
            MessageType.NOTIFICATION_MESSAGE: self._handle_notification_message,
        }
        return handlers[MessageType(msg_type)](stream)

    def _handle_peer_request(self, stream: socket.socket) -> bool:
        logger.debug("Enviando lista de peers")
        with self.peers_lock:
            response = self.peers.to_bytes()
        try:
            self._send(stream, response)
        except OSError:
            return False
        return True

    def _handle_peer_response(self, stream: socket.socket) -> bool:
        logger.debug("Recebendo lista de peers")
        try:
            (count,) = struct.unpack(">I", _read_exact(stream, 4))
            received = [
                struct.unpack(">I", _read_exact(stream, 4))[0] for _ in range(count)
            ]
        except OSError:
            return False
        with self.peers_lock:
            fresh = self.peers.add_and_get_new_peers(received)
        for ip in fresh:
            self.connect_to_peer(str(ipaddress.IPv4Address(ip)))
        return True

    def _handle_archive_request(self, stream: socket.socket) -> bool:
        logger.debug("Enviando arquivo de chats")
        with self.archive_lock:
            if not len(self.archive):
                return True
            response = self.archive.to_bytes()
        try:
            self._send(stream, response)
        except OSError:
            return False
        return True

    def _handle_archive_response(self, stream: socket.socket) -> bool:
        logger.debug("Recebendo arquivo de chats")
        data = bytearray([MessageType.ARCHIVE_RESPONSE])
        try:
            count_bytes = _read_exact(stream, 4)
            data += count_bytes
            (count,) = struct.unpack(">I", count_bytes)
            for _ in range(count):
                length = _read_exact(stream, 1)
                data += length
                data += _read_exact(stream, length[0] + CODE_SIZE + HASH_SIZE)
        except OSError:
            return False
        try:
            received = Archive.from_bytes(bytes(data))
        except DecodeError:
            return True
        if received.is_valid():
            with self.archive_lock:
                if len(received) > len(self.archive):
                    self.archive = received
                    logger.info(
                        f"Arquivo de chats atualizado com {len(received)} mensagens."
                    )
        return True

    def _handle_notification_message(self, stream: socket.socket) -> bool:
        try:
            length = _read_exact(stream, 1)[0]
        except OSError:
            logger.warn("Falha ao ler tamanho da mensagem de notificação.")
            return False
        try:
            raw = _read_exact(stream, length)
        except OSError:
            logger.warn("Falha ao ler mensagem de notificação.")
            return False
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError:
            logger.warn("Mensagem de notificação recebida não está em ASCII válido.")
            return False
        logger.debug(f"Notificação recebida: {text}")
        return True