"""Live capture of Ethernet frames from a network interface."""

from __future__ import annotations

import logging
import socket
import struct
import threading
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Union

from .config import SnifferConfig
from .filterexpr import FilterExpression, compile_filter
from .ip import IPLayer, Protocol
from .layer import PacketParseError
from .packet import Packet
from .tcp import TCPLayer
from .udp import UDPLayer

logger = logging.getLogger(__name__)

PacketCallback = Callable[[Packet], None]

_ETH_P_ALL = 0x0003
_AF_PACKET = getattr(socket, "AF_PACKET", 17)
_SOL_PACKET = getattr(socket, "SOL_PACKET", 263)
_PACKET_ADD_MEMBERSHIP = 1
_PACKET_STATISTICS = 6
_PACKET_MR_PROMISC = 1
_ARPHRD_ETHER = 1
_ARPHRD_LOOPBACK = 772
_SNAPLEN = 8192
_POLL_INTERVAL = 0.01


class SnifferError(RuntimeError):
    """Raised when capture cannot be started."""


@dataclass(frozen=True)
class SnifferStats:
    """Capture counters."""

    packets_received: int = 0
    packets_dropped: int = 0
    packets_if_dropped: int = 0


def list_interfaces() -> list[str]:
    """Return the names of the network interfaces of this host."""
    try:
        return [name for _, name in socket.if_nameindex()]
    except OSError:
        return []


def _default_interface() -> str:
    names = list_interfaces()
    if not names:
        raise SnifferError("No network devices found")
    return next((name for name in names if name != "lo"), names[0])


class PacketSniffer:
    """Captures frames on one interface and hands accepted packets to a callback."""

    def __init__(self, config: SnifferConfig) -> None:
        self.config = config
        self.device_name = ""
        self._callback: Optional[PacketCallback] = None
        self._filter: Optional[FilterExpression] = None
        self._socket: Optional[socket.socket] = None
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._lock = threading.Lock()
        self._running = False
        self._received = 0
        self._dropped = 0

    def start(self) -> None:
        """Open the interface and start capturing in a background thread."""
        if self._running:
            return
        sock = self._open()
        self._socket = sock
        self._stop_event.clear()
        self._running = True
        self._thread = threading.Thread(
            target=self._capture_loop, args=(sock,), name="wiretap-capture", daemon=True
        )
        self._thread.start()

    def stop(self) -> None:
        """Stop capturing and release the interface."""
        self._running = False
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join()
        self._thread = None
        sock = self._socket
        if sock is not None:
            self._harvest_kernel_stats(sock)
            sock.close()
            self._socket = None

    def set_callback(self, callback: Optional[PacketCallback]) -> None:
        """Set the function called with every accepted packet."""
        self._callback = callback

    def set_filter(self, expression: str) -> None:
        """Install a filter expression; raises FilterSyntaxError if it is invalid."""
        self._filter = compile_filter(expression) if expression.strip() else None

    def stats(self) -> SnifferStats:
        """Return the current capture counters."""
        if self._socket is not None:
            self._harvest_kernel_stats(self._socket)
        with self._lock:
            return SnifferStats(self._received, self._dropped, 0)

    def accepts(self, packet: Packet) -> bool:
        """Apply the protocol, address and port settings of the configuration."""
        config = self.config
        ip = packet.get_layer(IPLayer)
        if ip is None:
            if not config.filter_ethernet:
                logger.debug("Non-IP packet and ethernet filter is off")
                return False
            return True

        protocol = ip.protocol
        enabled = {
            Protocol.TCP: config.filter_tcp,
            Protocol.UDP: config.filter_udp,
            Protocol.ICMP: config.filter_icmp,
        }.get(protocol, False)
        accepted = enabled
        if not enabled:
            logger.debug("Packet filtered out by protocol %d", ip.protocol_number)

        if config.src_ip and ip.source_ip != config.src_ip:
            logger.debug("Packet filtered out by source IP")
            accepted = False
        if config.dst_ip and ip.dest_ip != config.dst_ip:
            logger.debug("Packet filtered out by destination IP")
            accepted = False

        layer_type = {Protocol.TCP: TCPLayer, Protocol.UDP: UDPLayer}.get(protocol)
        layer = packet.get_layer(layer_type) if layer_type is not None else None
        if layer is not None:
            wrong_src = bool(config.src_ports) and layer.source_port not in config.src_ports
            wrong_dst = bool(config.dst_ports) and layer.dest_port not in config.dst_ports
            if wrong_src or wrong_dst:
                logger.debug("Packet filtered out by port filter")
                accepted = False
        return accepted

    def process_frame(
        self, data: bytes, timestamp: Union[datetime, float, None] = None
    ) -> bool:
        """Decode one captured frame and pass it on; return True if the callback got it."""
        if not self._running:
            logger.debug("Not processing packet - not running")
            return False
        if timestamp is None:
            timestamp = time.time()
        try:
            packet = Packet.parse(data, timestamp)
        except PacketParseError as exc:
            logger.error("Error processing packet: %s", exc)
            return False
        active = self._filter
        if active is not None and not active.matches(packet):
            return False
        with self._lock:
            self._received += 1
        callback = self._callback
        if callback is None:
            logger.debug("Not processing packet - no callback")
            return False
        if not self.accepts(packet):
            return False
        callback(packet)
        return True

    def __enter__(self) -> "PacketSniffer":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    def _open(self) -> socket.socket:
        device = self.config.interface or _default_interface()
        try:
            sock = socket.socket(_AF_PACKET, socket.SOCK_RAW, socket.htons(_ETH_P_ALL))
        except OSError as exc:
            raise SnifferError(f"cannot open capture socket: {exc}") from exc
        try:
            self._configure(sock, device)
        except OSError as exc:
            sock.close()
            raise SnifferError(f"cannot capture on {device}: {exc}") from exc
        except Exception:
            sock.close()
            raise
        self.device_name = device
        return sock

    def _configure(self, sock: socket.socket, device: str) -> None:
        sock.bind((device, _ETH_P_ALL))
        hardware_type = sock.getsockname()[3]
        if hardware_type not in (_ARPHRD_ETHER, _ARPHRD_LOOPBACK):
            raise SnifferError("Only Ethernet is supported")
        if self.config.promiscuous:
            request = struct.pack(
                "iHH8s", socket.if_nametoindex(device), _PACKET_MR_PROMISC, 0, b""
            )
            sock.setsockopt(_SOL_PACKET, _PACKET_ADD_MEMBERSHIP, request)
        if self.config.filter and self._filter is None:
            self.set_filter(self.config.filter)
        sock.setblocking(False)

    def _harvest_kernel_stats(self, sock: socket.socket) -> None:
        try:
            raw = sock.getsockopt(_SOL_PACKET, _PACKET_STATISTICS, 8)
        except OSError:
            return
        _packets, drops = struct.unpack("II", raw)
        with self._lock:
            self._dropped += drops

    def _capture_loop(self, sock: socket.socket) -> None:
        while not self._stop_event.is_set():
            try:
                while not self._stop_event.is_set():
                    data, _address = sock.recvfrom(_SNAPLEN)
                    self._deliver(data)
            except BlockingIOError:
                pass
            except OSError as exc:
                logger.error("Capture stopped: %s", exc)
                break
            self._stop_event.wait(_POLL_INTERVAL)

    def _deliver(self, data: bytes) -> None:
        try:
            self.process_frame(data)
        except Exception:
            logger.exception("Error processing packet")