"""Capture and decode Ethernet, IPv4, TCP, UDP and ICMP traffic, with hex dumps and filters."""

__version__ = "1.0.0"