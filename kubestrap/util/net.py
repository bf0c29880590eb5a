"""Contains utility functions for network stuff"""

from netaddr import IPNetwork, valid_ipv4, valid_ipv6
from netaddr.core import AddrFormatError

from kubestrap.cluster import Endpoint, NetworkRanges
from kubestrap.util.logger import Logger

LOGGER = Logger(__name__)


def is_port(port):
    """Checks if a port is valid"""

    return isinstance(port, int) and 0 <= port <= 65535


def is_ip(ip):
    """Checks if an IP is a valid IPv4 or IPv6 address"""

    return valid_ipv4(ip) or valid_ipv6(ip)


def endpoint(api_endpoint: Endpoint) -> str:
    """Format an API endpoint as ``host:port``.

    Host and port are used as they are, e.g. an empty host gives ``:443``.
    """
    return "{}:{}".format(api_endpoint.host, api_endpoint.port)


def subnet_of(ranges: NetworkRanges) -> str:
    """Return the canonical CIDR of the first block in ``ranges``.

    Host bits are cleared, so ``10.96.0.1/12`` becomes ``10.96.0.0/12``.
    A range without blocks gives an empty string. Text which is not a
    network is returned unchanged.
    """
    if not ranges.cidr_blocks:
        return ""

    block = ranges.cidr_blocks[0]
    try:
        return str(IPNetwork(block).cidr)
    except (AddrFormatError, TypeError, ValueError):
        LOGGER.warning("%s is not a valid CIDR, using it as it is", block)
        return str(block)
