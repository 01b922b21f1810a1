# host[:port] parsing logic

from typing import Tuple

from check_certs.exceptions import HostSpecError

DEFAULT_PORT = "443"


def _address_error(hostport: str, reason: str) -> HostSpecError:
    return HostSpecError(f"address {hostport}: {reason}")


def _split(hostport: str) -> Tuple[str, str]:
    """Strict host:port split. Bracketed IPv6 literals are accepted."""
    i = hostport.rfind(':')
    if i < 0:
        raise _address_error(hostport, "missing port in address")

    j = k = 0
    if hostport.startswith('['):
        end = hostport.find(']')
        if end < 0:
            raise _address_error(hostport, "missing ']' in address")
        if end + 1 == len(hostport):
            raise _address_error(hostport, "missing port in address")
        if end + 1 != i:
            if hostport[end + 1] == ':':
                raise _address_error(hostport, "too many colons in address")
            raise _address_error(hostport, "missing port in address")
        host = hostport[1:end]
        j, k = 1, end + 1
    else:
        host = hostport[:i]
        if ':' in host:
            raise _address_error(hostport, "too many colons in address")

    if '[' in hostport[j:]:
        raise _address_error(hostport, "unexpected '[' in address")
    if ']' in hostport[k:]:
        raise _address_error(hostport, "unexpected ']' in address")

    return host, hostport[i + 1:]


def split_host_port(hostport: str) -> Tuple[str, str]:
    """
    Split a host spec into host and port.

    A spec without any ':' gets the default port. An empty port after the
    delimiter (``example.com:``) also gets the default port. Malformed specs
    raise HostSpecError.
    """
    if ':' not in hostport:
        return hostport, DEFAULT_PORT

    host, port = _split(hostport)
    if not port:
        port = DEFAULT_PORT
    return host, port
