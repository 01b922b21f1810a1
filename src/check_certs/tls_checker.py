# src/check_certs/tls_checker.py

"""
Fetch TLS certificates from many hosts concurrently.

The entry point is CertChecker.run(): one task per host, at most
MAX_CONCURRENCY handshakes in flight, and results returned in the order the
hosts were given no matter which handshake finishes first.
"""

import datetime
import logging
import socket
import ssl
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field, fields
from datetime import timezone
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from cryptography import x509

from check_certs.config import DEFAULT_TIMEOUT, CheckConfig
from check_certs.exceptions import FetchError, HostSpecError, ValidationError
from check_certs.utils.cert_utils import (
    extract_san,
    format_timestamp,
    get_common_name,
    get_public_key_details,
    get_signature_algorithm,
)
from check_certs.utils.hostspec_utils import split_host_port

MAX_CONCURRENCY = 128

logger = logging.getLogger(__name__)

FetchFunc = Callable[..., Tuple[List[x509.Certificate], str]]


# --- Data model ---

@dataclass(frozen=True)
class CertificateRecord:
    """
    Certificate details for one requested host.

    Either ``error`` is empty and the descriptive fields are filled from the
    leaf certificate, or ``error`` holds the failure reason and every other
    field except ``domain_name`` is empty.
    """
    domain_name: str
    ip: str = ""
    issuer: str = ""
    common_name: str = ""
    sans: Tuple[str, ...] = ()
    not_before: str = ""
    not_after: str = ""
    serial_number: str = ""
    signature_algorithm: str = ""
    public_key_algorithm: str = ""
    public_key: str = ""
    error: str = ""
    chain: Tuple[x509.Certificate, ...] = field(default=(), repr=False, compare=False)

    @property
    def detail(self) -> Optional[x509.Certificate]:
        """The leaf certificate, or None for an error record."""
        return self.chain[0] if self.chain else None

    def to_dict(self) -> Dict[str, Any]:
        """Serializable mapping of every field except the raw chain."""
        data = {f.name: getattr(self, f.name) for f in fields(self) if f.name != 'chain'}
        data['sans'] = list(self.sans)
        return data


def build_record(domain_name: str, chain: Sequence[x509.Certificate], ip: str, utc: bool = False) -> CertificateRecord:
    """Build a record from a non-empty chain (leaf first) and the observed IP."""
    cert = chain[0]
    key_algo, key_info = get_public_key_details(cert)
    return CertificateRecord(
        domain_name=domain_name,
        ip=ip,
        issuer=get_common_name(cert.issuer),
        common_name=get_common_name(cert.subject),
        sans=tuple(extract_san(cert)),
        not_before=format_timestamp(cert.not_valid_before_utc, utc),
        not_after=format_timestamp(cert.not_valid_after_utc, utc),
        serial_number=str(cert.serial_number),
        signature_algorithm=get_signature_algorithm(cert),
        public_key_algorithm=key_algo,
        public_key=key_info,
        chain=tuple(chain),
    )


def error_record(domain_name: str, error: str) -> CertificateRecord:
    return CertificateRecord(domain_name=domain_name, error=error)


# --- Single host fetch ---

def create_ssl_context(insecure: bool = False) -> ssl.SSLContext:
    """Verifying client context, or one that accepts any peer when insecure."""
    if insecure:
        return ssl._create_unverified_context()
    return ssl.create_default_context()


def _peer_chain_der(ssock: ssl.SSLSocket) -> List[bytes]:
    # get_unverified_chain() is only public on Python 3.13+
    if hasattr(ssock, 'get_unverified_chain'):
        chain = ssock.get_unverified_chain()
        if chain:
            return list(chain)
    der_cert = ssock.getpeercert(binary_form=True)
    return [der_cert] if der_cert else []


def fetch_certificate_chain(host: str, port: str, timeout: float = DEFAULT_TIMEOUT,
                            insecure: bool = False) -> Tuple[List[x509.Certificate], str]:
    """
    Complete a TLS handshake with host:port and return (chain, remote_ip).

    The chain is ordered leaf first. The timeout bounds the TCP connect and
    the handshake. The connection is closed as soon as the handshake is done.

    Raises:
        FetchError: on any resolution, connection or handshake failure.
    """
    address = f"{host}:{port}"
    if not host:
        raise FetchError(host, port, f"address {address}: missing host")

    context = create_ssl_context(insecure)
    logger.debug(f"Connecting to {address} (timeout={timeout}s, insecure={insecure})")
    try:
        with socket.create_connection((host, port), timeout=timeout) as sock:
            with context.wrap_socket(sock, server_hostname=host) as ssock:
                ip = ssock.getpeername()[0]
                der_chain = _peer_chain_der(ssock)
    except socket.timeout:
        raise FetchError(host, port, f"Connection to {address} timed out.")
    except ssl.SSLCertVerificationError as e:
        raise FetchError(host, port, f"SSL certificate verification failed for {address}: {e.verify_message or e}")
    except ssl.SSLError as e:
        raise FetchError(host, port, f"An SSL error occurred connecting to {address}: {e}")
    except ConnectionRefusedError:
        raise FetchError(host, port, f"Connection refused by {address}.")
    except socket.gaierror as e:
        raise FetchError(host, port, f"Could not resolve {address}: {e}")
    except OSError as e:
        raise FetchError(host, port, f"Network/OS error connecting to {address}: {e}")
    except ValueError as e:
        # idna encoding rejects empty or over-long labels before any lookup
        raise FetchError(host, port, f"Could not resolve {address}: {e}")

    if not der_chain:
        raise FetchError(host, port, f"No certificate received from {address}.")
    try:
        chain = [x509.load_der_x509_certificate(der) for der in der_chain]
    except ValueError as e:
        raise FetchError(host, port, f"Could not parse certificate from {address}: {e}")
    return chain, ip


# --- Bounded concurrency ---

class SlotLimiter:
    """
    Counting semaphore with observable occupancy.

    Use as a context manager; the slot is released on every exit path.
    ``available`` is always ``capacity - active``.
    """

    def __init__(self, capacity: int = MAX_CONCURRENCY):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._semaphore = threading.BoundedSemaphore(capacity)
        self._lock = threading.Lock()
        self._active = 0

    @property
    def active(self) -> int:
        with self._lock:
            return self._active

    @property
    def available(self) -> int:
        with self._lock:
            return self.capacity - self._active

    def __enter__(self) -> "SlotLimiter":
        self._semaphore.acquire()
        with self._lock:
            self._active += 1
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        with self._lock:
            self._active -= 1
        self._semaphore.release()


def validate(hosts: Sequence[str]) -> None:
    if len(hosts) < 1:
        raise ValidationError("Input at least one domain name.")


class CertChecker:
    """
    Runs certificate fetches for a batch of hosts with a concurrency ceiling.

    Several checkers may share one SlotLimiter, in which case the ceiling
    applies to all of them together.
    """

    def __init__(self, concurrency: int = MAX_CONCURRENCY, fetch: Optional[FetchFunc] = None,
                 limiter: Optional[SlotLimiter] = None):
        self.limiter = limiter or SlotLimiter(concurrency)
        self._fetch = fetch or fetch_certificate_chain

    def check_host(self, hostport: str, config: CheckConfig) -> CertificateRecord:
        """Parse, fetch and build the record for one host while holding a slot."""
        with self.limiter:
            try:
                host, port = split_host_port(hostport)
            except HostSpecError as e:
                logger.warning(f"Invalid host spec '{hostport}': {e}")
                return error_record(hostport, str(e))

            try:
                chain, ip = self._fetch(host, port, timeout=config.timeout, insecure=config.insecure)
            except FetchError as e:
                logger.warning(f"Fetching certificate for {host}:{port} failed: {e}")
                return error_record(host, str(e))

            logger.info(f"Fetched {len(chain)} certificate(s) from {host}:{port} ({ip})")
            return build_record(host, chain, ip, utc=config.utc)

    def run(self, hosts: Sequence[str], config: Optional[CheckConfig] = None) -> List[CertificateRecord]:
        """
        Check every host and return one record per host, in input order.

        Per-host failures are reported as error records and never abort the
        batch. Returns only once every host has been processed.

        Raises:
            ValidationError: if ``hosts`` is empty.
        """
        hosts = list(hosts)
        validate(hosts)
        config = config or CheckConfig()

        records: List[Optional[CertificateRecord]] = [None] * len(hosts)
        start_time = datetime.datetime.now(timezone.utc)
        logger.info(f"Starting certificate check for {len(hosts)} host(s): {', '.join(hosts)}")
        logger.info(f"Insecure: {config.insecure}, UTC: {config.utc}, Timeout: {config.timeout}s")

        def task(index: int, hostport: str) -> None:
            records[index] = self.check_host(hostport, config)

        workers = min(self.limiter.capacity, len(hosts))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="check-certs") as executor:
            futures = {executor.submit(task, i, hostport): i for i, hostport in enumerate(hosts)}
            for future in as_completed(futures):
                index = futures[future]
                try:
                    future.result()
                except Exception as e:
                    logger.exception(f"Unexpected error while checking {hosts[index]}: {e}")
                    records[index] = error_record(hosts[index], f"Critical analysis error: {e}")

        elapsed = (datetime.datetime.now(timezone.utc) - start_time).total_seconds()
        failed = sum(1 for record in records if record.error)
        logger.info(f"Checked {len(hosts)} host(s) in {elapsed:.2f}s ({failed} failed)")
        return records


def check_certificates(hosts: Sequence[str], config: Optional[CheckConfig] = None) -> List[CertificateRecord]:
    """Run a batch with a fresh checker at the default concurrency."""
    return CertChecker().run(hosts, config)
