# Field extraction helpers for x509 certificates

import datetime
import logging
from datetime import timezone
from typing import List, Tuple

from cryptography import x509
from cryptography.hazmat.primitives.asymmetric import dsa, ec, ed448, ed25519, rsa
from cryptography.x509.oid import ExtensionOID, NameOID

logger = logging.getLogger(__name__)


def get_common_name(name: x509.Name) -> str:
    """Extracts the Common Name (CN) from a subject or issuer, '' if absent."""
    try:
        cn_list = name.get_attributes_for_oid(NameOID.COMMON_NAME)
        return str(cn_list[0].value) if cn_list else ""
    except Exception as e:
        logger.warning(f"Could not extract Common Name: {e}")
        return ""


def extract_san(cert: x509.Certificate) -> List[str]:
    """DNS Subject Alternative Names in the order the certificate lists them."""
    try:
        ext = cert.extensions.get_extension_for_oid(ExtensionOID.SUBJECT_ALTERNATIVE_NAME)
        return [name.value for name in ext.value if isinstance(name, x509.DNSName)]
    except x509.ExtensionNotFound:
        return []


def get_signature_algorithm(cert: x509.Certificate) -> str:
    """Canonical name of the signature algorithm OID (e.g. sha256WithRSAEncryption)."""
    sig_algo_oid = cert.signature_algorithm_oid
    return getattr(sig_algo_oid, '_name', None) or sig_algo_oid.dotted_string


def get_public_key_details(cert: x509.Certificate) -> Tuple[str, str]:
    """
    Describe the certificate's public key.

    Returns (algorithm, parameters): the algorithm name and a short text form
    of its parameters, e.g. ("RSA", "RSA 2048 bits") or
    ("ECDSA", "ECDSA secp256r1 (256 bits)").
    """
    public_key = cert.public_key()
    if isinstance(public_key, rsa.RSAPublicKey):
        return "RSA", f"RSA {public_key.key_size} bits"
    if isinstance(public_key, ec.EllipticCurvePublicKey):
        curve = public_key.curve
        return "ECDSA", f"ECDSA {curve.name} ({curve.key_size} bits)"
    if isinstance(public_key, dsa.DSAPublicKey):
        return "DSA", f"DSA {public_key.key_size} bits"
    if isinstance(public_key, ed25519.Ed25519PublicKey):
        return "Ed25519", "Ed25519"
    if isinstance(public_key, ed448.Ed448PublicKey):
        return "Ed448", "Ed448"
    oid = cert.public_key_algorithm_oid
    name = getattr(oid, '_name', None) or oid.dotted_string
    return name, name


def format_timestamp(value: datetime.datetime, utc: bool = False) -> str:
    """ISO-8601 timestamp in UTC or in the local timezone."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc if utc else None).isoformat()
