import hmac
import logging


__all__ = ["is_valid_signature", "make_signature"]


logger = logging.getLogger(__name__)


SUPPORTED_ALGORITHMS = {"sha1", "sha256", "sha384", "sha512"}


def make_signature(body, secret, algorithm="sha256"):
    """
    Compute the header value GitHub would send for ``body``, in the form
    ``<algorithm>=<hex digest>``.
    """
    if isinstance(body, str):
        body = body.encode("utf-8")

    digest = hmac.new(secret.encode("utf-8"), body, algorithm).hexdigest()
    return f"{algorithm}={digest}"


def is_valid_signature(body, header, secret):
    """
    Check a signature header against the HMAC of the raw request body.

    Returns False for a missing secret, a header without ``=``, an algorithm
    outside of SUPPORTED_ALGORITHMS, or a digest that doesn't match.
    """
    if not secret:
        logger.warning("No webhook secret configured, rejecting request")
        return False

    if not header or "=" not in header:
        logger.warning("Malformed signature header: %r", header)
        return False

    algorithm, digest = header.split("=", 1)
    algorithm = algorithm.strip().lower()
    if algorithm not in SUPPORTED_ALGORITHMS:
        logger.warning("Unsupported signature algorithm: %s", algorithm)
        return False

    expected = make_signature(body, secret, algorithm)
    return hmac.compare_digest(expected.encode("utf-8"), f"{algorithm}={digest.strip().lower()}".encode("utf-8"))
