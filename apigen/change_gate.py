"""
ChangeGate: content-addressed change detection.

The digest of the canonical page is written as the last line of every
generated artifact:

    # Checksum: CIktsNg2arwunITY/h7J5dfhhT+AqdwzqmWQEAtZLeI=

On the next run the footer is read back and compared with the digest of the
freshly sanitized page. Equal digests end the pipeline with NO_CHANGE.

Pipeline position: Stage 2 of 4 (Sanitizer → ChangeGate → Extractor → CodeGenerator).
"""

import base64
import binascii
import hashlib
from pathlib import Path
from typing import Optional, Union

from .exceptions import GenerationIOError
from .logger import get_module_logger
from .schemas import DIGEST_SIZE

logger = get_module_logger("change_gate")

FOOTER_PREFIX = "# Checksum: "
# Prefix + 44 base64 characters for 32 bytes + newline
FOOTER_LENGTH = len(FOOTER_PREFIX) + 4 * ((DIGEST_SIZE + 2) // 3) + 1

# Never equal to a real SHA-256 digest in practice, so it forces regeneration
ZERO_DIGEST = bytes(DIGEST_SIZE)


def compute_digest(canonical: bytes) -> bytes:
    """SHA-256 of the canonical page bytes."""
    return hashlib.sha256(canonical).digest()


def encode_digest(digest: bytes) -> str:
    return base64.b64encode(digest).decode("ascii")


def encode_footer(digest: bytes) -> str:
    """Render the footer line (with trailing newline) for a digest."""
    return f"{FOOTER_PREFIX}{encode_digest(digest)}\n"


def decode_footer(text: str) -> Optional[bytes]:
    """
    Recover the digest from the last line of `text`.

    Returns None when the last non-empty line is not a well-formed footer.
    """
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    if not lines or not lines[-1].startswith(FOOTER_PREFIX.strip()):
        return None

    encoded = lines[-1][len(FOOTER_PREFIX.strip()):].strip()
    try:
        digest = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError):
        return None

    if len(digest) != DIGEST_SIZE:
        return None
    return digest


def read_previous_digest(path: Union[str, Path]) -> bytes:
    """
    Read the digest stored in the footer of a previously generated artifact.

    A missing file, a file too short to hold a footer, or an unreadable footer
    all give ZERO_DIGEST, which guarantees regeneration.

    Raises:
        GenerationIOError: if the file exists but cannot be read
    """
    path = Path(path)
    if not path.exists():
        logger.info(f"No previous artifact at {path}, generation will run")
        return ZERO_DIGEST

    try:
        size = path.stat().st_size
        if size < FOOTER_LENGTH:
            logger.info(f"Previous artifact {path} is too short to hold a checksum footer")
            return ZERO_DIGEST

        # One spare byte tolerates a missing final newline or CRLF line endings
        window = min(size, FOOTER_LENGTH + 1)
        with path.open("rb") as f:
            f.seek(size - window)
            tail = f.read(window)
    except OSError as e:
        raise GenerationIOError(f"Could not read previous artifact: {e}", path=str(path))

    digest = decode_footer(tail.decode("ascii", errors="replace"))
    if digest is None:
        logger.warning(f"Previous artifact {path} has no valid checksum footer")
        return ZERO_DIGEST
    return digest


class ChangeGate:
    """Decides whether the documentation changed since the last generation."""

    def should_regenerate(self, canonical: bytes, previous_digest: bytes) -> tuple[bytes, bool]:
        """
        Compare the canonical page against the previous digest.

        Args:
            canonical: Sanitized page bytes
            previous_digest: Digest from the previous artifact (or ZERO_DIGEST)

        Returns:
            Tuple of (new digest, proceed). proceed is False when nothing changed.
        """
        current = compute_digest(canonical)

        if current == previous_digest:
            logger.info("Checksums match, documentation unchanged")
            return current, False

        logger.info(
            f"Checksums do not match. Previous: {encode_digest(previous_digest)} "
            f"New: {encode_digest(current)}"
        )
        return current, True
