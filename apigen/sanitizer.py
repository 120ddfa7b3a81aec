"""
Sanitizer: strips per-load artifacts from the raw documentation page.

The hosting edge network injects single-use values into every page load. They
do not touch the documentation itself, but they make every download differ, so
the raw bytes cannot be checksummed directly. Three artifacts are known:

  1. a data-cfemail="<hex>" attribute on an obfuscated e-mail link inside one
     parameter description
  2. the obfuscated "Contact us" link in the page footer
  3. the script block on the last lines of the page

Each is removed by a find-or-fail stage working on the remainder left by the
previous stage, so the three markers must appear in this order.

Pipeline position: Stage 1 of 4 (Sanitizer → ChangeGate → Extractor → CodeGenerator).
Input:  raw page bytes
Output: canonical bytes
"""

from .exceptions import SanitizationError
from .logger import get_module_logger

logger = get_module_logger("sanitizer")

EMAIL_ATTRIBUTE_MARKER = b"data-cfemail="
CONTACT_LINK_MARKER = b'<a href="/cdn-cgi/l/email-protection#'
SCRIPT_MARKER = b"<script "

WHITESPACE = b" \t\r\n"


class Sanitizer:
    """Produces canonical bytes suitable for checksumming."""

    def sanitize(self, raw: bytes) -> bytes:
        """
        Remove the three volatile artifacts from the page.

        Args:
            raw: Page bytes as fetched

        Returns:
            Canonical bytes

        Raises:
            SanitizationError: if any marker or its closing delimiter is missing
        """
        canonical = bytearray()
        remainder = raw

        for stage in (self._elide_email_attribute,
                      self._replace_contact_link,
                      self._drop_trailing_script):
            kept, remainder = stage(remainder)
            canonical += kept

        canonical += remainder
        logger.debug(f"Sanitized page: {len(raw)} -> {len(canonical)} bytes")
        return bytes(canonical)

    @staticmethod
    def _find(document: bytes, needle: bytes, start: int, stage: str) -> int:
        index = document.find(needle, start)
        if index == -1:
            raise SanitizationError(
                f"{stage}: marker {needle.decode('ascii')!r} not found; "
                f"the documentation page structure has changed",
                marker=needle.decode("ascii"),
                details={"stage": stage}
            )
        return index

    def _elide_email_attribute(self, document: bytes) -> tuple[bytes, bytes]:
        # <a href="/cdn-cgi/l/email-protection" class="__cf_email__" data-cfemail="b3c0...">[email&#160;protected]</a>
        # becomes
        # <a href="/cdn-cgi/l/email-protection" class="__cf_email__">[email&#160;protected]</a>
        stage = "email attribute"
        start = self._find(document, EMAIL_ATTRIBUTE_MARKER, 0, stage)
        tag_close = self._find(document, b">", start, stage)

        # The attribute's leading separator goes with it
        cut = start
        if cut > 0 and document[cut - 1] in WHITESPACE:
            cut -= 1

        return document[:cut], document[tag_close:]

    def _replace_contact_link(self, document: bytes) -> tuple[bytes, bytes]:
        # <a href="/cdn-cgi/l/email-protection#295a5c...">Contact us</a>  ->  Contact us
        stage = "contact link"
        start = self._find(document, CONTACT_LINK_MARKER, 0, stage)
        text_start = self._find(document, b">", start, stage) + 1
        text_end = self._find(document, b"</a>", text_start, stage)

        link_text = document[text_start:text_end]
        return document[:start] + link_text, document[text_end + len(b"</a>"):]

    def _drop_trailing_script(self, document: bytes) -> tuple[bytes, bytes]:
        # The page ends with one line holding the edge network's script tags
        stage = "trailing script"
        start = self._find(document, SCRIPT_MARKER, 0, stage)

        line_end = document.find(b"\n", start)
        if line_end == -1:
            return document[:start], b""
        return document[:start], document[line_end + 1:]


def sanitize(raw: bytes) -> bytes:
    """Convenience function to sanitize a raw documentation page."""
    return Sanitizer().sanitize(raw)
