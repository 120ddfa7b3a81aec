"""
CodeGenerator: renders the endpoint catalog as a Python binding module.

Each endpoint becomes one function:

    def TimeSeriesIntraday(client, *, symbol, interval, opt_outputsize=None) -> Any:
        (docstring: name, description, documentation link, parameters)
        return client.query("TIME_SERIES_INTRADAY", _compact({
            "symbol": symbol,
            "interval": interval,
            "outputsize": opt_outputsize,
        }))

The function selector is baked into the call and the API key belongs to the
runtime client, so neither ever becomes an argument. The last line of the
module is the checksum footer the ChangeGate reads on the next run.

Pipeline position: Stage 4 of 4 (Sanitizer → ChangeGate → Extractor → CodeGenerator).
Input:  EndpointCatalog + AccessRecord
Output: normalized Python source text
"""

import keyword
import os
import re
import stat
import tempfile
import textwrap
from pathlib import Path
from typing import Union

from bs4 import BeautifulSoup

from .change_gate import decode_footer, encode_footer
from .config import DEFAULT_OUTPUT, DOCUMENTATION_URL
from .exceptions import GenerationIOError
from .formatter import normalize_source
from .logger import get_module_logger
from .schemas import AccessRecord, Category, Endpoint, EndpointCatalog, Parameter
from .templates import build_environment, render

logger = get_module_logger("generator")

OPTIONAL_PREFIX = "opt_"
# Names the generated functions already use for themselves
RESERVED_NAMES = {"client", "_compact", "Any"}
RULE = "-" * 75


def function_identifier(function_code: str) -> str:
    """TIME_SERIES_INTRADAY → TimeSeriesIntraday."""
    return "".join(segment.capitalize() for segment in function_code.split("_") if segment)


def argument_name(param: Parameter) -> str:
    """Python argument name for a documented parameter; optionals get OPTIONAL_PREFIX."""
    name = re.sub(r"\W", "_", param.name)
    if not name or name[0].isdigit():
        name = f"_{name}"
    if keyword.iskeyword(name) or name in RESERVED_NAMES:
        name = f"{name}_"
    return name if param.required else f"{OPTIONAL_PREFIX}{name}"


def html_to_text(fragment: str) -> str:
    """Flatten a description's HTML into one line of plain text."""
    if not fragment:
        return ""
    text = BeautifulSoup(fragment, "html.parser").get_text()
    return re.sub(r"\s+", " ", text).strip()


def escape_docstring(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"""', '\\"\\"\\"')


def _artifact_mode(path: Path) -> int:
    """Permission bits of the existing artifact, or the umask default for a new file."""
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


class CodeGenerator:
    """Renders bindings from an EndpointCatalog."""

    # Endpoints listed under more than one category, mapped to the category
    # that owns them. Elsewhere they are skipped.
    DUPLICATE_ENDPOINTS = {
        "market-status": "time-series-data",
    }

    def __init__(
        self,
        documentation_url: str = DOCUMENTATION_URL,
        filename: str = DEFAULT_OUTPUT,
        wrap_width: int = 72
    ):
        self.documentation_url = documentation_url
        self.filename = filename
        self.wrap_width = wrap_width
        self.env = build_environment()

    def generate(self, catalog: EndpointCatalog, access_record: AccessRecord) -> str:
        """
        Render the binding module for a catalog.

        Args:
            catalog: Extracted categories and endpoints
            access_record: Timestamp and digest of the page the catalog came from

        Returns:
            Normalized source text ending with the checksum footer

        Raises:
            GenerationIOError: if the rendered module is not valid Python, or two
                endpoints map to the same function name
        """
        items = catalog.sorted_items()
        owners = self._duplicate_owners(items)

        sections = []
        identifiers = {}
        for category, endpoints in items:
            rendered = []
            for endpoint in endpoints:
                owner = owners.get(endpoint.link_name)
                if owner is not None and owner != category.link_name:
                    logger.debug(f"Skipping {endpoint.link_name} under {category.link_name}, owned by {owner}")
                    continue

                identifier = function_identifier(endpoint.function_code)
                if identifier in identifiers:
                    # A second def would silently shadow the first
                    raise GenerationIOError(
                        f"Binding {identifier} would be defined twice "
                        f"(#{identifiers[identifier]} and #{endpoint.link_name})",
                        path=self.filename
                    )
                identifiers[identifier] = endpoint.link_name
                rendered.append(self._render_endpoint(endpoint))
            sections.append(self._render_category(category, rendered))

        body = render(
            self.env, "file",
            documentation_url=self.documentation_url,
            retrieved_at=access_record.timestamp.isoformat(),
            sections=sections,
        )
        source = body.rstrip("\n") + "\n\n\n" + encode_footer(access_record.digest)
        source = normalize_source(source, filename=self.filename)

        if decode_footer(source) != access_record.digest:
            raise GenerationIOError("Checksum footer did not survive normalization", path=self.filename)

        logger.info(f"Generated {len(identifiers)} bindings in {len(sections)} categories")
        return source

    def write(self, path: Union[str, Path], source: str) -> None:
        """
        Persist the generated module.

        Writes to a temporary file beside the target and renames it over the
        target, so a failed write never leaves a half-written artifact behind.
        """
        path = Path(path)
        tmp_name = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", newline="\n", dir=path.parent,
                prefix=f".{path.name}.", suffix=".tmp", delete=False
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(source)
            # NamedTemporaryFile creates 0600; keep the artifact's own permissions
            os.chmod(tmp_name, _artifact_mode(path))
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise GenerationIOError(f"Could not write generated artifact: {e}", path=str(path))

        logger.info(f"Wrote {path}")

    def _duplicate_owners(self, items: list[tuple[Category, list[Endpoint]]]) -> dict[str, str]:
        """Pick the single category each known duplicate is emitted under."""
        owners = {}
        for link_name, primary in self.DUPLICATE_ENDPOINTS.items():
            listed_under = [category.link_name for category, endpoints in items
                            if any(e.link_name == link_name for e in endpoints)]
            if not listed_under:
                continue
            # The primary category wins; otherwise the first in sorted order
            owners[link_name] = primary if primary in listed_under else listed_under[0]
        return owners

    def _render_category(self, category: Category, endpoints: list[str]) -> str:
        return render(
            self.env, "category",
            rule=RULE,
            readable_name=" ".join(category.readable_name.split()),
            link=f"{self.documentation_url}#{category.link_name}",
            description_lines=textwrap.wrap(category.description, self.wrap_width),
            endpoints=endpoints,
        )

    def _render_endpoint(self, endpoint: Endpoint) -> str:
        arguments = []
        for param in endpoint.argument_parameters:
            name = argument_name(param)
            arguments.append({
                "name": name,
                "query_name": param.name,
                "declaration": name if param.required else f"{name}=None",
                "param": param,
            })

        signature = ["client"]
        if arguments:
            # Keyword-only, so documentation order can mix required and optional
            signature.append("*")
            signature.extend(arg["declaration"] for arg in arguments)

        return render(
            self.env, "endpoint",
            identifier=function_identifier(endpoint.function_code),
            signature=", ".join(signature),
            docstring=escape_docstring(self._docstring(endpoint, arguments)),
            function_code=endpoint.function_code,
            arguments=arguments,
        )

    def _docstring(self, endpoint: Endpoint, arguments: list[dict]) -> str:
        name = " ".join(endpoint.readable_name.split())
        title = f"[PREMIUM] {name}" if endpoint.is_premium else name
        lines = [title]

        description = html_to_text(endpoint.description)
        if description:
            lines.append("")
            lines.extend(textwrap.wrap(description, self.wrap_width))

        lines.append("")
        lines.append(f"Documentation: {self.documentation_url}#{endpoint.link_name}")

        if arguments:
            lines.append("")
            lines.append("Parameters:")
            for arg in arguments:
                param = arg["param"]
                marker = "(required)" if param.required else "(optional)"
                text = html_to_text(param.description)
                line = f"    {marker} {arg['name']}"
                lines.append(f"{line}: {text}" if text else line)

        return "\n".join(lines)


def generate(catalog: EndpointCatalog, access_record: AccessRecord) -> str:
    """Convenience function to render bindings with default settings."""
    return CodeGenerator().generate(catalog, access_record)
