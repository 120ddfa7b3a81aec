"""
Extractor: recovers categories, endpoints and parameters from the page tree.

The documentation page is laid out like this:

    <li id="table-of-contents">Table of Contents</li>
    <li><a href="#time-series-data">Core Stock APIs</a>
        <ul><li><a href="#intraday">Intraday <span class="premium-label">Premium</span></a></li></ul>
    </li>
    ...
    <h2 id="time-series-data">Core Stock APIs</h2>
    <p>This suite of APIs provide ...</p>
    <h4 id="intraday">Intraday <span class="premium-label">Premium</span></h4>
    <p>This API returns ...</p>
    <br>
    <h6><b>API Parameters</b></h6>
    <p><b>❚ Required: <code>function</code></b></p>
    <p>The time series of your choice. In this case, <code>function=TIME_SERIES_INTRADAY</code></p>
    <p>❚ Optional: <code>outputsize</code></p>        <-- no <b> around some markers
    <p>By default, <code>outputsize=compact</code>.</p>
    <p><b>❚ Required: <code>apikey</code></b></p>
    <p>Your API key.</p>
    <br>

Anything that does not fit this shape raises StructuralExtractionError. A
partial catalog is never returned.

Pipeline position: Stage 3 of 4 (Sanitizer → ChangeGate → Extractor → CodeGenerator).
Input:  canonical page (parsed tree, str or bytes)
Output: EndpointCatalog
"""

import html
import re
from typing import Optional, Union

from bs4 import BeautifulSoup, Tag

from .exceptions import StructuralExtractionError
from .logger import get_module_logger
from .schemas import (APIKEY_PARAM, FUNCTION_PARAM, Category, Endpoint,
                      EndpointCatalog, Parameter)
from .walker import SiblingWalker, is_tag

logger = get_module_logger("extractor")

TOC_ANCHOR_ID = "table-of-contents"
CATEGORY_HEADING = "h2"
ENDPOINT_HEADING = "h4"
PARAMETERS_HEADING = "h6"
PREMIUM_CLASS = "premium-label"

# Headings that start a new section; no endpoint scan may cross one
SECTION_HEADINGS = ("h1", "h2", "h3", "h4", "h5")

# "❚ Required: <code>symbol</code>" / "❚ Optional: <code>datatype</code>",
# matched on rendered text so a missing <b> wrapper makes no difference
PARAMETER_MARKER = re.compile(r"\b(Required|Optional)\s*:")

# "In this case, <code>function=TIME_SERIES_INTRADAY</code>"
FUNCTION_CODE_PATTERN = re.compile(r"<code>\s*function=([A-Za-z0-9_]+)\s*</code>")

is_section_heading = is_tag(*SECTION_HEADINGS)
is_parameter_boundary = is_tag(*SECTION_HEADINGS, PARAMETERS_HEADING)


def parse_document(document: Union[str, bytes]) -> BeautifulSoup:
    """
    Parse the page into a BeautifulSoup tree.

    Parser fallback chain: html5lib → lxml → html.parser. html5lib builds the
    same tree a browser would; the others are only used if it fails.
    """
    try:
        return BeautifulSoup(document, "html5lib")
    except Exception as e:
        logger.warning(f"html5lib parsing failed, trying lxml: {e}")

    try:
        return BeautifulSoup(document, "lxml")
    except Exception as e:
        logger.warning(f"lxml parsing also failed: {e}")

    return BeautifulSoup(document, "html.parser")


def is_parameter_marker(node: Tag) -> bool:
    return PARAMETER_MARKER.search(node.get_text()) is not None


class Extractor:
    """Builds an EndpointCatalog from the documentation page."""

    # One endpoint's function paragraph forgets the <code>function=...</code>
    # example. Keyed by exact link id.
    FALLBACK_FUNCTION_CODES = {
        "latestprice": "GLOBAL_QUOTE",
    }

    def extract(self, document: Union[BeautifulSoup, str, bytes]) -> EndpointCatalog:
        """
        Extract every category and endpoint listed in the table of contents.

        Args:
            document: Parsed page, or canonical page text/bytes

        Returns:
            EndpointCatalog in document order

        Raises:
            StructuralExtractionError: on any deviation from the expected layout
        """
        soup = document if isinstance(document, BeautifulSoup) else parse_document(document)
        logger.info("Building endpoint list")

        toc = soup.find(id=TOC_ANCHOR_ID)
        if toc is None:
            raise StructuralExtractionError(f"table of contents anchor #{TOC_ANCHOR_ID} not found")

        catalog = EndpointCatalog()
        walker = SiblingWalker(toc)

        # Every element after the anchor is one category <li>
        category_li = walker.advance()
        while category_li is not None:
            category, endpoints = self._extract_category(soup, category_li)
            if category in catalog:
                raise StructuralExtractionError(
                    "category listed twice in the table of contents",
                    category=category.link_name
                )
            catalog[category] = endpoints
            logger.info(f"Category done: {category.readable_name} ({len(endpoints)} endpoints)")
            category_li = walker.advance()

        if not catalog:
            raise StructuralExtractionError("no categories follow the table of contents anchor")

        logger.info(f"Extracted {catalog.endpoint_count} endpoints in {len(catalog)} categories")
        return catalog

    def _anchor_id(self, link: Optional[Tag], what: str,
                   category: Optional[str] = None) -> str:
        """Return the target id of an in-page link (href="#id" → "id")."""
        if link is None or link.name != "a":
            raise StructuralExtractionError(f"expected an <a> link for {what}", category=category)

        href = (link.get("href") or "").strip()
        if not href.startswith("#") or len(href) < 2:
            raise StructuralExtractionError(
                f"{what} link has no in-page href: {href!r}", category=category
            )
        return href[1:]

    def _extract_category(self, soup: BeautifulSoup, category_li: Tag) -> tuple[Category, list[Endpoint]]:
        # <li><a href="#time-series-data">Core Stock APIs</a><ul>...</ul></li>
        if category_li.name != "li":
            raise StructuralExtractionError(
                f"unexpected <{category_li.name}> in the table of contents"
            )

        first_child = category_li.find(True, recursive=False)
        link_name = self._anchor_id(first_child, "table of contents category")

        readable_name, description = self._category_details(soup, link_name)
        category = Category(
            link_name=link_name,
            readable_name=readable_name,
            description=description
        )

        endpoints = self._category_endpoints(soup, category_li, link_name)
        return category, endpoints

    def _category_details(self, soup: BeautifulSoup, link_name: str) -> tuple[str, str]:
        heads = soup.find_all(CATEGORY_HEADING, id=link_name)
        if len(heads) != 1:
            raise StructuralExtractionError(
                f"found {len(heads)} <{CATEGORY_HEADING}> headings for the category",
                category=link_name
            )

        head = heads[0]
        readable_name = head.get_text().strip()

        # The descriptive paragraph sits right after the heading
        desc_p = head.find_next_sibling()
        description = desc_p.get_text().strip() if desc_p is not None and desc_p.name == "p" else ""
        if not description:
            logger.debug(f"Category {link_name} has no description paragraph")

        return readable_name, description

    def _category_endpoints(self, soup: BeautifulSoup, category_li: Tag,
                            category: str) -> list[Endpoint]:
        endpoint_list = category_li.find("ul")
        if endpoint_list is None:
            raise StructuralExtractionError("category has no endpoint list", category=category)

        links = endpoint_list.select(":scope > li > a")
        if not links:
            raise StructuralExtractionError("category endpoint list is empty", category=category)

        endpoints = []
        seen = set()
        for i, link in enumerate(links):
            link_id = self._anchor_id(link, f"endpoint #{i + 1}", category=category)
            if link_id in seen:
                raise StructuralExtractionError(
                    "endpoint listed twice in one category", category=category, link_id=link_id
                )
            seen.add(link_id)
            endpoints.append(self._extract_endpoint(soup, category, link_id))

        return endpoints

    def _extract_endpoint(self, soup: BeautifulSoup, category: str, link_id: str) -> Endpoint:
        heads = soup.find_all(ENDPOINT_HEADING, id=link_id)
        if len(heads) != 1:
            raise StructuralExtractionError(
                f"found {len(heads)} <{ENDPOINT_HEADING}> headings for the endpoint",
                category=category, link_id=link_id
            )
        head = heads[0]

        is_premium = head.find(class_=PREMIUM_CLASS) is not None
        readable_name = self._readable_name(head)

        walker = SiblingWalker(head, category=category, link_id=link_id)
        description = self._read_description(walker)

        # --- Function selector: always the first parameter ---
        walker.seek(is_parameter_marker, "the function parameter", boundary=is_section_heading)
        function_param = self._read_parameter(walker)
        if function_param.name != FUNCTION_PARAM or not function_param.required:
            raise walker.error(
                f"first parameter should be a required '{FUNCTION_PARAM}', "
                f"got '{function_param.name}' (required={function_param.required})"
            )
        function_code = self._function_code(function_param, walker)

        # --- Remaining parameters, up to and including apikey ---
        parameters = [function_param]
        param = function_param
        while param.name != APIKEY_PARAM:
            walker.seek(
                is_parameter_marker,
                f"the next parameter after '{param.name}' ('{APIKEY_PARAM}' never reached)",
                boundary=is_parameter_boundary,
                include_current=True
            )
            param = self._read_parameter(walker)
            parameters.append(param)

        self._check_parameters(parameters, walker)

        logger.debug(f"Endpoint {link_id}: {function_code} with {len(parameters)} parameters")
        return Endpoint(
            link_name=link_id,
            readable_name=readable_name,
            description=description,
            function_code=function_code,
            is_premium=is_premium,
            parameters=parameters
        )

    def _readable_name(self, head: Tag) -> str:
        """Heading HTML up to the premium badge, with entities decoded."""
        inner = head.decode_contents()
        badge_start = inner.find("<span")
        if badge_start != -1:
            inner = inner[:badge_start]
        return html.unescape(inner).strip()

    def _read_description(self, walker: SiblingWalker) -> str:
        """
        Collect <p> contents between the heading and the parameter sub-heading.

        Some endpoints put a <br> straight after the heading, so anything that
        is not a paragraph is skipped. Leaves the walker on the <h6>.
        """
        paragraphs = []
        node = walker.advance()

        while node is None or node.name != PARAMETERS_HEADING:
            if node is None:
                raise walker.error(f"ran out of sibling elements before <{PARAMETERS_HEADING}>")
            if is_section_heading(node):
                raise walker.error(f"reached <{node.name}> before <{PARAMETERS_HEADING}>")
            if node.name == "p":
                paragraphs.append(node.decode_contents())
            node = walker.advance()

        return "\n".join(paragraphs).strip()

    def _read_parameter(self, walker: SiblingWalker) -> Parameter:
        """
        Parse the parameter whose marker element the walker is on.

        The description is every following sibling up to the next marker, a
        <br>, a heading or the end of the section. Leaves the walker on the
        element that ended the description (None at the end of siblings).
        """
        marker_node = walker.current
        match = PARAMETER_MARKER.search(marker_node.get_text())
        if match is None:
            raise walker.error(f"could not determine required/optional from {str(marker_node)!r}")
        required = match.group(1) == "Required"

        name_node = marker_node.find("code")
        name = name_node.get_text().strip() if name_node is not None else ""
        if not name:
            raise walker.error(f"could not determine parameter name from {str(marker_node)!r}")

        description = []
        node = walker.advance()
        while (node is not None
               and node.name != "br"
               and not is_parameter_boundary(node)
               and not is_parameter_marker(node)):
            description.append(node.decode_contents())
            node = walker.advance()

        return Parameter(required=required, name=name, description="\n".join(description).strip())

    def _function_code(self, function_param: Parameter, walker: SiblingWalker) -> str:
        fallback = self.FALLBACK_FUNCTION_CODES.get(walker.link_id)
        if fallback is not None:
            logger.debug(f"Using fallback function code {fallback} for {walker.link_id}")
            return fallback

        match = FUNCTION_CODE_PATTERN.search(function_param.description)
        if match is None:
            raise walker.error(
                f"function code not found in {function_param.description!r}"
            )
        return match.group(1)

    def _check_parameters(self, parameters: list[Parameter], walker: SiblingWalker) -> None:
        names = [p.name for p in parameters]
        for special in (FUNCTION_PARAM, APIKEY_PARAM):
            if names.count(special) != 1:
                raise walker.error(f"expected exactly one '{special}' parameter, found {names.count(special)}")

        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise walker.error(f"duplicate parameters: {', '.join(duplicates)}")


def extract(document: Union[BeautifulSoup, str, bytes]) -> EndpointCatalog:
    """Convenience function to extract the endpoint catalog from a page."""
    return Extractor().extract(document)
