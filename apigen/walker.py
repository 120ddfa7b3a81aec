"""
Bounded forward walk over element siblings.

The documentation page is flat: an endpoint is an <h4> followed by a run of
<p>, <br> and <h6> siblings, with no wrapping container. The Extractor reads it
by stepping from one sibling to the next. SiblingWalker makes every step
return Optional[Tag] and every search end in either a match or a
StructuralExtractionError, so malformed markup cannot run a loop off the end of
the section or into the next endpoint.
"""

from typing import Callable, Optional

from bs4 import Tag

from .exceptions import StructuralExtractionError

Predicate = Callable[[Tag], bool]


class SiblingWalker:
    """Cursor over the element siblings following a start node."""

    def __init__(self, start: Tag, category: Optional[str] = None, link_id: Optional[str] = None):
        self.current: Optional[Tag] = start
        self.category = category
        self.link_id = link_id

    def advance(self) -> Optional[Tag]:
        """Move to the next element sibling; None once the siblings run out."""
        if self.current is not None:
            # find_next_sibling() with no filter skips text nodes and comments
            self.current = self.current.find_next_sibling()
        return self.current

    def seek(
        self,
        predicate: Predicate,
        what: str,
        boundary: Optional[Predicate] = None,
        include_current: bool = False
    ) -> Tag:
        """
        Advance until `predicate` matches and return the matching element.

        Args:
            predicate: Condition for the element being looked for
            what: Human-readable name of the target, used in errors
            boundary: Elements where the search must give up (checked after predicate)
            include_current: Test the current element before advancing

        Raises:
            StructuralExtractionError: if a boundary or the end of siblings is reached first
        """
        node = self.current if include_current else self.advance()

        while node is not None:
            if predicate(node):
                return node
            if boundary is not None and boundary(node):
                raise self.error(f"reached <{node.name}> before finding {what}")
            node = self.advance()

        raise self.error(f"ran out of sibling elements before finding {what}")

    def error(self, message: str) -> StructuralExtractionError:
        return StructuralExtractionError(message, category=self.category, link_id=self.link_id)


def is_tag(*names: str) -> Predicate:
    """Predicate matching elements by tag name."""
    wanted = frozenset(names)
    return lambda node: node.name in wanted
