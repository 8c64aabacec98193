"""Pydantic schemas for the render tree.

A rendered page is an ``Element``/``Text`` tree. Models are frozen so a
finished tree can be handed to a serializer (``model_dump()``) or shared
between threads without copying.
"""

from __future__ import annotations
from typing import Annotated, Dict, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field


class Element(BaseModel):
    """An element node: tag name plus ordered child nodes."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["element"] = "element"
    tag: str = Field(min_length=1)
    children: Tuple["Node", ...] = ()


class Text(BaseModel):
    """A text node."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    value: str


Node = Annotated[Union[Element, Text], Field(discriminator="kind")]

Element.model_rebuild()


# Fields each constructible variant accepts, in declaration order.
VARIANT_FIELDS: Dict[str, Tuple[str, ...]] = {
    "Element": ("tag", "children"),
    "Text": ("value",),
}

VARIANT_NAMESPACE = "Node"


def resolve_variant(name: str) -> Optional[str]:
    """Map a written variant (``Element`` or ``Node::Element``) to its canonical name.

    Returns None when the name does not denote a render-tree variant.
    """
    namespace, _, variant = name.rpartition("::")
    if namespace and namespace != VARIANT_NAMESPACE:
        return None
    return variant if variant in VARIANT_FIELDS else None
