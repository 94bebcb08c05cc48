"""
Unified UI Schema.

Defines the normalized, flat, provenance-tagged representation of a page's
elements. It is the common input of the rule engine, the sanity checker,
the scorer and the LLM augmentation payload.

Structural invariant:
    `elements` is a FLAT list in depth-first pre-order. There are no
    parent/child object references. Hierarchy is recoverable only through
    `dom_path` prefix matching (see UnifiedSchema.descendants_of).

A UnifiedSchema is created once per analysis request, is immutable, and is
discarded once issues and scores have been produced.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from pydantic import (
    BaseModel,
    Field,
    ConfigDict,
    field_serializer,
    field_validator,
)


DOM_PATH_SEPARATOR = ">"


# ---------------------------------------------------------------------------
# Enumerations (FROZEN CONTRACTS)
# ---------------------------------------------------------------------------


class ElementType(str, Enum):
    """
    Closed set of element types in the Unified UI Schema.

    Landmark types mirror their implicit ARIA roles.
    """

    BUTTON = "button"
    INPUT = "input"
    HEADING = "heading"
    IMAGE = "image"
    LINK = "link"
    NAV = "nav"
    BANNER = "banner"
    CONTENTINFO = "contentinfo"
    COMPLEMENTARY = "complementary"
    MAIN = "main"
    FORM = "form"
    REGION = "region"
    ARTICLE = "article"
    TEXT = "text"
    GENERIC = "generic"


# ---------------------------------------------------------------------------
# Element model
# ---------------------------------------------------------------------------


class AriaInfo(BaseModel):
    """Resolved accessibility role and accessible name."""

    role: str = Field(
        "generic",
        description="Explicit role attribute or the tag's implicit role",
    )

    label: str = Field(
        "",
        description="Accessible name; empty when none could be resolved",
    )

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )


class UIElement(BaseModel):
    """
    A single node of the Unified UI Schema.

    Optional numeric facts (contrast_ratio, font_size_px, bounding_box)
    are None when unknown. None never means zero.
    """

    id: str = Field(
        ...,
        description="Identifier unique within one schema instance (e.g. 'e12')",
    )

    type: ElementType = Field(
        ...,
        description="Normalized element type",
    )

    tag: str = Field(
        ...,
        description="Lowercase source tag name ('#text' for text nodes)",
    )

    text: str = Field(
        "",
        description="Extracted visible or semantic text, length-bounded",
    )

    dom_path: str = Field(
        "",
        description="Ancestor chain locator; human-readable, not unique",
    )

    css_selector: str = Field(
        "",
        description="Best-effort selector (id > class list > tag)",
    )

    aria: AriaInfo = Field(
        default_factory=AriaInfo,
        description="Resolved role and accessible name",
    )

    is_clickable: bool = Field(
        False,
        description="Clickable tag, click handler, or role=button",
    )

    is_required: bool = Field(
        False,
        description="required attribute or aria-required='true' present",
    )

    contrast_ratio: Optional[float] = Field(
        None,
        gt=0,
        description="Foreground/background contrast ratio, when measured",
    )

    font_size_px: Optional[float] = Field(
        None,
        gt=0,
        description="Font size in CSS pixels, when known",
    )

    bounding_box: Optional[Tuple[float, float, float, float]] = Field(
        None,
        description="[x, y, width, height] in CSS pixels, when measured",
    )

    confidence: float = Field(
        0.9,
        ge=0.0,
        le=1.0,
        description="Provenance-weighted trust in the extracted facts",
    )

    source: FrozenSet[str] = Field(
        default_factory=lambda: frozenset({"dom"}),
        description="Provenance tags, e.g. {'dom'} or {'ocr', 'vision'}",
    )

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    @field_serializer("source")
    def serialize_source(self, source: FrozenSet[str]) -> List[str]:
        return sorted(source)

    @property
    def width(self) -> Optional[float]:
        return None if self.bounding_box is None else self.bounding_box[2]

    @property
    def height(self) -> Optional[float]:
        return None if self.bounding_box is None else self.bounding_box[3]

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


# ---------------------------------------------------------------------------
# Page-level metadata
# ---------------------------------------------------------------------------


class Viewport(BaseModel):
    width: int = Field(1920, gt=0)
    height: int = Field(1080, gt=0)

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )


class PageMeta(BaseModel):
    """Metadata describing where the schema came from."""

    source_type: str = Field(
        "url",
        description="Origin of the snapshot ('url' for crawled pages)",
    )

    page_url: str = Field(
        "",
        description="URL of the analyzed page",
    )

    viewport: Viewport = Field(
        default_factory=Viewport,
        description="Viewport used by the crawler",
    )

    platform: str = Field(
        "desktop",
        description="Rendering platform of the snapshot",
    )

    has_accessibility_tree: bool = Field(
        False,
        description="Whether the snapshot carried an accessibility tree",
    )

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )


class KeyUserFlow(BaseModel):
    """
    Key user action located on the page.

    Inferred from the business context key action; the action element is
    the first clickable element matching the action vocabulary.
    """

    description: str = Field(
        ...,
        description="Key action as described by the business context",
    )

    action_element_id: Optional[str] = Field(
        None,
        description="Element id of the inferred action target, if any",
    )

    action_selector: Optional[str] = Field(
        None,
        description="Selector of the inferred action target, if any",
    )

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )


# ---------------------------------------------------------------------------
# Unified schema
# ---------------------------------------------------------------------------


class UnifiedSchema(BaseModel):
    """
    Normalized page representation.

    Truncation is explicit: `bounded()` returns a new schema and records
    `truncated=True` together with the original `total_element_count`.
    """

    page_meta: PageMeta = Field(
        default_factory=PageMeta,
        description="Snapshot metadata",
    )

    elements: Tuple[UIElement, ...] = Field(
        default_factory=tuple,
        description="Flat element list in depth-first pre-order",
    )

    axe_issues: Tuple[Dict[str, Any], ...] = Field(
        default_factory=tuple,
        description="axe-style violations supplied with the snapshot",
    )

    key_user_flow: Optional[KeyUserFlow] = Field(
        None,
        description="Inferred key user action, when a key action was given",
    )

    total_element_count: int = Field(
        0,
        ge=0,
        description="Number of elements before any truncation",
    )

    truncated: bool = Field(
        False,
        description="True when elements were cut to a size bound",
    )

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    @field_validator("elements")
    @classmethod
    def element_ids_are_unique(
        cls, v: Tuple[UIElement, ...]
    ) -> Tuple[UIElement, ...]:
        seen = set()
        for element in v:
            if element.id in seen:
                raise ValueError(f"Duplicate element id '{element.id}'")
            seen.add(element.id)
        return v

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def element_index(self) -> Dict[str, UIElement]:
        """Return a fresh id -> element mapping."""
        return {element.id: element for element in self.elements}

    def get(self, element_id: str) -> Optional[UIElement]:
        for element in self.elements:
            if element.id == element_id:
                return element
        return None

    def descendants_of(self, element: UIElement) -> List[UIElement]:
        """
        Return the elements located under `element` by dom_path prefix.

        Text nodes share their parent's dom_path, so they are matched by
        equality; element descendants by the `path>` prefix. The element
        itself is excluded. Because dom_path is not unique, siblings with
        identical paths are indistinguishable and are included as well.
        """
        prefix = element.dom_path + DOM_PATH_SEPARATOR
        found = []
        for candidate in self.elements:
            if candidate.id == element.id:
                continue
            if candidate.dom_path.startswith(prefix):
                found.append(candidate)
            elif (
                candidate.type == ElementType.TEXT
                and candidate.dom_path == element.dom_path
            ):
                found.append(candidate)
        return found

    # ------------------------------------------------------------------
    # Size bounding
    # ------------------------------------------------------------------

    def bounded(self, limit: Optional[int]) -> "UnifiedSchema":
        """
        Return a view holding at most `limit` elements in visitation order.

        `None` returns the schema unchanged.
        """
        if limit is not None and limit < 0:
            raise ValueError("limit must be non-negative")
        if limit is None or len(self.elements) <= limit:
            return self
        return self.model_copy(
            update={
                "elements": self.elements[:limit],
                "truncated": True,
            }
        )

    def to_payload(self) -> Dict[str, Any]:
        """JSON-compatible projection used for the LLM payload."""
        return {
            "page_meta": self.page_meta.model_dump(mode="json"),
            "elements": [element.to_payload() for element in self.elements],
            "axe_issues": list(self.axe_issues),
            "key_user_flow": (
                self.key_user_flow.model_dump(mode="json")
                if self.key_user_flow is not None
                else None
            ),
            "total_element_count": self.total_element_count,
            "truncated": self.truncated,
        }
