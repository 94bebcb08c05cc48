from typing import Any, Dict, List, Optional

from uxdoctor.app.schemas.ui_schema import (
    AriaInfo,
    ElementType,
    UIElement,
    UnifiedSchema,
)


# ------------------------------------------------------------------
# Raw snapshot nodes (crawler output shape)
# ------------------------------------------------------------------

def text(content: str) -> Dict[str, Any]:
    return {"type": "text", "content": content}


def element(
    tag: str,
    *children: Dict[str, Any],
    attributes: Optional[Dict[str, Any]] = None,
    **extra: Any,
) -> Dict[str, Any]:
    """
    Build a DOM element node.

    Extra keyword arguments are copied onto the node as-is, e.g.
    `contrastRatio=2.1` or `boundingBox=[0, 0, 30, 30]`.
    """
    node = {
        "type": "element",
        "tagName": tag,
        "attributes": attributes or {},
        "children": list(children),
    }
    node.update(extra)
    return node


def snapshot(*children: Dict[str, Any], **extra: Any) -> Dict[str, Any]:
    """Wrap nodes into a snapshot whose DOM root is <body>."""
    raw = {"domTree": element("body", *children)}
    raw.update(extra)
    return raw


def wide_snapshot(count: int) -> Dict[str, Any]:
    """`count` sibling <div> elements with distinct ids, no text."""
    return snapshot(
        *(element("div", attributes={"id": f"d{i}"}) for i in range(count))
    )


def deep_snapshot(depth: int, leaf: str = "deep") -> Dict[str, Any]:
    """`depth` nested <div> elements around a <span> holding `leaf`."""
    node = element("span", text(leaf))
    for _ in range(depth):
        node = element("div", node)
    return snapshot(node)


# ------------------------------------------------------------------
# Reference page: signup form
#
# e1  h1 "Create your account"
# e2  #text "Create your account"
# e3  form#signup
# e4  label[for=email]
# e5  #text "Email"
# e6  input#email (required, labelled, no marker)
# e7  input (unlabelled)
# e8  button.primary "Sign up" (low contrast, 30x30)
# e9  #text "Sign up"
# e10 img (no alt)
# ------------------------------------------------------------------

def signup_page_snapshot() -> Dict[str, Any]:
    return snapshot(
        element("h1", text("Create your account")),
        element(
            "form",
            element("label", text("Email"), attributes={"for": "email"}),
            element(
                "input",
                attributes={"id": "email", "type": "email", "required": ""},
                boundingBox=[0, 40, 300, 48],
            ),
            element(
                "input",
                attributes={"type": "text"},
                boundingBox=[0, 100, 300, 48],
            ),
            element(
                "button",
                text("Sign up"),
                attributes={"class": "primary"},
                contrastRatio=2.1,
                boundingBox=[0, 160, 30, 30],
            ),
            attributes={"id": "signup"},
        ),
        element("img", attributes={"src": "/hero.png"}),
        viewport={"width": 1280, "height": 800},
    )


SIGNUP_CONTEXT = (
    "Industry: SaaS, Business goal: increase signup conversion, "
    "Key action: sign up, Target users: small teams"
)


# ------------------------------------------------------------------
# Schema-level builders (bypass the normalizer)
# ------------------------------------------------------------------

def ui_element(
    element_id: str,
    *,
    element_type: ElementType = ElementType.GENERIC,
    tag: str = "div",
    text: str = "",
    label: str = "",
    dom_path: str = "",
    **facts: Any,
) -> UIElement:
    return UIElement(
        id=element_id,
        type=element_type,
        tag=tag,
        text=text,
        dom_path=dom_path or f"body>{tag}",
        css_selector=tag,
        aria=AriaInfo(role="generic", label=label),
        **facts,
    )


def schema_of(*elements: UIElement) -> UnifiedSchema:
    items: List[UIElement] = list(elements)
    return UnifiedSchema(
        elements=tuple(items),
        total_element_count=len(items),
    )


def unlabelled_low_contrast_button(element_id: str = "e1") -> UIElement:
    """The reference button: contrast 2.1, 30x30, no label and no text."""
    return ui_element(
        element_id,
        element_type=ElementType.BUTTON,
        tag="button",
        contrast_ratio=2.1,
        is_clickable=True,
        bounding_box=(0, 0, 30, 30),
    )
