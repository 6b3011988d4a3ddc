"""ARIA pattern lookup for widget families."""

from verdant.domain.models import AriaPattern

ARIA_PATTERNS: tuple[AriaPattern, ...] = (
    AriaPattern("button", "button", "Space/Enter activates", "aria-pressed for toggle, aria-expanded for menu buttons"),
    AriaPattern("input", "textbox", "Standard text editing keys", "aria-required, aria-invalid, aria-describedby for helpers"),
    AriaPattern("dialog", "dialog", "Tab trapped, Escape closes, initial focus to first interactive", "aria-modal=true, aria-labelledby"),
    AriaPattern("tabs", "tablist/tab/tabpanel", "Arrow keys navigate tabs, Tab to content", "aria-selected, aria-controls, aria-labelledby"),
    AriaPattern("toggle", "switch", "Space toggles", "aria-checked, linked label"),
    AriaPattern("select", "listbox", "Arrow keys navigate, Enter selects, Escape closes", "aria-expanded, aria-activedescendant"),
    AriaPattern("tooltip", "tooltip", "Escape dismisses, appears on focus", "aria-describedby pointing to tooltip"),
    AriaPattern("card", "article or region", "Entire card or specific actions focusable", "aria-labelledby for card heading"),
    AriaPattern("badge", "status", "N/A (informational)", "aria-label for dynamic counts"),
    AriaPattern("toast", "alert or status", "Auto-announce, dismiss with action", "aria-live=polite/assertive, role=alert"),
    AriaPattern("avatar", "img", "N/A (decorative unless actionable)", "aria-label or alt text for initials"),
    AriaPattern("dropdown", "menu/menuitem", "Arrow keys navigate, Enter selects, Escape closes", "aria-haspopup, aria-expanded"),
)


def aria_pattern(component_name: str) -> AriaPattern | None:
    """First pattern whose key occurs in the component name, ignoring case and spaces."""
    lowered = "".join(component_name.lower().split())
    return next((p for p in ARIA_PATTERNS if p.key in lowered), None)
