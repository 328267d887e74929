"""
Static classification tables used by every reduction stage.

All tables are frozensets so they can be shared by concurrent calls without
locking. Nothing in the package mutates them.
"""

import re

# --- Noise (stage 1) ---
# Tags that never carry addressable UI semantics.
STRIP_TAGS = frozenset({
    "script", "style", "noscript", "template",
    "svg", "canvas", "video", "audio", "source", "track",
    "embed", "object",
})

# meta/link elements are only partially noise: stylesheets, icons,
# viewport and charset declarations go, everything else stays.
STRIP_SELECTORS = (
    "link[rel~='stylesheet']",
    "link[rel~='icon']",
    "meta[name='viewport']",
    "meta[charset]",
)

# --- Structure ---
# Tags that carry structure or meaning and are never unwrapped.
KEEP_TAGS = frozenset({
    "a", "button", "input", "select", "option", "textarea", "label",
    "form", "fieldset", "legend",
    "table", "thead", "tbody", "tfoot", "tr", "th", "td",
    "ul", "ol", "li",
    "div", "section", "article", "aside", "nav", "main", "header", "footer",
    "h1", "h2", "h3", "h4", "h5", "h6", "p", "small", "strong", "em",
})

# Inline decorative tags and the generic inline container (stage 4).
UNWRAP_TAGS = frozenset({"span", "font", "b", "i", "u"})

# Custom-element prefixes of framework plumbing containers, unwrapped on
# dense-framework documents.
FRAMEWORK_WRAPPER_PREFIXES = ("aura", "ltng")
FRAMEWORK_WRAPPER_TAGS = frozenset({"one-app", "one-appnav"})

INTERACTIVE_TAGS = frozenset({"input", "button", "select", "textarea"})
INTERACTIVE_SELECTOR = "a, button, input, select, textarea"

# Controls whose identity attributes survive attribute pruning.
FORM_CONTROL_TAGS = frozenset({"input", "textarea", "select"})

# Elements with no children and no text that still mean something
# (interactive anchors are kept as well, see is_interactive).
EMPTY_PRESERVED_TAGS = frozenset({
    "input", "button", "select", "textarea", "img", "br", "hr",
})

# --- Hidden state (stage 2) ---
HIDDEN_STYLE_PATTERNS = (
    re.compile(r"display\s*:\s*none", re.IGNORECASE),
    re.compile(r"visibility\s*:\s*hidden", re.IGNORECASE),
)

# Common "hidden" class names across sites. Only consulted when
# ReductionSettings.strip_hidden_classes is on.
HIDDEN_CLASSES = frozenset({
    "hidden", "is-hidden", "visually-hidden", "sr-only", "srOnly",
    "a11y-hidden", "slds-hide", "slds-assistive-text", "uiInput--hidden",
    "hide", "d-none",
})

# Attributes that make an element addressable by a later lookup.
IDENTIFYING_ATTRS = ("id", "name", "data-testid")

# --- Dense-framework chrome (stage 3) ---
CHROME_IDS = frozenset({
    "oneHeader", "navMenu", "tabBar", "globalHeader", "appNav",
    "publisherFooter", "footer",
})

CHROME_CLASSES = frozenset({
    "slds-global-header", "slds-context-bar", "branding-header", "utilityBar",
    "appLauncher", "slds-page-header", "slds-global-actions", "forceHeader",
    "navigationMenu", "forceBrandBand", "slds-nav-vertical",
})

CHROME_IDENTIFYING_ATTRS = ("data-testid", "data-qa")

# --- Platform detection ---
DENSE_FRAMEWORK_MARKERS = (
    "body.auraBody",
    "#auraLoadingBox",
    ".slds-global-header",
    "[data-aura-class]",
)

DENSE_FRAMEWORK_FRAGMENTS = (
    "div[class*='slds-']",
    "div[class*='force']",
    "div[class*='ui']",
)

# More generic-fragment hits than this flips a document to dense-framework.
DENSE_FRAMEWORK_FRAGMENT_THRESHOLD = 5

# --- Attribute allow-list (stage 5) ---
KEEP_ATTRS = frozenset({
    "id", "name", "type", "value", "placeholder", "title", "role", "href", "for",
})

KEEP_ATTR_PREFIXES = ("aria-", "data-")

FORM_CONTROL_ATTRS = frozenset({
    "id", "name", "type", "placeholder", "title", "aria-label", "value",
    "data-testid", "data-test", "data-qa",
    "alt", "autocomplete", "checked", "disabled", "readonly", "required",
})

# --- Seed finding ---
ATTRIBUTE_MATCH_KEYS = ("placeholder", "aria-label", "title", "name", "id")

ACTION_VOCABULARY = (
    "login", "sign in", "submit", "continue", "next", "ok", "search", "save",
    "apply",
)

# Widget-kind words and articles, dropped from a description to get its label
# ("Start Button" is looked up as "start").
LABEL_NOISE_WORDS = frozenset({
    "button", "link", "tab", "icon", "image", "img", "label", "field", "box",
    "div", "span", "section", "panel", "menu", "card", "header", "footer",
    "item", "option", "tile", "the", "a", "an",
})

QUOTE_TRANSLATION = str.maketrans({
    "“": '"', "”": '"', "‘": "'", "’": "'",
})
