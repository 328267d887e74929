"""
Context Snippet Builder: a small sub-document around one or more seeds.

Single-best-match mode returns the seed's context container as-is.
Multi-seed mode copies each seed's container into a fresh document, trims
wide nodes down to the sibling limit, then runs the reducer's cleanup stages
(4-8) over the result.

Snippets never share nodes with the source tree: containers are deep-copied
with copy.copy(), which BeautifulSoup implements as a detached recursive copy.
"""

import copy
from typing import Optional

from bs4 import BeautifulSoup, Tag

from .dom import climb, css_path, element_children, has_useful_text, is_interactive
from .logger import get_module_logger
from .reducer import StructuralReducer
from .schemas import DEFAULT_SETTINGS, PlatformProfile, ReductionSettings, SeedCandidate

logger = get_module_logger("snippet")


class SnippetBuilder:
    """Builds bounded context around seed elements."""

    def __init__(
        self,
        settings: Optional[ReductionSettings] = None,
        reducer: Optional[StructuralReducer] = None
    ):
        self.settings = settings or DEFAULT_SETTINGS
        self.reducer = reducer or StructuralReducer(self.settings)

    def container_for(self, seed: Tag, root: Tag) -> Tag:
        return climb(seed, self.settings.snippet_parent_depth, root)

    # --- Single-best-match mode ---

    def single(self, seed: Tag, root: Tag) -> Tag:
        """
        Context container for one seed. When the container's parent has only
        a handful of children, the parent is used instead: extra context is
        cheap there.
        """
        container = self.container_for(seed, root)
        parent = container.parent
        if (container is not root and isinstance(parent, Tag)
                and not isinstance(parent, BeautifulSoup)
                and len(element_children(parent)) <= self.settings.promote_sibling_limit):
            container = parent
        return container

    # --- Multi-seed mode ---

    def build(self, seeds: list[SeedCandidate], root: Tag) -> BeautifulSoup:
        """
        Assemble a fresh document holding one trimmed copy of each distinct
        seed container, in seed order.
        """
        snippet = BeautifulSoup("<body></body>", "html5lib")
        inserted = set()

        for seed in seeds:
            container = self.container_for(seed.element, root)
            key = css_path(container)
            if key in inserted:
                continue
            inserted.add(key)

            clone = copy.copy(container)
            self.trim_siblings(clone)
            if container is root:
                # the whole body is the context; take its content, not a second <body>
                for child in list(clone.contents):
                    snippet.body.append(child.extract())
            else:
                snippet.body.append(clone)

        logger.info(f"Built snippet from {len(inserted)} containers for {len(seeds)} seeds")
        return snippet

    def trim_siblings(self, node: Tag) -> None:
        """
        At every level, cut a node's element children down to the sibling
        limit. Interesting children (controls, or anything with text worth
        reading) are kept first; the earliest remaining children fill any
        leftover slots. Kept children stay in document order.
        """
        limit = self.settings.snippet_sibling_limit
        stack = [node]
        while stack:
            current = stack.pop()
            children = element_children(current)
            if len(children) > limit:
                keep = set()
                for child in children:
                    if len(keep) < limit and (is_interactive(child) or has_useful_text(child)):
                        keep.add(id(child))
                for child in children:
                    if len(keep) >= limit:
                        break
                    keep.add(id(child))
                for child in children:
                    if id(child) not in keep:
                        child.decompose()
                children = element_children(current)
            stack.extend(children)

    def render(self, snippet: BeautifulSoup, profile: PlatformProfile) -> str:
        """Run cleanup stages 4-8 over an assembled snippet."""
        return self.reducer.finish(snippet.body, profile)
