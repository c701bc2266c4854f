"""
Terminal output for generation streams.

Each fragment is styled with a small inline-markdown skin and written to
stdout as soon as it arrives.
"""

import logging
from typing import AsyncIterator, List, Optional

from markdown_it import MarkdownIt
from rich.console import Console
from rich.style import Style
from rich.text import Text
from rich.theme import Theme

from tell.core.llm_client import Batch, Session

logger = logging.getLogger(__name__)

SKIN = Theme(
    {
        "tell.paragraph": Style(color="magenta", bgcolor="rgb(30,30,40)"),
        "tell.bold": Style(color="yellow", bold=True),
        "tell.italic": Style(italic=True, underline=True),
        "tell.code": Style(bold=True),
    }
)

# Opening token -> (style, matching close token)
_EMPHASIS = {
    "strong_open": ("tell.bold", "strong_close"),
    "em_open": ("tell.italic", "em_close"),
}


class StreamRenderer:
    """Writes styled fragments to the terminal as a stream is consumed."""

    def __init__(self, console: Optional[Console] = None, error_console: Optional[Console] = None):
        self.console = console or Console(highlight=False, soft_wrap=True)
        self.error_console = error_console or Console(stderr=True, highlight=False)
        # entities must stay text_special tokens so they print as written
        self.md = MarkdownIt("commonmark").disable("text_join")

    def _style(self, names: List[str]) -> Style:
        return Style.combine(SKIN.styles[name] for name in names) if names else Style.null()

    def render_inline(self, text: str) -> Text:
        """Style one fragment of text as inline markdown."""
        rendered = Text(style=SKIN.styles["tell.paragraph"], end="")
        tokens = self.md.parseInline(text)
        children = tokens[0].children if tokens and tokens[0].children else []

        open_styles = []
        for token in children:
            if token.type in _EMPHASIS:
                open_styles.append(_EMPHASIS[token.type])
            elif open_styles and token.type == open_styles[-1][1]:
                open_styles.pop()
            elif token.type in ("softbreak", "hardbreak"):
                rendered.append("\n")
            elif token.type in ("link_open", "link_close"):
                continue
            elif token.type == "text_special" and token.info == "entity":
                names = [name for name, _ in open_styles]
                rendered.append(token.markup, style=self._style(names))
            else:
                names = [name for name, _ in open_styles]
                if token.type == "code_inline":
                    names.append("tell.code")
                rendered.append(token.content, style=self._style(names))
        return rendered

    def write(self, text: str) -> None:
        """Print one fragment and flush so it shows up immediately."""
        self.console.print(self.render_inline(text), end="", soft_wrap=True)
        self.console.file.flush()

    def report_error(self, error: Exception) -> None:
        logger.error(f"Error during generation: {error}")
        self.error_console.print(f"Error during generation: {error}", markup=False, highlight=False)

    async def consume(self, stream: AsyncIterator[Batch], session: Optional[Session] = None) -> Session:
        """
        Print a generation stream until it is exhausted.

        Error batches are reported on stderr and skipped; the stream keeps
        going.

        Args:
            stream: Batches from OllamaLanguageModel.generate_stream()
            session: Session the request continued, if any

        Returns:
            Session carrying the last continuation context seen
        """
        session = session or Session()
        wrote = False

        async for batch in stream:
            if not batch.ok:
                self.report_error(batch.error)
                continue
            for fragment in batch.fragments:
                if fragment.text:
                    self.write(fragment.text)
                    wrote = True
                session = session.advance(fragment)

        if wrote:
            self.console.print()
            self.console.file.flush()

        if session.context is not None:
            logger.debug(f"Stream finished, context tokens: {len(session.context)}")
        return session
