# nota/services/print_service.py

import html
import json
import logging
import os
import re
import tempfile
import webbrowser
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional, Protocol

from dotenv import load_dotenv

from domain.models import PrintOutcome

logger = logging.getLogger(__name__)

BLOCKED_MESSAGE = "Popup diblokir. Silakan izinkan popup untuk mencetak."

AUTO_PRINT_SCRIPT = """<script>
window.onload = function () {
  window.focus();
  window.print();
  window.close();
};
</script>"""


class DocumentSink(Protocol):
    def present(self, markup: str, stylesheet: str, title: str = "Cetak Nota") -> PrintOutcome:
        ...


def build_print_html(
        markup: str,
        stylesheet: str,
        title: str = "Cetak Nota",
        auto_print: bool = True,
) -> str:
    """
    Wrap concatenated page blocks and the shared stylesheet into one HTML
    document. With `auto_print` the document prints itself once loaded and
    closes right after, whether the print was confirmed or cancelled.
    """
    script = AUTO_PRINT_SCRIPT if auto_print else ""
    return (
        "<!DOCTYPE html>\n"
        "<html>\n"
        "<head>\n"
        '<meta charset="utf-8" />\n'
        f"<title>{html.escape(title)}</title>\n"
        f"<style>\n{stylesheet}\n</style>\n"
        "</head>\n"
        "<body>\n"
        f"{markup}\n"
        f"{script}\n"
        "</body>\n"
        "</html>\n"
    )


def dispatch(markup: str, stylesheet: str, sink: DocumentSink, title: str = "Cetak Nota") -> PrintOutcome:
    """
    Present one print to `sink`. No retry: a blocked surface ends this
    invocation and the operator has to print again.
    """
    outcome = sink.present(markup, stylesheet, title=title)
    if outcome is PrintOutcome.BLOCKED:
        logger.warning("Print surface blocked for %s", title)
    else:
        logger.info("Print started for %s", title)
    return outcome


def _script_literal(document: str) -> str:
    # JSON string safe to embed inside a <script> element
    return json.dumps(document).replace("</", "<\\/")


# ---------- sinks ----------

class StreamlitPrintSink:
    """
    Embeds a "Cetak Nota" button in the Streamlit page. Clicking it opens a
    blank window, writes the document and prints it; a refused window shows
    the popup warning in place. The popup decision happens in the browser,
    so `present` itself reports STARTED once the button is on the page.
    """

    def __init__(self, button_label: str = "🖨️ Cetak Nota", height: int = 90):
        self.button_label = button_label
        self.height = height

    def build_launcher(self, markup: str, stylesheet: str, title: str = "Cetak Nota") -> str:
        document = build_print_html(markup, stylesheet, title, auto_print=True)
        return f"""
<div style="font-family: sans-serif;">
  <button id="print-nota" style="padding: 8px 20px; font-size: 15px; cursor: pointer;">
    {html.escape(self.button_label)}
  </button>
  <p id="nota-warning" style="color: #b45309; margin-top: 8px;"></p>
</div>
<script>
const NOTA_DOCUMENT = {_script_literal(document)};
document.getElementById("print-nota").addEventListener("click", function () {{
  const printWindow = window.open("", "_blank");
  if (!printWindow) {{
    document.getElementById("nota-warning").textContent = {json.dumps(BLOCKED_MESSAGE)};
    return;
  }}
  printWindow.document.open();
  printWindow.document.write(NOTA_DOCUMENT);
  printWindow.document.close();
}});
</script>
"""

    def show_launcher(self, markup: str, stylesheet: str, title: str = "Cetak Nota") -> None:
        import streamlit.components.v1 as components

        components.html(self.build_launcher(markup, stylesheet, title), height=self.height)
        # drawn on every rerun; nothing is printed until the button is clicked
        logger.debug("Print launcher shown for %s", title)

    def present(self, markup: str, stylesheet: str, title: str = "Cetak Nota") -> PrintOutcome:
        self.show_launcher(markup, stylesheet, title)
        return PrintOutcome.STARTED


class BrowserPrintSink:
    """
    Writes the document to a temporary file and asks the system browser to
    open it; the page prints and closes itself. Temporary files live until
    `close()`.
    """

    def __init__(self, opener: Optional[Callable[[str], bool]] = None):
        self._opener = opener or webbrowser.open_new_tab
        self._paths: List[Path] = []

    def present(self, markup: str, stylesheet: str, title: str = "Cetak Nota") -> PrintOutcome:
        fd, name = tempfile.mkstemp(prefix="nota-", suffix=".html")
        path = Path(name)
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(build_print_html(markup, stylesheet, title, auto_print=True))

        try:
            opened = self._opener(path.as_uri())
        except webbrowser.Error as e:
            logger.warning("Browser unavailable: %s", e)
            opened = False

        if not opened:
            path.unlink(missing_ok=True)
            return PrintOutcome.BLOCKED

        self._paths.append(path)
        return PrintOutcome.STARTED

    def close(self) -> None:
        for path in self._paths:
            path.unlink(missing_ok=True)
        self._paths.clear()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


class HtmlFileSink:
    """
    Headless sink: writes the document into a folder instead of printing.
    """

    def __init__(self, output_dir: Optional[str] = None, auto_print: bool = False):
        if output_dir is None:
            load_dotenv()
            output_dir = os.getenv("NOTA_OUTPUT_DIR", "nota_output")
        self.output_dir = Path(output_dir)
        self.auto_print = auto_print
        self.last_path: Optional[Path] = None

    def present(self, markup: str, stylesheet: str, title: str = "Cetak Nota") -> PrintOutcome:
        timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        safe_title = re.sub(r"[^A-Za-z0-9_-]+", "_", title).strip("_") or "nota"
        path = self.output_dir / f"{safe_title}-{timestamp}.html"

        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            path.write_text(
                build_print_html(markup, stylesheet, title, auto_print=self.auto_print),
                encoding="utf-8",
            )
        except OSError as e:
            logger.error("Could not write nota to %s: %s", path, e)
            return PrintOutcome.BLOCKED

        self.last_path = path
        logger.info("Nota written to %s", path)
        return PrintOutcome.STARTED
