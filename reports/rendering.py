# reports/rendering.py
"""
Default rendering service: report views -> PNG (matplotlib) -> PDF (reportlab).

matplotlib and reportlab are imported inside the methods so that nothing
heavy is loaded until the first export.
"""
from __future__ import annotations

import logging
from io import BytesIO
from typing import Protocol, Sequence

from reports.styles import report_palette
from reports.views import ReportView

logger = logging.getLogger(__name__)

# A4 portrait, millimetres
PAGE_W_MM = 210.0
HEADER_H_MM = 25.0
MARGIN_MM = 10.0
RESULTS_TOP_MM = 30.0

_MM_PER_INCH = 25.4

# results layout, inches
_PAD = 0.30
_TITLE_H = 0.45
_LINE_H = 0.30


class RenderingService(Protocol):
    def render_to_image(self, view: ReportView) -> bytes:
        ...

    def compose_document(self, images: Sequence[bytes]) -> bytes:
        ...


class MatplotlibReportlabService:
    def __init__(self, dpi: int = 160, title: str = "") -> None:
        self.dpi = int(dpi)
        self.title = title

    # ==========================================================
    # View -> PNG
    # ==========================================================
    def render_to_image(self, view: ReportView) -> bytes:
        import matplotlib

        matplotlib.use("Agg")
        import matplotlib.pyplot as plt

        if view.kind == "header":
            fig = self._draw_header(plt, view)
        else:
            fig = self._draw_results(plt, view)

        buf = BytesIO()
        try:
            fig.savefig(buf, format="png", dpi=self.dpi, facecolor=fig.get_facecolor())
        finally:
            plt.close(fig)
        return buf.getvalue()

    def _draw_header(self, plt, view: ReportView):
        pal = report_palette()
        w = PAGE_W_MM / _MM_PER_INCH
        h = HEADER_H_MM / _MM_PER_INCH

        fig = plt.figure(figsize=(w, h))
        fig.patch.set_facecolor(pal["PRIMARY"])
        fig.text(0.03, 0.62, view.title, color="white", fontsize=16, fontweight="bold", va="center")
        if view.subtitle:
            fig.text(0.03, 0.28, view.subtitle, color=pal["BORDER"], fontsize=9, va="center")
        return fig

    def _draw_results(self, plt, view: ReportView):
        from matplotlib.patches import Rectangle

        pal = report_palette()
        w = (PAGE_W_MM - 2 * MARGIN_MM) / _MM_PER_INCH
        h = 2 * _PAD + _TITLE_H + _LINE_H * max(view.line_count, 1)

        fig = plt.figure(figsize=(w, h))
        fig.patch.set_facecolor("white")
        ax = fig.add_axes([0, 0, 1, 1])
        ax.set_xlim(0, w)
        ax.set_ylim(0, h)
        ax.axis("off")

        left, right = _PAD, w - _PAD
        y = h - _PAD

        ax.text(left, y, view.title, fontsize=14, fontweight="bold", color=pal["PRIMARY"], va="top")
        y -= _TITLE_H

        for section in view.sections:
            ax.add_patch(
                Rectangle(
                    (left, y - _LINE_H + 0.04), right - left, _LINE_H - 0.04,
                    facecolor=pal["SOFT"], edgecolor=pal["BORDER"], linewidth=0.6,
                )
            )
            ax.text(left + 0.08, y - _LINE_H / 2 + 0.02, section.heading,
                    fontsize=10, fontweight="bold", color=pal["PRIMARY"], va="center")
            y -= _LINE_H

            for row in section.rows:
                mid = y - _LINE_H / 2
                ax.text(left + 0.1, mid, row.label, fontsize=9, color=pal["TEXT"], va="center")
                ax.text(
                    right - 0.1, mid, row.value,
                    fontsize=10 if row.highlight else 9,
                    fontweight="bold" if row.highlight else "normal",
                    color=pal.get(row.highlight or "TEXT", pal["TEXT"]),
                    ha="right", va="center",
                )
                ax.plot([left, right], [y - _LINE_H] * 2, color=pal["BORDER"], linewidth=0.5)
                y -= _LINE_H

        for note in view.notes:
            ax.text(left, y - _LINE_H / 2, note, fontsize=8, style="italic", color=pal["MUTED"], va="center")
            y -= _LINE_H

        return fig

    # ==========================================================
    # PNGs -> PDF
    # ==========================================================
    def compose_document(self, images: Sequence[bytes]) -> bytes:
        """
        images[0] is the header (full width, page top). Every following image
        starts below it and continues onto new pages when taller than the
        space left.
        """
        from reportlab.lib.pagesizes import A4
        from reportlab.lib.units import mm
        from reportlab.lib.utils import ImageReader
        from reportlab.pdfgen import canvas

        if not images:
            raise ValueError("compose_document needs at least the header image")

        page_w, page_h = A4
        buf = BytesIO()
        c = canvas.Canvas(buf, pagesize=A4)
        if self.title:
            c.setTitle(self.title)

        header = ImageReader(BytesIO(images[0]))
        c.drawImage(header, 0, page_h - HEADER_H_MM * mm, width=page_w, height=HEADER_H_MM * mm)

        top = page_h - RESULTS_TOP_MM * mm
        pages = 1
        for png in images[1:]:
            top, added = self._draw_flowing(c, ImageReader(BytesIO(png)), top, page_w, page_h, mm)
            pages += added

        c.showPage()
        c.save()
        logger.debug("Composed PDF: %d image(s), %d page(s)", len(images), pages)
        return buf.getvalue()

    @staticmethod
    def _draw_flowing(c, img, top: float, page_w: float, page_h: float, mm: float):
        """Draw `img` from `top` down; returns (next top, pages added)."""
        px_w, px_h = img.getSize()
        x = MARGIN_MM * mm
        w = page_w - 2 * MARGIN_MM * mm
        h = w * float(px_h) / float(px_w)
        bottom = MARGIN_MM * mm

        shown = 0.0
        added = 0
        while True:
            avail = top - bottom
            if avail <= 0:
                c.showPage()
                added += 1
                top = page_h - MARGIN_MM * mm
                continue

            c.saveState()
            clip = c.beginPath()
            clip.rect(x, bottom, w, avail)
            c.clipPath(clip, stroke=0, fill=0)
            c.drawImage(img, x, top + shown - h, width=w, height=h)
            c.restoreState()

            if h - shown <= avail:
                return top - (h - shown), added

            shown += avail
            c.showPage()
            added += 1
            top = page_h - MARGIN_MM * mm


def load_rendering_service(title: str = "") -> RenderingService:
    """Import the PDF stack; ImportError propagates to the caller."""
    import matplotlib  # noqa: F401
    import reportlab  # noqa: F401

    return MatplotlibReportlabService(title=title)

