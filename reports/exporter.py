# reports/exporter.py
from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Callable, Optional, Union

from reports.rendering import RenderingService
from reports.views import ReportView

logger = logging.getLogger(__name__)


class ExportError(RuntimeError):
    """The PDF could not be produced; no partial document is returned."""


class ExportInProgressError(ExportError):
    pass


LOAD_FAILED = "The PDF generator could not be loaded. Please try again."
RENDER_FAILED = "Could not generate the PDF report. Please try again."
IN_PROGRESS = "A PDF export is already in progress."


def _default_loader() -> RenderingService:
    from reports.rendering import load_rendering_service

    return load_rendering_service()


class ReportExporter:
    """
    Header view + results view -> PDF bytes.

    The rendering service is loaded on first use and cached. `loading` is
    True while an export runs; a second export started meanwhile is rejected.
    """

    def __init__(self, loader: Optional[Callable[[], RenderingService]] = None) -> None:
        self._loader = loader or _default_loader
        self._service: Optional[RenderingService] = None
        self._lock = threading.Lock()
        self.loading = False

    def _get_service(self) -> RenderingService:
        if self._service is None:
            try:
                self._service = self._loader()
            except Exception as e:
                logger.exception("Could not load the rendering service")
                raise ExportError(LOAD_FAILED) from e
        return self._service

    def export(self, header_view: ReportView, results_view: ReportView) -> bytes:
        if not self._lock.acquire(blocking=False):
            raise ExportInProgressError(IN_PROGRESS)

        self.loading = True
        try:
            service = self._get_service()
            try:
                header = service.render_to_image(header_view)
                results = service.render_to_image(results_view)
                pdf = service.compose_document([header, results])
            except ExportError:
                raise
            except Exception as e:
                logger.exception("PDF rendering failed")
                raise ExportError(RENDER_FAILED) from e

            logger.debug("Exported PDF (%d bytes)", len(pdf))
            return pdf
        finally:
            self.loading = False
            self._lock.release()

    def export_to_file(
        self,
        header_view: ReportView,
        results_view: ReportView,
        path: Union[str, Path],
    ) -> str:
        pdf = self.export(header_view, results_view)
        out = Path(path)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_bytes(pdf)
        logger.info("Report written to %s", out)
        return str(out)
