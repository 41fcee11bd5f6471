"""Run template extraction in a child process with a hard time limit.

Python's ``re`` engine cannot be interrupted from another thread, so a
pattern with catastrophic backtracking is only stoppable by terminating the
process running it.
"""

import multiprocessing
from multiprocessing.connection import Connection

from purchase_ocr.extraction.models import ExtractedRecord, Template
from purchase_ocr.extraction.record_assembler import assemble_with_diagnostics
from purchase_ocr.utils.logger import get_logger

logger = get_logger(__name__)

_context = multiprocessing.get_context("spawn")

# How long a worker that already sent its result may take to exit.
_EXIT_GRACE_SECONDS = 1.0


class ExtractionTimeout(Exception):
    """Raised when extraction does not finish within the time limit."""


class ExtractionFailed(Exception):
    """Raised when the extraction worker fails or dies."""


def _worker(conn: Connection, text: str, template: Template) -> None:
    try:
        conn.send(("ok", assemble_with_diagnostics(text, template)))
    except Exception as exc:
        conn.send(("error", f"{type(exc).__name__}: {exc}"))
    finally:
        conn.close()


class ExtractionRunner:
    """Runs ``assemble_with_diagnostics`` in a fresh worker process.

    Args:
        timeout_seconds: Wall-clock limit for one extraction, including
            worker start-up. The worker is terminated once it is exceeded.
    """

    def __init__(self, timeout_seconds: float) -> None:
        self.timeout_seconds = timeout_seconds

    def run(self, text: str, template: Template) -> tuple[ExtractedRecord, dict[str, str]]:
        """Extract a record, stopping the worker if it runs too long.

        Args:
            text: Receipt text.
            template: Template to apply.

        Returns:
            The extracted record and the per-field compile errors.

        Raises:
            ExtractionTimeout: If the time limit is exceeded.
            ExtractionFailed: If the worker raised or exited without a result.
        """
        receiver, sender = _context.Pipe(duplex=False)
        process = _context.Process(
            target=_worker, args=(sender, text, template), daemon=True
        )
        process.start()
        sender.close()

        finished = False
        try:
            if not receiver.poll(self.timeout_seconds):
                raise ExtractionTimeout(
                    f"extraction exceeded {self.timeout_seconds:.1f}s"
                )
            status, payload = receiver.recv()
            finished = True
        except EOFError as exc:
            raise ExtractionFailed("extraction worker exited without a result") from exc
        finally:
            receiver.close()
            if finished:
                process.join(_EXIT_GRACE_SECONDS)
            if process.is_alive():
                logger.warning("Terminating extraction worker pid=%s", process.pid)
                process.terminate()
            process.join()

        if status == "error":
            raise ExtractionFailed(payload)
        return payload
