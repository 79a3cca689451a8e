"""Committed audit results resource handler."""

from stock_audit.session import AuditSession, audit_session
from stock_audit.utils.table import frame_to_csv, results_to_frame

LATEST_URI = "audit://latest"


class ResourceNotFoundError(Exception):
    """No audit run has been committed yet."""

    pass


def read_results_resource(session: AuditSession = audit_session) -> tuple[str, str]:
    """
    Serve the last committed run as CSV, ranked as scored.

    Returns:
        Tuple of (csv_text, mime_type)

    Raises:
        ResourceNotFoundError: If no run has been committed
    """
    committed = session.committed
    if committed is None:
        raise ResourceNotFoundError(f"No audit committed yet. Call audit_document first: {LATEST_URI}")

    frame = results_to_frame([r.to_dict() for r in committed.results])
    return frame_to_csv(frame), "text/csv"
