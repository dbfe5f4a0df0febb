"""Structured result envelopes for validator and audit output.

Rejections and audit findings are expected outcomes, so they are returned
as plain dictionaries the surrounding editor can forward as-is:

    {"ok": true, "data": ...}
    {"ok": false, "error": {"message": ..., "code": ...}}
"""

from typing import Any, Dict, List, Optional

SEVERITIES = ("error", "warning", "info")


def is_success(result: Dict[str, Any]) -> bool:
    """Check if an envelope reports success."""
    return bool(result.get("ok"))


def success_response(data: Any, warnings: Optional[List[str]] = None) -> Dict[str, Any]:
    """Create a successful response envelope.

    Args:
        data: The response data
        warnings: Optional list of warning messages
    """
    response = {"ok": True, "data": data}
    if warnings:
        response["warnings"] = warnings
    return response


def error_response(
    message: str,
    code: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Create an error response envelope.

    Args:
        message: Human-readable reason
        code: Machine-readable reason (e.g. ``WouldCreateCycle``)
        details: Ids involved in the failure
    """
    error: Dict[str, Any] = {"message": message}
    if code:
        error["code"] = code
    if details:
        error["details"] = details
    return {"ok": False, "error": error}


def create_issue(
    severity: str,
    message: str,
    member_id: Optional[str] = None,
    code: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Create a structured audit issue.

    Raises:
        ValueError: If severity is not one of error/warning/info
    """
    if severity not in SEVERITIES:
        raise ValueError(f"Unknown severity '{severity}'. Expected one of {SEVERITIES}")

    issue: Dict[str, Any] = {"severity": severity, "message": message}
    if member_id:
        issue["member_id"] = member_id
    if code:
        issue["code"] = code
    if details:
        issue["details"] = details
    return issue


def validation_response(
    issues: List[Dict[str, Any]],
    metrics: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Summarize a list of issues into a validation envelope.

    Status is ``error`` if any issue is an error, ``warning`` if any is a
    warning, ``ok`` otherwise. Only ``error`` makes the envelope not ok.
    """
    severities = {issue["severity"] for issue in issues}
    if "error" in severities:
        status = "error"
    elif "warning" in severities:
        status = "warning"
    else:
        status = "ok"

    data: Dict[str, Any] = {"status": status, "issues": list(issues)}
    if metrics:
        data["metrics"] = metrics

    return {"ok": status != "error", "data": data}
