import re
from typing import Any, Dict, List

from reporthub.models.report import REPORT_FORMATS

PHONE_RE = re.compile(r"^\+?[\d\s\-()]{7,20}$")
MAX_PAGES = 500


class Validator:
    """Form-boundary checks for report and order submissions.

    The pricing engine assumes a positive integer page count, so it is
    enforced here. Issues are returned sorted so responses are stable.
    """

    def _add_issue(self, issues: List[str], issue: str) -> None:
        if issue not in issues:
            issues.append(issue)

    def _result(self, issues: List[str]) -> Dict[str, Any]:
        return {"ok": not issues, "issues": sorted(issues)}

    def _check_print_options(self, data: Dict[str, Any], issues: List[str]) -> None:
        pages = data.get("pages")
        if isinstance(pages, bool) or not isinstance(pages, int):
            self._add_issue(issues, "invalid_pages_format")
        elif pages < 1 or pages > MAX_PAGES:
            self._add_issue(issues, "invalid_pages")

        if data.get("print_side") not in ("single", "double"):
            self._add_issue(issues, "invalid_print_side")

    def validate_print_options(self, data: Dict[str, Any]) -> Dict[str, Any]:
        issues: List[str] = []
        self._check_print_options(data, issues)
        return self._result(issues)

    def validate_report(self, data: Dict[str, Any]) -> Dict[str, Any]:
        issues: List[str] = []

        for name in ("title", "topic"):
            if not str(data.get(name) or "").strip():
                self._add_issue(issues, f"missing_{name}")

        self._check_print_options(data, issues)

        fmt = data.get("format")
        if not fmt:
            self._add_issue(issues, "missing_format")
        elif fmt not in REPORT_FORMATS:
            self._add_issue(issues, f"unsupported_format:{fmt}")

        return self._result(issues)

    def validate_order(self, data: Dict[str, Any]) -> Dict[str, Any]:
        issues: List[str] = []

        contact = data.get("contact") or {}
        if not str(contact.get("fullName") or "").strip():
            self._add_issue(issues, "missing_full_name")
        phone = str(contact.get("phone") or "").strip()
        if not phone:
            self._add_issue(issues, "missing_phone")
        elif not PHONE_RE.match(phone):
            self._add_issue(issues, "invalid_phone")

        if not str(data.get("address") or "").strip():
            self._add_issue(issues, "missing_address")

        coords = data.get("coordinates") or {}
        try:
            lat = float(coords.get("lat"))
            lng = float(coords.get("lng"))
            if not (-90 <= lat <= 90 and -180 <= lng <= 180):
                self._add_issue(issues, "invalid_coordinates")
        except (TypeError, ValueError):
            self._add_issue(issues, "missing_coordinates")

        return self._result(issues)
