"""
Audit logging for security-critical and stock-affecting operations.

One JSON line per event on the "audit" logger, so it can be shipped to
centralized logging. Passwords and tokens are never included.
"""
import logging
import json
from datetime import datetime, timezone
from typing import Any, Optional, Dict

audit_logger = logging.getLogger("audit")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class AuditLog:
    """Central audit logging."""

    @staticmethod
    def log_authentication(
        action: str,  # "login", "register", "failed_login"
        username: str,
        ip_address: str,
        success: bool,
        reason: str = "",
    ):
        """
        Log authentication events.

        Usage:
            AuditLog.log_authentication("login", "annguyen", "192.168.1.1", True)
            AuditLog.log_authentication("failed_login", "annguyen", "192.168.1.1", False, reason="Invalid password")
        """
        log_entry = {
            "timestamp": _now(),
            "event_type": f"auth.{action}",
            "username": username,
            "ip_address": ip_address,
            "success": success,
        }

        if reason and not success:
            log_entry["reason"] = reason

        if success:
            audit_logger.info(json.dumps(log_entry))
        else:
            audit_logger.warning(json.dumps(log_entry))

    @staticmethod
    def log_action(
        action: str,  # "create", "update", "delete"
        resource_type: str,  # "medicine", "medicine_category", "supplier", "sale_invoice", "employee"
        resource_id: int,
        employee_id: int,
        changes: Optional[Dict[str, Any]] = None,
    ):
        """
        Log business-critical actions: who changed what, and when.

        Usage:
            AuditLog.log_action("create", "sale_invoice", 12, employee.id, changes={"lines": 3, "total": 45000})
            AuditLog.log_action("delete", "medicine", 4, employee.id, changes={"name": "Panadol Extra"})
        """
        log_entry = {
            "timestamp": _now(),
            "event_type": f"{resource_type}.{action}",
            "employee_id": employee_id,
            "resource_id": resource_id,
        }

        if changes:
            log_entry["changes"] = changes

        audit_logger.info(json.dumps(log_entry, default=str))

    @staticmethod
    def log_security_event(
        event_type: str,  # "password_changed", "avatar_updated", ...
        employee_id: int,
        details: Optional[str] = None,
    ):
        log_entry = {
            "timestamp": _now(),
            "event_type": f"security.{event_type}",
            "employee_id": employee_id,
        }

        if details:
            log_entry["details"] = details

        audit_logger.info(json.dumps(log_entry))
