"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
Tributary, a product of Garudex Labs

Logging configuration for Tributary.

Provides centralized structured logging setup with JSON output for production
and human-readable output for development. Supports correlation IDs for
tracing a claim or publication across components.
"""

import logging
import sys
import uuid
from contextvars import ContextVar
from pathlib import Path
from typing import Any, Dict, Optional

import structlog
from structlog.types import EventDict


# Context variable for correlation ID
correlation_id_var: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)


def add_correlation_id(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Add correlation ID to log events if present in context.

    Args:
        logger: Logger instance
        method_name: Name of the logging method
        event_dict: Event dictionary to modify

    Returns:
        Modified event dictionary with correlation_id if available
    """
    correlation_id = correlation_id_var.get()
    if correlation_id:
        event_dict["correlation_id"] = correlation_id
    return event_dict


def set_correlation_id(correlation_id: Optional[str] = None) -> str:
    """
    Set correlation ID for the current context.

    Args:
        correlation_id: Optional correlation ID. If None, generates a new UUID.

    Returns:
        The correlation ID that was set
    """
    if correlation_id is None:
        correlation_id = str(uuid.uuid4())
    correlation_id_var.set(correlation_id)
    return correlation_id


def clear_correlation_id() -> None:
    """Clear correlation ID from the current context."""
    correlation_id_var.set(None)


def get_correlation_id() -> Optional[str]:
    """Get the current correlation ID from context."""
    return correlation_id_var.get()


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    json_format: bool = True,
) -> None:
    """
    Configure structured logging for Tributary.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path to log file. If None, logs only to stderr.
        json_format: If True, use JSON format. If False, use human-readable format.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    # Clear existing handlers to avoid duplicates
    root_logger.handlers.clear()

    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(logging.Formatter("%(message)s"))
        root_logger.addHandler(file_handler)
    else:
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setLevel(numeric_level)
        stderr_handler.setFormatter(logging.Formatter("%(message)s"))
        root_logger.addHandler(stderr_handler)

    processors: list = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        add_correlation_id,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance for a specific module.

    Args:
        name: Logger name (typically __name__ of the module).

    Returns:
        Structured logger instance.
    """
    if not name.startswith("tributary"):
        name = f"tributary.{name}"
    return structlog.get_logger(name)


# Convenience functions for common logging patterns

def log_merkle_root_computation(
    logger: structlog.stdlib.BoundLogger,
    leaf_count: int,
    merkle_root: str,
    duration_ms: float,
    **kwargs: Any,
) -> None:
    """
    Log a Merkle root computation.

    Args:
        logger: Logger instance
        leaf_count: Number of leaves in the tree
        merkle_root: Computed Merkle root (hex encoded)
        duration_ms: Computation duration in milliseconds
        **kwargs: Additional context to log
    """
    log_data: Dict[str, Any] = {
        "event_type": "merkle_root_computation",
        "leaf_count": leaf_count,
        "merkle_root": merkle_root,
        "duration_ms": duration_ms,
    }

    log_data.update(kwargs)

    logger.info("merkle_root_computation", **log_data)


def log_merkle_verification(
    logger: structlog.stdlib.BoundLogger,
    success: bool,
    proof_length: int,
    failure_reason: Optional[str] = None,
    **kwargs: Any,
) -> None:
    """
    Log a Merkle proof verification.

    Args:
        logger: Logger instance
        success: Whether verification succeeded
        proof_length: Number of sibling digests in the proof
        failure_reason: Reason for failure if not successful
        **kwargs: Additional context to log
    """
    log_data: Dict[str, Any] = {
        "event_type": "merkle_verification",
        "success": success,
        "proof_length": proof_length,
    }

    if failure_reason is not None:
        log_data["failure_reason"] = failure_reason

    log_data.update(kwargs)

    if success:
        logger.debug("merkle_verification", **log_data)
    else:
        logger.warning("merkle_verification_failed", **log_data)


def log_root_publication(
    logger: structlog.stdlib.BoundLogger,
    published_by: str,
    old_root: Optional[str],
    new_root: str,
    **kwargs: Any,
) -> None:
    """
    Log a distribution root publication.

    Args:
        logger: Logger instance
        published_by: Authority that published the root
        old_root: Previous root (hex encoded) or None
        new_root: New root (hex encoded)
        **kwargs: Additional context to log
    """
    log_data: Dict[str, Any] = {
        "event_type": "root_publication",
        "published_by": published_by,
        "old_root": old_root,
        "new_root": new_root,
    }

    log_data.update(kwargs)

    logger.info("root_publication", **log_data)


def log_authority_rotation(
    logger: structlog.stdlib.BoundLogger,
    old_authority: str,
    new_authority: str,
    **kwargs: Any,
) -> None:
    """
    Log an authority rotation.

    Args:
        logger: Logger instance
        old_authority: Authority before rotation
        new_authority: Authority after rotation
        **kwargs: Additional context to log
    """
    log_data: Dict[str, Any] = {
        "event_type": "authority_rotation",
        "old_authority": old_authority,
        "new_authority": new_authority,
    }

    log_data.update(kwargs)

    logger.info("authority_rotation", **log_data)


def log_claim_settlement(
    logger: structlog.stdlib.BoundLogger,
    beneficiary: str,
    payout: int,
    cumulative_claimed: int,
    **kwargs: Any,
) -> None:
    """
    Log a settled claim.

    Args:
        logger: Logger instance
        beneficiary: Beneficiary that received the payout
        payout: Delta amount transferred
        cumulative_claimed: Beneficiary's claimed total after settlement
        **kwargs: Additional context to log
    """
    log_data: Dict[str, Any] = {
        "event_type": "claim_settlement",
        "beneficiary": beneficiary,
        "payout": payout,
        "cumulative_claimed": cumulative_claimed,
    }

    log_data.update(kwargs)

    logger.info("claim_settlement", **log_data)


def log_claim_rejection(
    logger: structlog.stdlib.BoundLogger,
    beneficiary: str,
    entitled_cumulative: int,
    reason: str,
    **kwargs: Any,
) -> None:
    """
    Log a rejected claim.

    Args:
        logger: Logger instance
        beneficiary: Beneficiary named in the claim
        entitled_cumulative: Cumulative amount the claim asserted
        reason: Error kind that aborted the claim
        **kwargs: Additional context to log
    """
    log_data: Dict[str, Any] = {
        "event_type": "claim_rejection",
        "beneficiary": beneficiary,
        "entitled_cumulative": entitled_cumulative,
        "reason": reason,
    }

    log_data.update(kwargs)

    logger.warning("claim_rejection", **log_data)


def log_vault_movement(
    logger: structlog.stdlib.BoundLogger,
    direction: str,
    account: str,
    amount: int,
    vault_balance: int,
    **kwargs: Any,
) -> None:
    """
    Log a deposit into or withdrawal out of the vault.

    Args:
        logger: Logger instance
        direction: "deposit" or "withdraw"
        account: Counterparty account
        amount: Amount moved
        vault_balance: Vault balance after the movement
        **kwargs: Additional context to log
    """
    log_data: Dict[str, Any] = {
        "event_type": "vault_movement",
        "direction": direction,
        "account": account,
        "amount": amount,
        "vault_balance": vault_balance,
    }

    log_data.update(kwargs)

    logger.info("vault_movement", **log_data)
