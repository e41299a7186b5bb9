"""
Execution Validator Module

Structural gate in front of every module update. Validation is a pure
predicate: it never touches engine state, it only parses the payload into
the domain's schema or explains why it could not.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Type, Union

from pydantic import ValidationError

from .domains import Domain
from .payloads import ExecutionPayload, PAYLOAD_MODELS

logger = logging.getLogger(__name__)


class ValidationRejected(Exception):
    """Payload is missing fields or out of bounds. Non-fatal; caller may resubmit."""

    def __init__(self, domain: Domain, reason: str):
        self.domain = domain
        self.reason = reason
        super().__init__(f"{domain.value}: {reason}")


@dataclass
class ValidationResult:
    """Outcome of validating one execution payload."""
    domain: Domain
    valid: bool
    reason: Optional[str] = None
    payload: Optional[ExecutionPayload] = None

    def to_dict(self) -> Dict:
        return {
            "domain": self.domain.value,
            "valid": self.valid,
            "reason": self.reason,
        }


class ExecutionValidator:
    """
    Validates incoming domain payloads against per-domain pydantic schemas.

    Domains listed in `blocked` (strict mode) are rejected before parsing.
    Unknown domains are a programmer error and raise UnknownDomainError.
    """

    def __init__(self, payload_models: Optional[Dict[Domain, Type[ExecutionPayload]]] = None):
        self.payload_models = payload_models or PAYLOAD_MODELS

    def validate(
        self,
        domain: Union[Domain, str],
        payload: Any,
        blocked: Iterable[Domain] = ()
    ) -> ValidationResult:
        domain = Domain.parse(domain)

        if domain in set(blocked):
            return self._reject(domain, f"Strict mode: {domain.value} submissions are blocked")

        if not isinstance(payload, dict):
            return self._reject(domain, "Payload must be a mapping of fields")

        model = self.payload_models[domain]
        try:
            parsed = model.model_validate(payload)
        except ValidationError as e:
            return self._reject(domain, self._describe(e))

        return ValidationResult(domain=domain, valid=True, payload=parsed)

    def require(
        self,
        domain: Union[Domain, str],
        payload: Any,
        blocked: Iterable[Domain] = ()
    ) -> ExecutionPayload:
        """Like validate(), but raises ValidationRejected instead of returning it."""
        result = self.validate(domain, payload, blocked)
        if not result.valid:
            raise ValidationRejected(result.domain, result.reason)
        return result.payload

    def _reject(self, domain: Domain, reason: str) -> ValidationResult:
        logger.info(f"Rejected {domain.value} execution: {reason}")
        return ValidationResult(domain=domain, valid=False, reason=reason)

    @staticmethod
    def _describe(error: ValidationError) -> str:
        """First schema error as 'field.path: message'."""
        first = error.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ()))
        message = first.get("msg", "invalid value")
        if location:
            return f"{location}: {message}"
        return message
