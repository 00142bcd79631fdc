# src/panelhub/core/auth.py
"""
Credential strategy selection for CyberPanel calls

Strategies are plain data, tried in order. The decision of whether to move on
to the next strategy is a pure function of the previous result, so the policy
can be tested without any HTTP.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List

from .responses import ErrorCode, PanelResult


NO_AUTH_METHOD_MESSAGE = "No authentication method available (need token or password)"
AUTH_EXHAUSTED_MESSAGE = "All authentication methods failed"


class Decision(Enum):
    RETURN_NOW = "return_now"
    TRY_NEXT = "try_next"


@dataclass(frozen=True)
class AuthStrategy:
    """One way of authenticating a cloudAPI call"""

    name: str
    headers: Dict[str, str] = field(default_factory=dict)
    body_fields: Dict[str, str] = field(default_factory=dict)

    def build_body(self, operation, username, parameters):
        body = {"controller": operation, "serverUserName": username}
        body.update(self.body_fields)
        body.update(parameters or {})
        return body


def build_strategies(credentials) -> List[AuthStrategy]:
    """Token first, password second; each only when configured"""
    strategies = []

    if credentials.token:
        strategies.append(
            AuthStrategy(
                name="Token",
                headers={
                    "Content-Type": "application/json",
                    "Authorization": credentials.token,
                },
            )
        )

    if credentials.password:
        strategies.append(
            AuthStrategy(
                name="Password",
                headers={"Content-Type": "application/json"},
                body_fields={"password": credentials.password},
            )
        )

    return strategies


def decide(result: PanelResult) -> Decision:
    """
    Success and domain-level errors end the negotiation. Transport failures,
    unparseable bodies and rejected credentials move on to the next strategy.
    """
    if result.succeeded:
        return Decision.RETURN_NOW
    if result.is_transport_failure or result.error_code == ErrorCode.AUTH_REJECTED:
        return Decision.TRY_NEXT
    return Decision.RETURN_NOW


def negotiate(
    strategies: List[AuthStrategy],
    send: Callable[[AuthStrategy], PanelResult],
    logger=None,
) -> PanelResult:
    """Run send() once per strategy until decide() says stop"""
    if not strategies:
        return PanelResult.fail(NO_AUTH_METHOD_MESSAGE, ErrorCode.NO_AUTH_METHOD)

    for strategy in strategies:
        result = send(strategy)
        if decide(result) is Decision.RETURN_NOW:
            return result
        if logger:
            logger.debug(
                f"{strategy.name} strategy did not succeed ({result.error_code.value}): "
                f"{result.error_message}"
            )

    return PanelResult.fail(AUTH_EXHAUSTED_MESSAGE, ErrorCode.AUTH_EXHAUSTED)
