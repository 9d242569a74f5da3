"""Revert decoding — maps contract revert data to readable errors.

The error table is fixed when the decoder is built: callers that know
about additional contracts build their own decoder with a merged table
instead of registering into shared state. Selectors are derived from the
error declarations, so a table entry is just ``"Name(args)" -> info``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional

from eth_utils import function_signature_to_4byte_selector

_SELECTOR_RE = re.compile(r"0x[a-fA-F0-9]{8}")
_REASON_RE = re.compile(r"reverted with reason: (\w+)", re.IGNORECASE)
_FUNCTION_RE = re.compile(r'The contract function "(\w+)" reverted')


@dataclass(frozen=True)
class RevertInfo:
    message: str
    action: Optional[str] = None


@dataclass(frozen=True)
class ParsedRevert:
    raw: str
    name: str
    message: str
    action: Optional[str] = None
    is_known: bool = False


MINTER_ERRORS: Mapping[str, RevertInfo] = MappingProxyType({
    "AlreadyClaimed()": RevertInfo("This allowlist fraction has already been claimed"),
    "DoesNotExist()": RevertInfo("The certificate does not exist"),
    "DuplicateEntry()": RevertInfo("A certificate with this metadata URI already exists"),
    "Invalid()": RevertInfo("The mint parameters were rejected by the minter"),
    "NotAllowed()": RevertInfo(
        "This account is not on the allowlist",
        action="Check the claim address and units against the published allowlist",
    ),
    "TransfersNotAllowed()": RevertInfo("Transfers are restricted for this certificate"),
    "ArraySize()": RevertInfo("Mismatched array lengths in the call"),
})


class RevertDecoder:
    """Decodes revert selectors, reason strings and error names.

    Usage:
        decoder = RevertDecoder(MINTER_ERRORS)
        parsed = decoder.parse(exc)
        if parsed.is_known:
            ...
    """

    def __init__(self, errors: Mapping[str, RevertInfo] = MINTER_ERRORS) -> None:
        by_selector: dict[str, tuple[str, RevertInfo]] = {}
        by_name: dict[str, tuple[str, RevertInfo]] = {}
        for declaration, info in errors.items():
            name = declaration.split("(", 1)[0]
            selector = "0x" + function_signature_to_4byte_selector(declaration).hex()
            by_selector[selector] = (name, info)
            by_name[name] = (name, info)
        self._by_selector = MappingProxyType(by_selector)
        self._by_name = MappingProxyType(by_name)

    @property
    def selectors(self) -> Mapping[str, tuple[str, RevertInfo]]:
        return self._by_selector

    def parse(self, error: object) -> ParsedRevert:
        """Parse an exception, message or raw selector."""
        text = str(getattr(error, "message", None) or error)
        signature = _extract_signature(text)

        if signature is not None:
            known = self._by_selector.get(signature) or self._by_name.get(signature)
            if known is not None:
                name, info = known
                return ParsedRevert(
                    raw=signature, name=name, message=info.message,
                    action=info.action, is_known=True,
                )

        for name, info in self._by_name.values():
            if re.search(rf"\b{re.escape(name)}\b", text):
                return ParsedRevert(
                    raw=text, name=name, message=info.message,
                    action=info.action, is_known=True,
                )

        return ParsedRevert(
            raw=signature or text,
            name="UnknownError",
            message=text or "Transaction reverted",
        )


def _extract_signature(text: str) -> Optional[str]:
    match = _SELECTOR_RE.search(text)
    if match:
        return match.group(0).lower()
    match = _REASON_RE.search(text) or _FUNCTION_RE.search(text)
    if match:
        return match.group(1)
    return None
