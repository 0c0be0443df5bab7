"""Phone helpers for the messaging gateway."""

import re

_NON_DIGITS = re.compile(r"\D")


def to_gateway_number(phone: str) -> str:
    """Strip everything but digits (the gateway addresses numbers, not JIDs).

    >>> to_gateway_number("+1 (954) 555-0100")
    '19545550100'
    >>> to_gateway_number("5511999990000@s.whatsapp.net")
    '5511999990000'
    """
    return _NON_DIGITS.sub("", phone.split("@", 1)[0])
