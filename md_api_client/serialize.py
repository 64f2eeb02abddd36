"""
Serialization for md_api_client.

This module converts call parameters into the two encodings the server
understands: URL-encoded form fields for single calls, and the JSON document
that carries a whole batch for ``multicall/multicall``.
"""

import json
import math
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .core import CallDescriptor, ParamValue, Params

FormFields = List[Tuple[str, str]]

SCALAR_TYPES = (str, bool, int, float)


def check_params(params: Optional[Params], finite: bool = False) -> None:
    """
    Reject parameter values outside of the supported scalar kinds.

    With ``finite=True`` NaN and infinite floats are rejected as well, since
    JSON cannot carry them.
    """
    if not params:
        return
    for key, value in params.items():
        if not isinstance(key, str):
            raise TypeError(f"Parameter names must be strings, got {type(key).__name__}")
        if not isinstance(value, SCALAR_TYPES):
            raise TypeError(
                f"Parameter {key!r} has unsupported type {type(value).__name__}; "
                f"expected str, int, float or bool"
            )
        if finite and isinstance(value, float) and not math.isfinite(value):
            raise TypeError(f"Parameter {key!r} is {value!r}, which JSON cannot encode")


def format_float(value: float) -> str:
    """
    Render a float with the shortest round-trip digits, in ECMAScript
    ``Number.prototype.toString`` layout.

    Plain notation for exponents between -6 and 21, ``1e+21``/``1.5e-7``
    outside of that range, and no ``.0`` on integral values.
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        return "0"

    sign = "-" if value < 0 else ""
    mantissa, _, exponent = repr(abs(value)).partition("e")
    whole, _, fraction = mantissa.partition(".")
    digits = whole + fraction
    # value == 0.<digits> * 10 ** point
    point = len(whole) + int(exponent or 0)
    stripped = digits.lstrip("0")
    point -= len(digits) - len(stripped)
    digits = stripped.rstrip("0")
    count = len(digits)

    if count <= point <= 21:
        text = digits + "0" * (point - count)
    elif 0 < point <= 21:
        text = f"{digits[:point]}.{digits[point:]}"
    elif -6 < point <= 0:
        text = "0." + "0" * -point + digits
    else:
        power = point - 1
        power_text = f"e{'+' if power >= 0 else '-'}{abs(power)}"
        text = digits + power_text if count == 1 else f"{digits[0]}.{digits[1:]}{power_text}"
    return sign + text


def coerce_param(value: ParamValue) -> str:
    """
    Render a parameter value the way it travels in a form body.

    Booleans become ``"true"``/``"false"`` and floats follow
    ``format_float``, so ``0``, ``False`` and ``""`` all stay distinct.
    """
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return format_float(value)
    if isinstance(value, str):
        return value
    raise TypeError(f"Cannot encode parameter of type {type(value).__name__}")


def form_fields(params: Optional[Params], token: Optional[str] = None) -> FormFields:
    """
    Build the ordered form fields for one call.

    Args:
        params: Call parameters, in the order they should be sent
        token: Session token to attach unless ``params`` already has one

    Returns:
        List of ``(name, value)`` string pairs
    """
    check_params(params)
    fields = [(key, coerce_param(value)) for key, value in (params or {}).items()]
    if token is not None and "token" not in (params or {}):
        fields.append(("token", token))
    return fields


def wire_call(descriptor: CallDescriptor) -> Dict[str, Any]:
    """Flatten a descriptor into the object the multicall method expects."""
    call: Dict[str, Any] = dict(descriptor.params)
    call["method"] = descriptor.method
    if isinstance(descriptor.breaking, bool):
        call["breaking"] = descriptor.breaking
    return call


def encode_multicall(descriptors: Iterable[CallDescriptor]) -> str:
    """Encode a batch as the ``content`` parameter of ``multicall/multicall``."""
    return json.dumps({"calls": [wire_call(d) for d in descriptors]}, allow_nan=False)
