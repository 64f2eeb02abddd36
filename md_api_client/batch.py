"""
Multicall batching for md_api_client.

This module sends several calls to the server in one ``multicall/multicall``
request and hands each call its own outcome, in request order.
"""

import logging
from typing import Any, List, Sequence

from .core import (
    CallDescriptor, CallFailure, CallResult, CallSkipped, CallSuccess, Envelope,
    MulticallResponse, maybe_await,
)
from .errors import CallContractError, ProtocolError
from .rpc import CallInvoker
from .serialize import check_params, encode_multicall

logger = logging.getLogger(__name__)

MULTICALL = "multicall/multicall"


class MulticallDispatcher:
    """
    Batches calls into a single round trip through a ``CallInvoker``.
    """

    def __init__(self, invoker: CallInvoker):
        self.invoker = invoker

    async def multicall(self, calls: Sequence[CallDescriptor]) -> MulticallResponse:
        """
        Execute several API methods in one request.

        The server answers with one envelope per call, in the same order.
        Each descriptor gets its envelope on ``response``, and its callbacks
        (if it has any) are invoked one position after the other before this
        coroutine returns. A call flagged ``breaking`` stops the server from
        running the calls after it when it fails; those positions come back
        as ``CallSkipped``.

        Args:
            calls: The calls to execute, in order

        Returns:
            MulticallResponse: Per-call results plus the raw response data

        Raises:
            CallContractError: A descriptor has only one of its two callbacks
            RemoteError: The multicall request itself was rejected
            TransportError: The multicall request got no usable reply

        Example:
            ```python
            result = await client.multicall([
                CallDescriptor("user/get", {"id": 7}),
                CallDescriptor("user/delete", {"id": 7}, breaking=True),
            ])
            for item in result:
                print(item.descriptor.method, item.ok)
            ```
        """
        calls = list(calls)
        for index, descriptor in enumerate(calls):
            self._check_descriptor(index, descriptor)

        data = await self.invoker.call(MULTICALL, {"content": encode_multicall(calls)})
        envelopes = self._decode_responses(data, len(calls))

        results: List[CallResult] = []
        for descriptor, envelope in zip(calls, envelopes):
            results.append(await self._dispatch(descriptor, envelope))

        for descriptor in calls[len(envelopes):]:
            logger.debug(f"No response for {descriptor.method}, skipped by the server")
            results.append(CallSkipped(descriptor))

        return MulticallResponse(raw=data, results=results)

    @staticmethod
    def _check_descriptor(index: int, descriptor: CallDescriptor) -> None:
        if not isinstance(descriptor, CallDescriptor):
            raise TypeError(f"Call {index} is a {type(descriptor).__name__}, not a CallDescriptor")
        if not isinstance(descriptor.method, str) or not descriptor.method:
            raise ValueError(f"Call {index} has no method")
        if (descriptor.on_success is None) != (descriptor.on_error is None):
            raise CallContractError(
                f"Call {index} ({descriptor.method}) needs both on_success and on_error, or neither"
            )
        check_params(descriptor.params, finite=True)

    @staticmethod
    def _decode_responses(data: Any, expected: int) -> List[Envelope]:
        responses = data.get("responses") if isinstance(data, dict) else None
        if not isinstance(responses, list):
            raise ProtocolError("Multicall response does not contain a responses list")
        if len(responses) > expected:
            raise ProtocolError(
                f"Multicall returned {len(responses)} responses for {expected} calls"
            )
        return [Envelope.from_json(response) for response in responses]

    @staticmethod
    async def _dispatch(descriptor: CallDescriptor, envelope: Envelope) -> CallResult:
        descriptor.response = envelope
        if envelope.success:
            if descriptor.on_success is not None:
                await maybe_await(descriptor.on_success(envelope.data))
            return CallSuccess(descriptor, envelope.data)

        if descriptor.on_error is not None:
            await maybe_await(descriptor.on_error(envelope))
        return CallFailure(descriptor, envelope)
