"""JSON-RPC client for the node's blob, header, share, state and p2p APIs."""

from __future__ import annotations

import base64
import itertools
from typing import Iterable, Sequence

import httpx

from celestia_kit.blob import Blob
from celestia_kit.commitment import Commitment
from celestia_kit.errors import InvalidTokenError, JsonRpcError
from celestia_kit.nmt import Namespace

DEFAULT_HTTP_URL = "http://localhost:26658"

PARSE_ERROR = -32700
INTERNAL_ERROR = -32603
TRANSPORT_ERROR = -32000


def _check_token(token: str) -> None:
    for char in token:
        if char != "\t" and not " " <= char <= "~":
            raise InvalidTokenError(f"invalid character {char!r} in header value")


def _namespace_json(namespace: Namespace) -> str:
    return base64.b64encode(namespace.as_bytes()).decode("ascii")


def _hash_json(value: bytes | str) -> str:
    if isinstance(value, str):
        return value
    return bytes(value).hex().upper()


def _uint_json(value: int) -> str:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"expected a non-negative integer, got {value!r}")
    return str(value)


class HttpTransport:
    """Sends JSON-RPC 2.0 calls over HTTP, optionally with a bearer token."""

    def __init__(
        self,
        url: str = DEFAULT_HTTP_URL,
        auth_token: str | None = None,
        *,
        timeout: float | None = None,
    ) -> None:
        headers = {}
        if auth_token is not None:
            _check_token(auth_token)
            headers["Authorization"] = f"Bearer {auth_token}"
        self.url = url
        self._client = httpx.AsyncClient(headers=headers, timeout=timeout)
        self._ids = itertools.count()

    async def call(self, method: str, params: Iterable = ()) -> object:
        """Call ``method`` with positional ``params`` and return its result."""
        request = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": list(params),
        }
        try:
            response = await self._client.post(self.url, json=request)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise JsonRpcError(TRANSPORT_ERROR, str(exc)) from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise JsonRpcError(PARSE_ERROR, "response is not valid JSON") from exc
        if not isinstance(body, dict):
            raise JsonRpcError(PARSE_ERROR, "response is not a JSON object")

        error = body.get("error")
        if error is not None:
            if isinstance(error, dict):
                raise JsonRpcError(
                    error.get("code", INTERNAL_ERROR),
                    str(error.get("message", "")),
                    error.get("data"),
                )
            raise JsonRpcError(INTERNAL_ERROR, str(error))
        if "result" not in body:
            raise JsonRpcError(INTERNAL_ERROR, "response has neither result nor error")
        return body["result"]

    async def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self._client.aclose()

    async def __aenter__(self) -> HttpTransport:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()


class Client:
    """Typed wrappers over the node's JSON-RPC methods.

    Values with no local model (headers, proofs, data squares, state
    responses) are passed and returned as their JSON objects.
    """

    def __init__(self, transport) -> None:
        self.transport = transport

    async def __aenter__(self) -> Client:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.transport.close()

    async def _call(self, method: str, *params) -> object:
        return await self.transport.call(method, params)

    async def _call_unchecked(self, method: str, *params) -> None:
        # The node answers these methods in a way that cannot be relied on,
        # so failures reported in the response are not surfaced.
        try:
            await self.transport.call(method, params)
        except JsonRpcError as exc:
            if exc.code == TRANSPORT_ERROR:
                raise

    # blob

    async def blob_get(self, height: int, namespace: Namespace, commitment: Commitment) -> Blob:
        """Retrieve the blob by commitment under the given namespace and height."""
        result = await self._call(
            "blob.Get", height, _namespace_json(namespace), commitment.to_base64()
        )
        return Blob.from_json(result)

    async def blob_get_all(self, height: int, namespaces: Sequence[Namespace]) -> list[Blob]:
        """Return all blobs under the given namespaces and height."""
        result = await self._call(
            "blob.GetAll", height, [_namespace_json(ns) for ns in namespaces]
        )
        return [Blob.from_json(item) for item in result]

    async def blob_get_proof(
        self, height: int, namespace: Namespace, commitment: Commitment
    ) -> list:
        """Retrieve proofs in the given namespace at the given height by commitment."""
        return list(
            await self._call(
                "blob.GetProof", height, _namespace_json(namespace), commitment.to_base64()
            )
        )

    async def blob_included(
        self, height: int, namespace: Namespace, proof: dict, commitment: Commitment
    ) -> bool:
        """Check whether a commitment is included at the height under the namespace."""
        return bool(
            await self._call(
                "blob.Included",
                height,
                _namespace_json(namespace),
                proof,
                commitment.to_base64(),
            )
        )

    async def blob_submit(self, blobs: Sequence[Blob]) -> int:
        """Submit blobs and return the height at which they were included."""
        return int(await self._call("blob.Submit", [blob.to_json() for blob in blobs]))

    # header

    async def header_get_by_hash(self, hash: bytes | str) -> dict:
        """Return the header with the given hash from the node's store."""
        return await self._call("header.GetByHash", _hash_json(hash))

    async def header_get_by_height(self, height: int) -> dict:
        """Return the header at the given height if it is available."""
        return await self._call("header.GetByHeight", height)

    async def header_get_verified_range_by_height(self, start: dict, to: int) -> list:
        """Return verified, adjacent headers after ``start`` up to ``to`` (exclusive)."""
        return list(await self._call("header.GetVerifiedRangeByHeight", start, to))

    async def header_local_head(self) -> dict:
        """Return the header of the local chain head."""
        return await self._call("header.LocalHead")

    async def header_network_head(self) -> dict:
        """Return the syncer's view of the network head."""
        return await self._call("header.NetworkHead")

    async def header_sync_state(self) -> dict:
        """Return the current state of the header syncer."""
        return await self._call("header.SyncState")

    async def header_sync_wait(self) -> None:
        """Block until the header syncer has reached the network head."""
        await self._call("header.SyncWait")

    async def header_wait_for_height(self, height: int) -> dict:
        """Block until the header at ``height`` has been processed, then return it."""
        return await self._call("header.WaitForHeight", height)

    # share

    async def share_get_eds(self, root: dict) -> dict:
        """Return the full extended data square identified by ``root``."""
        return await self._call("share.GetEDS", root)

    async def share_get_share(self, root: dict, row: int, col: int) -> str:
        """Return the share at the given coordinates of the square."""
        return await self._call("share.GetShare", root, row, col)

    async def share_get_shares_by_namespace(self, root: dict, namespace: Namespace) -> list:
        """Return the shares of the square within ``namespace``, row by row."""
        result = await self._call(
            "share.GetSharesByNamespace", root, _namespace_json(namespace)
        )
        return [] if result is None else list(result)

    async def share_probability_of_availability(self) -> float:
        """Return the probability that the data square is available."""
        return float(await self._call("share.ProbabilityOfAvailability"))

    async def share_shares_available(self, root: dict) -> None:
        """Check that the shares committed to ``root`` are available."""
        await self._call("share.SharesAvailable", root)

    # state

    async def state_account_address(self) -> str:
        """Return the address of the node's account."""
        return await self._call("state.AccountAddress")

    async def state_balance(self) -> dict:
        """Return the coin balance of the node's account."""
        return await self._call("state.Balance")

    async def state_balance_for_address(self, addr: str) -> dict:
        """Return the coin balance of ``addr``."""
        return await self._call("state.BalanceForAddress", addr)

    async def state_begin_redelegate(
        self, src: str, dest: str, amount: int, fee: int, gas_limit: int
    ) -> dict:
        """Move delegated tokens from one validator to another."""
        return await self._call(
            "state.BeginRedelegate",
            src,
            dest,
            _uint_json(amount),
            _uint_json(fee),
            gas_limit,
        )

    async def state_cancel_unbonding_delegation(
        self, addr: str, amount: int, height: int, fee: int, gas_limit: int
    ) -> dict:
        """Cancel a pending undelegation from a validator."""
        return await self._call(
            "state.CancelUnbondingDelegation",
            addr,
            _uint_json(amount),
            _uint_json(height),
            _uint_json(fee),
            gas_limit,
        )

    async def state_delegate(self, addr: str, amount: int, fee: int, gas_limit: int) -> dict:
        """Delegate liquid tokens to a validator."""
        return await self._call(
            "state.Delegate", addr, _uint_json(amount), _uint_json(fee), gas_limit
        )

    async def state_is_stopped(self) -> bool:
        """Return whether the state module has been stopped."""
        return bool(await self._call("state.IsStopped"))

    async def state_query_delegation(self, addr: str) -> dict:
        """Return the delegation between the node's account and a validator."""
        return await self._call("state.QueryDelegation", addr)

    async def state_query_redelegations(self, src: str, dest: str) -> dict:
        """Return the redelegations between two validators."""
        return await self._call("state.QueryRedelegations", src, dest)

    async def state_query_unbonding(self, addr: str) -> dict:
        """Return the unbonding status with a validator."""
        return await self._call("state.QueryUnbonding", addr)

    async def state_submit_pay_for_blob(
        self, fee: int, gas_limit: int, blobs: Sequence[Blob]
    ) -> dict:
        """Build, sign and submit a PayForBlob transaction."""
        return await self._call(
            "state.SubmitPayForBlob",
            _uint_json(fee),
            gas_limit,
            [blob.to_json() for blob in blobs],
        )

    async def state_submit_tx(self, tx: bytes) -> dict:
        """Submit a raw transaction and wait until it is included in a block."""
        return await self._call("state.SubmitTx", base64.b64encode(bytes(tx)).decode("ascii"))

    async def state_transfer(self, to: str, amount: int, fee: int, gas_limit: int) -> dict:
        """Send coins from the node's default wallet to ``to``."""
        return await self._call(
            "state.Transfer", to, _uint_json(amount), _uint_json(fee), gas_limit
        )

    async def state_undelegate(self, addr: str, amount: int, fee: int, gas_limit: int) -> dict:
        """Undelegate tokens, unbonding them from the current validator."""
        return await self._call(
            "Undelegate", addr, _uint_json(amount), _uint_json(fee), gas_limit
        )

    # p2p

    async def p2p_bandwidth_for_peer(self, peer_id: str) -> dict:
        """Return bandwidth metrics for the given peer."""
        return await self._call("p2p.BandwidthForPeer", peer_id)

    async def p2p_bandwidth_for_protocol(self, protocol_id: str) -> dict:
        """Return bandwidth metrics for the given protocol."""
        return await self._call("p2p.BandwidthForProtocol", protocol_id)

    async def p2p_bandwidth_stats(self) -> dict:
        """Return bandwidth metrics for all traffic of the local peer."""
        return await self._call("p2p.BandwidthStats")

    async def p2p_block_peer(self, peer_id: str) -> None:
        """Add a peer to the set of blocked peers."""
        await self._call_unchecked("p2p.BlockPeer", peer_id)

    async def p2p_close_peer(self, peer_id: str) -> None:
        """Close the connection to a peer."""
        await self._call_unchecked("p2p.ClosePeer", peer_id)

    async def p2p_connect(self, address: dict) -> None:
        """Ensure a connection to the peer described by ``address``."""
        await self._call_unchecked("p2p.Connect", address)

    async def p2p_connectedness(self, peer_id: str) -> int:
        """Return the connection state with a peer."""
        return await self._call("p2p.Connectedness", peer_id)

    async def p2p_info(self) -> dict:
        """Return address information about the host."""
        return await self._call("p2p.Info")

    async def p2p_is_protected(self, peer_id: str, tag: str) -> bool:
        """Return whether the peer is protected under ``tag``."""
        return bool(await self._call("p2p.IsProtected", peer_id, tag))

    async def p2p_list_blocked_peers(self) -> list:
        """Return the blocked peers."""
        result = await self._call("p2p.ListBlockedPeers")
        return [] if result is None else list(result)

    async def p2p_nat_status(self) -> int:
        """Return the current NAT reachability status."""
        return await self._call("p2p.NATStatus")

    async def p2p_peer_info(self, peer_id: str) -> dict:
        """Return what the peer store knows about a peer."""
        return await self._call("p2p.PeerInfo", peer_id)

    async def p2p_peers(self) -> list:
        """Return the connected peers."""
        result = await self._call("p2p.Peers")
        return [] if result is None else list(result)

    async def p2p_protect(self, peer_id: str, tag: str) -> None:
        """Protect a peer from being trimmed, dropped or scored down."""
        await self._call_unchecked("p2p.Protect", peer_id, tag)

    async def p2p_pub_sub_peers(self, topic: str) -> list | None:
        """Return the peers joined on ``topic``, or None if the node reports none."""
        result = await self._call("p2p.PubSubPeers", topic)
        return None if result is None else list(result)

    async def p2p_resource_state(self) -> dict:
        """Return the state of the resource manager."""
        return await self._call("p2p.ResourceState")

    async def p2p_unblock_peer(self, peer_id: str) -> None:
        """Remove a peer from the set of blocked peers."""
        await self._call_unchecked("p2p.UnblockPeer", peer_id)

    async def p2p_unprotect(self, peer_id: str, tag: str) -> bool:
        """Remove protection under ``tag``; return whether the peer is still protected."""
        return bool(await self._call("p2p.Unprotect", peer_id, tag))