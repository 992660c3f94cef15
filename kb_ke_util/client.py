"""
kb_ke_util.client
=================

Typed client for the kb_ke_util service (statistics and clustering helpers
that run remotely):

- kb_ke_util.linkage_2_newick             → NewickOutput
- kb_ke_util.run_PCA                      → PCAOutput
- kb_ke_util.run_kmeans2                  → KmeansOutput
- kb_ke_util.run_pdist                    → PdistOutput
- kb_ke_util.run_linkage                  → LinkageOutput
- kb_ke_util.run_fcluster                 → FclusterOutput
- kb_ke_util.run_dendrogram               → DendrogramOutput
- kb_ke_util.build_biclusters             → BuildBiclustersOutput
- kb_ke_util.enrich_onthology             → EnrichOnthologyOutput
- kb_ke_util.calc_onthology_dist          → CalcOnthologyDistOutput
- kb_ke_util.calc_weighted_onthology_dist → CalcOnthologyDistOutput
- kb_ke_util.status                       → dict (no auth needed)

Every method is one synchronous round trip through `JsonRpcCaller`. The
params record is sent as the single positional argument and the service must
answer with a one-element result array.

Example
-------
    from kb_ke_util import KbKeUtilClient, PdistParams

    with KbKeUtilClient.with_token("https://kbase.us/services/kb_ke_util", token) as ke:
        out = ke.run_pdist(PdistParams(dist_matrix=matrix, metric="euclidean"))
        print(out.dist_matrix)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Type, Union

import httpx

from .auth import AuthToken, login, validate_token
from .config import TOKEN_ENV, ConnectionConfig, parse_timeout_ms
from .errors import SerializationError
from .rpc.http import JSON, JsonRpcCaller
from .types.base import OpenRecord, RpcContext
from .types.records import (BuildBiclustersOutput, BuildBiclustersParams,
                            CalcOnthologyDistOutput, CalcOnthologyDistParams,
                            DendrogramOutput, DendrogramParams,
                            EnrichOnthologyOutput, EnrichOnthologyParams,
                            FclusterOutput, FclusterParams, KmeansOutput,
                            KmeansParams, LinkageOutput, LinkageParams,
                            NewickOutput, NewickParams, PCAOutput, PCAParams,
                            PdistOutput, PdistParams)
from .version import SERVICE_NAME

log = logging.getLogger(__name__)

ParamsLike = Union[OpenRecord, Mapping[str, Any]]


@dataclass(frozen=True)
class Operation:
    name: str
    params: Type[OpenRecord]
    output: Type[OpenRecord]

    @property
    def method(self) -> str:
        return f"{SERVICE_NAME}.{self.name}"


LINKAGE_2_NEWICK = Operation("linkage_2_newick", NewickParams, NewickOutput)
RUN_PCA = Operation("run_PCA", PCAParams, PCAOutput)
RUN_KMEANS2 = Operation("run_kmeans2", KmeansParams, KmeansOutput)
RUN_PDIST = Operation("run_pdist", PdistParams, PdistOutput)
RUN_LINKAGE = Operation("run_linkage", LinkageParams, LinkageOutput)
RUN_FCLUSTER = Operation("run_fcluster", FclusterParams, FclusterOutput)
RUN_DENDROGRAM = Operation("run_dendrogram", DendrogramParams, DendrogramOutput)
BUILD_BICLUSTERS = Operation("build_biclusters", BuildBiclustersParams, BuildBiclustersOutput)
ENRICH_ONTHOLOGY = Operation("enrich_onthology", EnrichOnthologyParams, EnrichOnthologyOutput)
CALC_ONTHOLOGY_DIST = Operation("calc_onthology_dist", CalcOnthologyDistParams, CalcOnthologyDistOutput)
CALC_WEIGHTED_ONTHOLOGY_DIST = Operation(
    "calc_weighted_onthology_dist", CalcOnthologyDistParams, CalcOnthologyDistOutput
)

OPERATIONS: Dict[str, Operation] = {
    op.name: op
    for op in (
        LINKAGE_2_NEWICK,
        RUN_PCA,
        RUN_KMEANS2,
        RUN_PDIST,
        RUN_LINKAGE,
        RUN_FCLUSTER,
        RUN_DENDROGRAM,
        BUILD_BICLUSTERS,
        ENRICH_ONTHOLOGY,
        CALC_ONTHOLOGY_DIST,
        CALC_WEIGHTED_ONTHOLOGY_DIST,
    )
}

STATUS_METHOD = f"{SERVICE_NAME}.status"


def single_result(method: str, result: JSON) -> Any:
    """Return the only element of a result array, or raise SerializationError."""
    if not isinstance(result, list):
        raise SerializationError(message="result is not an array", method=method, detail=type(result).__name__)
    if len(result) != 1:
        raise SerializationError(
            message=f"expected exactly one result element, got {len(result)}", method=method
        )
    return result[0]


class KbKeUtilClient:
    """
    Client for the kb_ke_util service.

    The constructor never touches the network. Use `with_token` or
    `with_credentials` to build an authenticated client; both check the
    credential with the identity provider first and raise AuthorizationError
    (rejected) or TransportError (provider unreachable).

    Parameters
    ----------
    url : str
        Service endpoint (https, or http once insecure http is allowed).
    token : AuthToken | None
        An already-validated token; None for an anonymous client.
    config : ConnectionConfig | None
        Transport settings; defaults are https-only, verified TLS, buffered
        requests and no read timeout. The client keeps its own copy, so later
        changes to the passed object do not reach it.
    transport : httpx.BaseTransport | None
        Custom httpx transport (proxies, test doubles).
    """

    def __init__(
        self,
        url: str,
        *,
        token: Optional[AuthToken] = None,
        config: Optional[ConnectionConfig] = None,
        headers: Optional[Mapping[str, str]] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._caller = JsonRpcCaller(
            url,
            token=token,
            config=config,
            headers=headers,
            transport=transport,
        )

    # ---- construction --------------------------------------------------------

    @classmethod
    def with_token(
        cls,
        url: str,
        token: str,
        *,
        auth_url: Optional[str] = None,
        config: Optional[ConnectionConfig] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> "KbKeUtilClient":
        cfg = ConnectionConfig.with_overrides(config or ConnectionConfig(url=url), url=url, auth_url=auth_url)
        tok = validate_token(
            token,
            auth_url=cfg.auth_url,
            timeout_s=cfg.read_timeout_s,
            verify=not cfg.all_ssl_certificates_trusted,
            allow_insecure=cfg.insecure_http_allowed,
            transport=transport,
        )
        log.debug("token accepted for user %s", tok.user_name)
        return cls(url, token=tok, config=cfg, transport=transport)

    @classmethod
    def with_credentials(
        cls,
        url: str,
        user: str,
        password: str,
        *,
        auth_url: Optional[str] = None,
        config: Optional[ConnectionConfig] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> "KbKeUtilClient":
        cfg = ConnectionConfig.with_overrides(config or ConnectionConfig(url=url), url=url, auth_url=auth_url)
        tok = login(
            user,
            password,
            auth_url=cfg.auth_url,
            timeout_s=cfg.read_timeout_s,
            verify=not cfg.all_ssl_certificates_trusted,
            allow_insecure=cfg.insecure_http_allowed,
            transport=transport,
        )
        return cls(url, token=tok, config=cfg, transport=transport)

    @classmethod
    def from_env(cls, *, transport: Optional[httpx.BaseTransport] = None) -> "KbKeUtilClient":
        """Build from KB_KE_UTIL_* variables; KB_AUTH_TOKEN, when set, is validated."""
        cfg = ConnectionConfig.from_env()
        token = os.getenv(TOKEN_ENV)
        if token:
            return cls.with_token(cfg.url, token, config=cfg, transport=transport)
        return cls(cfg.url, config=cfg, transport=transport)

    # ---- context manager -----------------------------------------------------

    def __enter__(self) -> "KbKeUtilClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        self.close()

    def close(self) -> None:
        self._caller.close()

    def __repr__(self) -> str:
        return f"KbKeUtilClient(url={self.url!r}, token={self.token!r})"

    # ---- connection settings -------------------------------------------------

    @property
    def url(self) -> str:
        return self._caller.url

    @property
    def token(self) -> Optional[AuthToken]:
        return self._caller.token

    @property
    def read_timeout_ms(self) -> Optional[int]:
        """Read timeout in milliseconds; None means wait forever."""
        return self._caller.config.read_timeout_ms

    @read_timeout_ms.setter
    def read_timeout_ms(self, milliseconds: Optional[int]) -> None:
        self._caller.config.read_timeout_ms = parse_timeout_ms(milliseconds)

    @property
    def insecure_http_allowed(self) -> bool:
        return self._caller.config.insecure_http_allowed

    @insecure_http_allowed.setter
    def insecure_http_allowed(self, allowed: bool) -> None:
        self._caller.config.insecure_http_allowed = bool(allowed)

    @property
    def all_ssl_certificates_trusted(self) -> bool:
        """Trust every certificate, self-signed included. Default False."""
        return self._caller.config.all_ssl_certificates_trusted

    @all_ssl_certificates_trusted.setter
    def all_ssl_certificates_trusted(self, trust_all: bool) -> None:
        self._caller.config.all_ssl_certificates_trusted = bool(trust_all)

    @property
    def streaming_mode(self) -> bool:
        """
        Send request bodies in chunks instead of buffering them. Many servers
        do not accept chunked uploads.
        """
        return self._caller.config.streaming_mode

    @streaming_mode.setter
    def streaming_mode(self, on: bool) -> None:
        self._caller.config.streaming_mode = bool(on)

    @property
    def service_version(self) -> Optional[str]:
        return self._caller.config.service_version

    @service_version.setter
    def service_version(self, version: Optional[str]) -> None:
        self._caller.config.service_version = version or None

    def set_file_for_next_rpc_response(self, path: Union[str, Path, None]) -> None:
        self._caller.set_file_for_next_rpc_response(path)

    # ---- typed call primitive ------------------------------------------------

    def _call(self, op: Operation, params: ParamsLike, context: tuple[RpcContext, ...]) -> Any:
        record = op.params.coerce(params, method=op.method)
        result = self._caller.call(
            op.method,
            [record.to_rpc_dict()],
            auth_required=True,
            context=context,
        )
        return op.output.from_rpc_dict(single_result(op.method, result), method=op.method)

    # ---- operations ----------------------------------------------------------

    def linkage_2_newick(self, params: ParamsLike, *context: RpcContext) -> NewickOutput:
        """Convert a linkage matrix to a Newick tree string."""
        return self._call(LINKAGE_2_NEWICK, params, context)

    def run_pca(self, params: ParamsLike, *context: RpcContext) -> PCAOutput:
        """Perform PCA on an n-dimensional data matrix."""
        return self._call(RUN_PCA, params, context)

    def run_kmeans2(self, params: ParamsLike, *context: RpcContext) -> KmeansOutput:
        """Wrapper for scipy.cluster.vq.kmeans2."""
        return self._call(RUN_KMEANS2, params, context)

    def run_pdist(self, params: ParamsLike, *context: RpcContext) -> PdistOutput:
        """Wrapper for scipy.spatial.distance.pdist."""
        return self._call(RUN_PDIST, params, context)

    def run_linkage(self, params: ParamsLike, *context: RpcContext) -> LinkageOutput:
        """Wrapper for scipy.cluster.hierarchy.linkage."""
        return self._call(RUN_LINKAGE, params, context)

    def run_fcluster(self, params: ParamsLike, *context: RpcContext) -> FclusterOutput:
        """Wrapper for scipy.cluster.hierarchy.fcluster."""
        return self._call(RUN_FCLUSTER, params, context)

    def run_dendrogram(self, params: ParamsLike, *context: RpcContext) -> DendrogramOutput:
        """Wrapper for scipy.cluster.hierarchy.dendrogram."""
        return self._call(RUN_DENDROGRAM, params, context)

    def build_biclusters(self, params: ParamsLike, *context: RpcContext) -> BuildBiclustersOutput:
        """Build biclusters; the service stores the feature sets as JSON externally."""
        return self._call(BUILD_BICLUSTERS, params, context)

    def enrich_onthology(self, params: ParamsLike, *context: RpcContext) -> EnrichOnthologyOutput:
        """Run GO term enrichment analysis."""
        return self._call(ENRICH_ONTHOLOGY, params, context)

    def calc_onthology_dist(self, params: ParamsLike, *context: RpcContext) -> CalcOnthologyDistOutput:
        """
        Sum of steps each term of a pair takes to reach their nearest common
        ancestor. inf when there is none.
        """
        return self._call(CALC_ONTHOLOGY_DIST, params, context)

    def calc_weighted_onthology_dist(self, params: ParamsLike, *context: RpcContext) -> CalcOnthologyDistOutput:
        """
        As calc_onthology_dist, with edges weighted from the root down: root
        edges weigh 1/2 and each child edge half of its parent's.
        """
        return self._call(CALC_WEIGHTED_ONTHOLOGY_DIST, params, context)

    def status(self, *context: RpcContext) -> Dict[str, Any]:
        """Service health; does not need a credential."""
        result = self._caller.call(STATUS_METHOD, [], auth_required=False, context=context)
        state = single_result(STATUS_METHOD, result)
        if not isinstance(state, Mapping):
            raise SerializationError(message="status is not a JSON object", method=STATUS_METHOD, detail=state)
        return dict(state)


__all__ = ["KbKeUtilClient", "Operation", "OPERATIONS", "STATUS_METHOD", "single_result"]
