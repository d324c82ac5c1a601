"""
Multi-Source Prober: finds the custom result fields of a lead by trying several
upstream sub-resources in priority order.

No single endpoint returns result fields reliably across Adversus accounts, so
each record walks the source list until one yields fields. Later sources are
never called once one has answered, and every source tried leaves a
ProbeAttempt in the diagnostic trail.
"""

import logging
from dataclasses import dataclass, field

from gavdash.errors import UpstreamFetchError
from gavdash.models.fields import FieldTuple, ProbeAttempt
from gavdash.modules.fields.normalizer import get_path, normalize
from gavdash.modules.fields.pacing import NoDelayPacer
from gavdash.modules.leads.fetcher import resolve_envelope

logger = logging.getLogger(__name__)

RESULT_FIELD_PATHS = (
    "resultFields",
    "resultData",
    "data.resultFields",
    "data.resultData",
    "leads.0.resultFields",
    "leads.0.resultData",
)

STATUS_KEYS = ("status", "outcome", "disposition", "resultStatus", "result")


@dataclass(frozen=True)
class SourceDescriptor:
    """One upstream sub-resource to try. "{id}" in path/params is the record id."""
    name: str
    path: str
    params: dict | None = None
    paths: tuple[str, ...] = RESULT_FIELD_PATHS
    each_result: bool = False

    def build(self, record_id) -> tuple[str, dict | None]:
        rid = str(record_id)
        path = self.path.replace("{id}", rid)
        if not self.params:
            return path, None
        params = {
            key: value.replace("{id}", rid) if isinstance(value, str) else value
            for key, value in self.params.items()
        }
        return path, params


DEFAULT_RESULT_SOURCES = (
    SourceDescriptor("lead-results", "leads/{id}/results", each_result=True),
    SourceDescriptor(
        "results-by-lead",
        "results",
        params={"filters": '{"leadId":{"$eq":{id}}}'},
        each_result=True,
    ),
    SourceDescriptor("lead-detail", "leads/{id}"),
)


class SuccessFilter:
    """Case-insensitive exact match of a result's status against a word list."""

    def __init__(self, terms, keys: tuple[str, ...] = STATUS_KEYS):
        self.terms = frozenset(t.strip().lower() for t in terms if t and t.strip())
        self.keys = keys

    def matches(self, result: dict) -> bool:
        for key in self.keys:
            raw = result.get(key)
            if isinstance(raw, dict):
                raw = raw.get("name") or raw.get("label") or raw.get("value")
            if isinstance(raw, str) and raw.strip().lower() in self.terms:
                return True
        return False


@dataclass
class ProbeResult:
    record_id: str
    tuples: list[FieldTuple] = field(default_factory=list)
    attempts: list[ProbeAttempt] = field(default_factory=list)
    source: str | None = None


class MultiSourceProber:
    def __init__(self, client, pacer=None, success_filter: SuccessFilter | None = None):
        self.client = client
        self.pacer = pacer or NoDelayPacer()
        self.success_filter = success_filter

    def _result_objects(self, body, source: SourceDescriptor) -> list:
        if isinstance(body, dict) and any(get_path(body, p) is not None for p in source.paths):
            return [body]
        return [item for item in resolve_envelope(body) if isinstance(item, dict)]

    def extract(self, body, source: SourceDescriptor) -> tuple[list[FieldTuple], int]:
        """Normalize a source's response. Returns (tuples, results filtered out).

        With a success filter, a source without per-result objects is filtered
        as a whole, so a lead body only counts when its own status matches.
        """
        candidates = self._result_objects(body, source) if source.each_result else [body]

        tuples: list[FieldTuple] = []
        filtered = 0
        for candidate in candidates:
            if self.success_filter and not self.success_filter.matches(candidate):
                filtered += 1
                continue
            for path in source.paths:
                found = normalize(get_path(candidate, path))
                if found:
                    tuples.extend(found)
                    break
        return tuples, filtered

    async def probe_record(self, record_id, sources) -> ProbeResult:
        result = ProbeResult(record_id=str(record_id))

        for source in sources:
            path, params = source.build(record_id)
            endpoint = f"{source.name} {path}"
            try:
                response = await self.client.get_json(path, params=params)
            except UpstreamFetchError as e:
                error = e.message if e.status is None else f"{e.message} ({e.url})"
                result.attempts.append(
                    ProbeAttempt(record_id=result.record_id, endpoint=endpoint, succeeded=False, error=error)
                )
                continue

            tuples, filtered = self.extract(response.body, source)
            result.attempts.append(ProbeAttempt(
                record_id=result.record_id,
                endpoint=endpoint,
                succeeded=bool(tuples),
                item_count=len(tuples),
                filtered=filtered,
            ))
            if tuples:
                result.tuples = tuples
                result.source = source.name
                break

        logger.debug(
            "Probed record %s: %d fields from %s after %d attempts",
            result.record_id, len(result.tuples), result.source, len(result.attempts),
        )
        return result

    async def scan(self, record_ids, sources=DEFAULT_RESULT_SOURCES) -> list[ProbeResult]:
        """Probe records one after another, pacing between them."""
        results = []
        for record_id in record_ids:
            await self.pacer.wait()
            results.append(await self.probe_record(record_id, sources))
        return results
