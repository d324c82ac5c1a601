"""Tests for MultiSourceProber and pacing."""

import time

import pytest

from gavdash.errors import UpstreamFetchError
from gavdash.models.fields import FieldTuple
from gavdash.modules.fields.pacing import IntervalPacer
from gavdash.modules.fields.prober import MultiSourceProber, SourceDescriptor, SuccessFilter

S1 = SourceDescriptor("s1", "s1/{id}")
S2 = SourceDescriptor("s2", "s2/{id}")
S3 = SourceDescriptor("s3", "s3/{id}")

TUPLE_A = {"label": "A", "value": "1"}
TUPLE_B = {"label": "B", "value": "2"}


class CountingPacer:
    def __init__(self):
        self.waits = 0

    async def wait(self) -> None:
        self.waits += 1


class TestProbeRecord:
    """Tests for source ordering and short-circuiting."""

    @pytest.mark.asyncio
    async def test_stops_at_first_source_with_fields(self, make_client) -> None:
        client = make_client({
            "s1/9": {"resultFields": []},
            "s2/9": {"resultFields": [TUPLE_A]},
            "s3/9": {"resultFields": [TUPLE_A, TUPLE_B]},
        })
        result = await MultiSourceProber(client).probe_record(9, [S1, S2, S3])

        assert result.tuples == [FieldTuple("A", None, "1")]
        assert result.source == "s2"
        assert [a.endpoint for a in result.attempts] == ["s1 s1/9", "s2 s2/9"]
        assert [a.succeeded for a in result.attempts] == [False, True]
        assert result.attempts[1].item_count == 1
        assert "s3/9" not in client.paths_called

    @pytest.mark.asyncio
    async def test_failed_fetch_recorded_and_next_source_tried(self, make_client) -> None:
        client = make_client({
            "s1/9": UpstreamFetchError("upstream request timed out after 20s", url="https://api.test/v1/s1/9"),
            "s2/9": {"data": {"resultData": {"101": "yes"}}},
        })
        result = await MultiSourceProber(client).probe_record("9", [S1, S2])

        first, second = result.attempts
        assert first.succeeded is False
        assert first.error == "upstream request timed out after 20s"
        assert second.succeeded is True
        assert result.tuples == [FieldTuple(None, 101, "yes")]

    @pytest.mark.asyncio
    async def test_http_error_detail_includes_url(self, make_client) -> None:
        result = await MultiSourceProber(make_client({})).probe_record(1, [S1])
        assert result.tuples == []
        assert result.source is None
        assert result.attempts[0].error == "upstream returned HTTP 404 (https://api.test/v1/s1/1)"

    @pytest.mark.asyncio
    async def test_candidate_paths_tried_in_order(self, make_client) -> None:
        source = SourceDescriptor("detail", "leads/{id}", paths=("resultFields", "leads.0.resultData"))
        client = make_client({"leads/3": {"leads": [{"resultData": [{"id": 4, "value": "v"}]}]}})
        result = await MultiSourceProber(client).probe_record(3, [source])
        assert result.tuples == [FieldTuple(None, 4, "v")]


class TestSuccessFilter:
    """Tests for result filtering by status vocabulary."""

    RESULTS_BODY = {
        "results": [
            {"status": "Sale", "resultData": [{"id": 1, "value": "a"}]},
            {"status": "noanswer", "resultData": [{"id": 2, "value": "b"}]},
            {"outcome": {"name": "WON"}, "resultData": [{"id": 3, "value": "c"}]},
        ]
    }

    def test_matches_case_insensitively(self) -> None:
        flt = SuccessFilter(["sale", " Won "])
        assert flt.matches({"status": "SALE"})
        assert flt.matches({"disposition": {"label": "won"}})
        assert not flt.matches({"status": "sales call"})
        assert not flt.matches({})

    @pytest.mark.asyncio
    async def test_filtered_results_skipped_but_counted(self, make_client) -> None:
        source = SourceDescriptor("lead-results", "leads/{id}/results", each_result=True)
        client = make_client({"leads/5/results": self.RESULTS_BODY})
        prober = MultiSourceProber(client, success_filter=SuccessFilter(["sale", "won"]))

        result = await prober.probe_record(5, [source])

        assert result.tuples == [FieldTuple(None, 1, "a"), FieldTuple(None, 3, "c")]
        assert result.attempts[0].filtered == 1

    @pytest.mark.asyncio
    async def test_no_filter_keeps_every_result(self, make_client) -> None:
        source = SourceDescriptor("lead-results", "leads/{id}/results", each_result=True)
        client = make_client({"leads/5/results": self.RESULTS_BODY})

        result = await MultiSourceProber(client).probe_record(5, [source])

        assert [t.id for t in result.tuples] == [1, 2, 3]
        assert result.attempts[0].filtered == 0

    @pytest.mark.asyncio
    async def test_single_result_object_body(self, make_client) -> None:
        source = SourceDescriptor("result", "results/{id}", each_result=True)
        client = make_client({"results/8": {"status": "sale", "resultFields": [TUPLE_A]}})
        prober = MultiSourceProber(client, success_filter=SuccessFilter(["sale"]))

        result = await prober.probe_record(8, [source])
        assert result.tuples == [FieldTuple("A", None, "1")]

    @pytest.mark.asyncio
    async def test_whole_body_source_filtered_by_its_own_status(self, make_client) -> None:
        client = make_client({
            "leads/5": {"resultData": {"101": "x"}},
            "leads/6": {"status": "sale", "resultData": {"102": "y"}},
        })
        detail = SourceDescriptor("lead-detail", "leads/{id}")
        prober = MultiSourceProber(client, success_filter=SuccessFilter(["sale"]))

        skipped = await prober.probe_record(5, [detail])
        kept = await prober.probe_record(6, [detail])

        assert skipped.tuples == []
        assert skipped.attempts[0].filtered == 1
        assert skipped.attempts[0].succeeded is False
        assert kept.tuples == [FieldTuple(None, 102, "y")]


class TestSourceDescriptor:
    """Tests for path/param templating."""

    def test_build_substitutes_record_id(self) -> None:
        source = SourceDescriptor("x", "leads/{id}/results", params={"filters": '{"leadId":{"$eq":{id}}}', "page": 1})
        assert source.build(42) == ("leads/42/results", {"filters": '{"leadId":{"$eq":42}}', "page": 1})

    def test_build_without_params(self) -> None:
        assert SourceDescriptor("x", "leads/{id}").build("7") == ("leads/7", None)


class TestScan:
    """Tests for sequential, paced scanning."""

    @pytest.mark.asyncio
    async def test_scan_probes_each_record_in_order(self, make_client) -> None:
        client = make_client({"s1/1": {"resultFields": [TUPLE_A]}, "s1/2": {"resultFields": [TUPLE_B]}})
        pacer = CountingPacer()
        results = await MultiSourceProber(client, pacer=pacer).scan([1, 2, 3], [S1])

        assert [r.record_id for r in results] == ["1", "2", "3"]
        assert client.paths_called == ["s1/1", "s1/2", "s1/3"]
        assert pacer.waits == 3
        assert results[2].tuples == []

    @pytest.mark.asyncio
    async def test_interval_pacer_spaces_calls(self) -> None:
        pacer = IntervalPacer(0.05)
        start = time.monotonic()
        await pacer.wait()
        first = time.monotonic() - start
        await pacer.wait()
        await pacer.wait()
        total = time.monotonic() - start

        assert first < 0.05
        assert total >= 0.09
