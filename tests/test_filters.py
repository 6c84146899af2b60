"""Tests for result filters."""

import pytest

from wordbuster.core.filters import (
    bucket_filter,
    dir_filter,
    dns_filter,
    fuzz_filter,
    tftp_filter,
    vhost_filter,
)
from wordbuster.core.models import BaselineSignature, Failure, FilterPolicy, Success
from wordbuster.modes.dir import DEFAULT_STATUS_CODES

DIR_POLICY = FilterPolicy(allow_status=DEFAULT_STATUS_CODES)


def http(status, size=10, body=None):
    return Success(status_code=status, byte_size=size, extra_text=body)


class TestDirFilter:
    """Tests for directory filtering."""

    @pytest.mark.parametrize("status", [200, 204, 301, 302, 307, 308, 401, 403, 405])
    def test_default_positive_codes(self, status):
        """Default allow list matches."""
        assert dir_filter(http(status), DIR_POLICY)

    @pytest.mark.parametrize("status", [400, 404, 500])
    def test_other_codes_rejected(self, status):
        """Anything outside the allow list is dropped."""
        assert not dir_filter(http(status), DIR_POLICY)

    def test_deny_list_wins(self):
        """A denied code never matches even when allowed."""
        policy = FilterPolicy(allow_status=DEFAULT_STATUS_CODES, deny_status=frozenset({403}))
        assert not dir_filter(http(403), policy)

    def test_empty_allow_list_allows_everything(self):
        """No allow list means every status passes."""
        assert dir_filter(http(418), FilterPolicy())

    def test_excluded_size(self):
        """Responses of an excluded size are dropped."""
        policy = FilterPolicy(allow_status=DEFAULT_STATUS_CODES, deny_sizes=frozenset({10}))
        assert not dir_filter(http(200, size=10), policy)
        assert dir_filter(http(200, size=11), policy)

    def test_wildcard_signature_suppressed(self):
        """(status, size) pairs seen on synthetic paths are noise."""
        baseline = BaselineSignature(responses=frozenset({(200, 1234)}))
        assert not dir_filter(http(200, 1234), DIR_POLICY, baseline)
        assert dir_filter(http(200, 99), DIR_POLICY, baseline)

    def test_failure_never_matches(self):
        """Failures are not matches."""
        assert not dir_filter(Failure(reason="timeout"), DIR_POLICY)


class TestFuzzFilter:
    """Tests for fuzz filtering."""

    def test_everything_passes_by_default(self):
        """No exclusions: every response is reported."""
        assert fuzz_filter(http(404), FilterPolicy())

    def test_excluded_status_and_size(self):
        """Excluded statuses and sizes are dropped."""
        policy = FilterPolicy(deny_status=frozenset({404}), deny_sizes=frozenset({0}))
        assert not fuzz_filter(http(404, 5), policy)
        assert not fuzz_filter(http(200, 0), policy)
        assert fuzz_filter(http(200, 5), policy)

    def test_filter_string(self):
        """Bodies containing the filter string are dropped."""
        policy = FilterPolicy(exclude_text="Invalid")
        assert not fuzz_filter(http(200, body="Invalid user"), policy)
        assert fuzz_filter(http(200, body="Welcome"), policy)


class TestVhostFilter:
    """Tests for vhost filtering."""

    def test_same_size_as_baseline_rejected(self):
        """A response identical in size to the default host is not interesting."""
        baseline = BaselineSignature(size=500)
        assert not vhost_filter(http(200, 500), FilterPolicy(), baseline)
        assert vhost_filter(http(200, 501), FilterPolicy(), baseline)

    def test_bad_request_rejected(self):
        """400 means the server refused the Host value."""
        assert not vhost_filter(http(400, 1), FilterPolicy(), BaselineSignature(size=500))

    def test_excluded_size(self):
        """--exclude-length also applies to vhosts."""
        policy = FilterPolicy(deny_sizes=frozenset({42}))
        assert not vhost_filter(http(200, 42), policy, BaselineSignature(size=500))


class TestDnsFilter:
    """Tests for DNS filtering."""

    def test_any_resolution_without_wildcard(self):
        """Every resolving name matches when there is no wildcard."""
        assert dns_filter(Success(resolved_addresses=frozenset({"1.2.3.4"})), FilterPolicy())

    def test_wildcard_subset_rejected(self):
        """Addresses that are a subset of the wildcard set are noise."""
        baseline = BaselineSignature(addresses=frozenset({"1.2.3.4", "1.2.3.5"}))
        assert not dns_filter(Success(resolved_addresses=frozenset({"1.2.3.4"})), FilterPolicy(), baseline)

    def test_new_address_accepted(self):
        """Any address outside the wildcard set is a real finding."""
        baseline = BaselineSignature(addresses=frozenset({"1.2.3.4"}))
        outcome = Success(resolved_addresses=frozenset({"1.2.3.4", "9.9.9.9"}))
        assert dns_filter(outcome, FilterPolicy(), baseline)

    def test_cname_only_under_wildcard_rejected(self):
        """An empty address set is a subset of any wildcard set."""
        baseline = BaselineSignature(addresses=frozenset({"1.2.3.4"}))
        assert not dns_filter(Success(cnames=("x.cdn.net",)), FilterPolicy(), baseline)


class TestBucketAndTftpFilters:
    """Tests for bucket and TFTP filtering."""

    @pytest.mark.parametrize("status,expected", [(200, True), (403, True), (404, False), (301, False)])
    def test_bucket_status(self, status, expected):
        """Only public (200) and private (403) buckets exist."""
        assert bucket_filter(http(status), FilterPolicy()) is expected

    def test_tftp_success_matches(self):
        """A DATA or OACK reply is a match."""
        assert tftp_filter(Success(extra_text="data"), FilterPolicy())
        assert not tftp_filter(Failure(reason="File not found", absent=True), FilterPolicy())


class TestFilterPurity:
    """Filters are pure functions."""

    def test_repeated_calls_agree(self):
        """The same inputs always give the same answer."""
        outcome = http(200, 77)
        baseline = BaselineSignature(responses=frozenset({(200, 77)}))
        results = {dir_filter(outcome, DIR_POLICY, baseline) for _ in range(5)}
        assert results == {False}

    def test_merging_a_signature_twice_is_idempotent(self):
        """Applying the same baseline twice changes nothing."""
        baseline = BaselineSignature(responses=frozenset({(200, 77)}), addresses=frozenset({"1.1.1.1"}))
        merged = baseline.merge(baseline)
        assert merged == baseline
        for outcome in (http(200, 77), http(200, 78)):
            assert dir_filter(outcome, DIR_POLICY, merged) == dir_filter(outcome, DIR_POLICY, baseline)
