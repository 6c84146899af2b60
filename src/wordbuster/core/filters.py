"""Result filters.

Every predicate is a pure function of the outcome, the filter policy and
the optional baseline signature. Failures are never matches.
"""

from __future__ import annotations

from typing import Optional

from wordbuster.core.models import BaselineSignature, FilterPolicy, ProbeOutcome, Success

# Status codes that mean a storage bucket exists
BUCKET_PUBLIC = 200
BUCKET_PRIVATE = 403


def matches_baseline_response(outcome: Success, baseline: Optional[BaselineSignature]) -> bool:
    """True if the (status, size) pair was seen on a synthetic candidate."""
    if baseline is None or not baseline.responses:
        return False
    return (outcome.status_code, outcome.byte_size) in baseline.responses


def dir_filter(
    outcome: ProbeOutcome,
    policy: FilterPolicy,
    baseline: Optional[BaselineSignature] = None,
) -> bool:
    """Directory mode: allowed status, not denied, size not excluded, not wildcard noise."""
    if not isinstance(outcome, Success) or outcome.status_code is None:
        return False

    status = outcome.status_code
    if policy.allow_status and status not in policy.allow_status:
        return False
    if status in policy.deny_status:
        return False
    if outcome.byte_size in policy.deny_sizes:
        return False

    return not matches_baseline_response(outcome, baseline)


def fuzz_filter(
    outcome: ProbeOutcome,
    policy: FilterPolicy,
    baseline: Optional[BaselineSignature] = None,
) -> bool:
    """Fuzz mode: status and size not excluded, body free of the filter string."""
    if not isinstance(outcome, Success) or outcome.status_code is None:
        return False

    if outcome.status_code in policy.deny_status:
        return False
    if outcome.byte_size in policy.deny_sizes:
        return False
    if policy.exclude_text and outcome.extra_text and policy.exclude_text in outcome.extra_text:
        return False

    return not matches_baseline_response(outcome, baseline)


def vhost_filter(
    outcome: ProbeOutcome,
    policy: FilterPolicy,
    baseline: Optional[BaselineSignature] = None,
) -> bool:
    """Vhost mode: size differs from the baseline page, not excluded, not a 400."""
    if not isinstance(outcome, Success) or outcome.status_code is None:
        return False

    if baseline is not None and baseline.size is not None and outcome.byte_size == baseline.size:
        return False
    if outcome.byte_size in policy.deny_sizes:
        return False

    return outcome.status_code != 400


def dns_filter(
    outcome: ProbeOutcome,
    policy: FilterPolicy,
    baseline: Optional[BaselineSignature] = None,
) -> bool:
    """DNS mode: resolved addresses are not a subset of the wildcard addresses."""
    if not isinstance(outcome, Success):
        return False

    if baseline is not None and baseline.addresses:
        return not outcome.resolved_addresses <= baseline.addresses

    return True


def bucket_filter(
    outcome: ProbeOutcome,
    policy: FilterPolicy,
    baseline: Optional[BaselineSignature] = None,
) -> bool:
    """Bucket mode: the bucket answered as public or private."""
    if not isinstance(outcome, Success):
        return False
    return outcome.status_code in (BUCKET_PUBLIC, BUCKET_PRIVATE)


def tftp_filter(
    outcome: ProbeOutcome,
    policy: FilterPolicy,
    baseline: Optional[BaselineSignature] = None,
) -> bool:
    """TFTP mode: the server answered the read request with data or an option ack."""
    return isinstance(outcome, Success)
