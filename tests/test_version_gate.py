"""plotly.js 版本门控测试。"""

from __future__ import annotations

import pytest

from kaleido_scope.scope.version_gate import (
    CapabilityProfile,
    resolve_profile,
    version_gte,
    version_lt,
)


@pytest.mark.parametrize(
    ("version", "expected"),
    [
        ("1.10.9", CapabilityProfile.UNSUPPORTED),
        ("1.11.0", CapabilityProfile.LEGACY_MOUNT),
        ("1.29.0", CapabilityProfile.LEGACY_MOUNT),
        ("1.30.0", CapabilityProfile.DIRECT),
        ("1.52.3", CapabilityProfile.DIRECT),
        ("1.53.0", CapabilityProfile.FULL_DATA),
        ("2.0.0", CapabilityProfile.FULL_DATA),
        ("2.35.2", CapabilityProfile.FULL_DATA),
    ],
)
def test_resolve_profile(version: str, expected: CapabilityProfile) -> None:
    assert resolve_profile(version) is expected


def test_unparseable_version_is_unsupported() -> None:
    assert resolve_profile("not-a-version") is CapabilityProfile.UNSUPPORTED
    assert resolve_profile(None) is CapabilityProfile.UNSUPPORTED  # type: ignore[arg-type]


def test_version_comparisons_are_inclusive_and_strict() -> None:
    assert version_gte("1.53.0", "1.53.0") is True
    assert version_lt("1.53.0", "1.53.0") is False
    assert version_lt("1.9.0", "1.11.0") is True


def test_profile_capabilities() -> None:
    assert CapabilityProfile.UNSUPPORTED.can_render is False
    assert CapabilityProfile.LEGACY_MOUNT.mounts_element is True
    assert CapabilityProfile.DIRECT.mounts_element is False
    assert CapabilityProfile.DIRECT.supports_full_json is False
    assert CapabilityProfile.FULL_DATA.supports_full_json is True
