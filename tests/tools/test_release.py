"""
Unit tests for release manifests and version resolution.
"""

import pytest
import responses

from binkit.core.exceptions import InvalidVersionError, NotFoundError, TransportError
from binkit.tools.release import (
    DownloadVersion,
    GitHubRelease,
    VersionResolver,
    fetch_releases,
    get_release,
    is_concrete_version,
    normalize_version,
    validate_version_spec,
)

RELEASES_URL = "https://raw.githubusercontent.com/example/releases.json"

MANIFEST = {
    "latest": {"id": 3, "tag_name": "v1.2.3", "html_url": "https://github.com/x/y/releases/v1.2.3"},
    "v1.2.3": {"id": 3, "tag_name": "v1.2.3", "html_url": "https://github.com/x/y/releases/v1.2.3"},
    "v1.0.0": {"id": 1, "tag_name": "v1.0.0", "assets": [{"name": "y_1.0.0_linux_amd64.tar.gz"}]},
    "edge": {"id": 4, "tag_name": "abcdef1"},
    "broken": {"id": 5, "tag_name": "not-a-version"},
    "stable": {"id": 6, "tag_name": "v1.2"},
}


class TestNormalizeVersion:
    """Tests for normalize_version()."""

    @pytest.mark.parametrize(
        "tag,expected",
        [("v0.4.1", "0.4.1"), ("0.4.1", "0.4.1"), ("vv1.0.0v", "1.0.0"), (" v2.0.0 ", "2.0.0")],
    )
    def test_normalize(self, tag, expected):
        assert normalize_version(tag) == expected

    def test_v_prefix_equivalence(self):
        """Test 'vX.Y.Z' and 'X.Y.Z' yield the same version spec."""
        assert normalize_version("v1.2.3") == normalize_version("1.2.3")


class TestVersionPredicates:
    """Tests for version classification."""

    @pytest.mark.parametrize("value", ["0.7.0", "v0.7.0", "1.2.3-rc.1"])
    def test_concrete(self, value):
        assert is_concrete_version(value)

    @pytest.mark.parametrize("value", ["latest", "edge", "1.2", "abcdef1"])
    def test_not_concrete(self, value):
        assert not is_concrete_version(value)

    @pytest.mark.parametrize(
        "value", ["1.2.3", "1.2.3-rc.1+build.5", "1.2", "01.2.3", "2.0.0.post1", "abcdef1", "0" * 40]
    )
    def test_valid_spec(self, value):
        assert validate_version_spec(value) == value

    @pytest.mark.parametrize("value", ["latest", "not-a-version", "abcdef", "1.2.3 beta"])
    def test_invalid_spec(self, value):
        with pytest.raises(InvalidVersionError, match="Invalid undock version"):
            validate_version_spec(value, "undock")


class TestGitHubRelease:
    """Tests for GitHubRelease.from_dict()."""

    def test_ignores_unknown_keys(self):
        release = GitHubRelease.from_dict({"tag_name": "v1.0.0", "id": 1, "draft": False})
        assert release == GitHubRelease(tag_name="v1.0.0", id=1)

    def test_missing_tag(self):
        with pytest.raises(ValueError):
            GitHubRelease.from_dict({"id": 1})


class TestFetchReleases:
    """Tests for manifest fetching."""

    @responses.activate
    def test_fetch(self):
        responses.add(responses.GET, RELEASES_URL, json=MANIFEST)

        releases = fetch_releases(RELEASES_URL)

        assert releases["latest"].tag_name == "v1.2.3"
        assert releases["v1.0.0"].assets == [{"name": "y_1.0.0_linux_amd64.tar.gz"}]

    @responses.activate
    def test_not_an_object(self):
        responses.add(responses.GET, RELEASES_URL, json=["v1.0.0"])

        with pytest.raises(TransportError, match="not a JSON object"):
            fetch_releases(RELEASES_URL)

    @responses.activate
    def test_entry_without_tag(self):
        responses.add(responses.GET, RELEASES_URL, json={"latest": {"id": 1}})

        with pytest.raises(TransportError, match="Invalid release 'latest'"):
            fetch_releases(RELEASES_URL)

    @responses.activate
    def test_get_release_not_found(self):
        """Test missing manifest entry raises NotFoundError naming the URL."""
        responses.add(responses.GET, RELEASES_URL, json=MANIFEST)

        with pytest.raises(NotFoundError) as exc_info:
            get_release(DownloadVersion("v9.9.9", "", RELEASES_URL), tool="undock")

        assert "v9.9.9" in str(exc_info.value)
        assert RELEASES_URL in str(exc_info.value)


class TestVersionResolver:
    """Tests for VersionResolver."""

    @responses.activate
    def test_latest(self, binkit_logs):
        """Test symbolic version resolves through the manifest."""
        responses.add(responses.GET, RELEASES_URL, json=MANIFEST)

        assert VersionResolver("undock", RELEASES_URL).resolve("latest") == "1.2.3"
        assert "Use 1.2.3 version spec cache key for v1.2.3" in binkit_logs.text

    @responses.activate
    def test_concrete_version_skips_manifest(self):
        """Test concrete versions are resolved without network access."""
        resolver = VersionResolver("undock", RELEASES_URL)

        assert resolver.resolve("2.0.0") == "2.0.0"
        assert resolver.resolve("v2.0.0") == "2.0.0"
        assert len(responses.calls) == 0

    @responses.activate
    def test_commit_sha_release(self):
        responses.add(responses.GET, RELEASES_URL, json=MANIFEST)

        assert VersionResolver("undock", RELEASES_URL).resolve("edge") == "abcdef1"

    @responses.activate
    def test_manifest_404(self):
        """Test manifest fetch failure raises TransportError."""
        responses.add(responses.GET, RELEASES_URL, body="Not Found", status=404)

        with pytest.raises(TransportError) as exc_info:
            VersionResolver("undock", RELEASES_URL).resolve("latest")

        assert "404" in str(exc_info.value)

    @responses.activate
    def test_unknown_name(self):
        responses.add(responses.GET, RELEASES_URL, json=MANIFEST)

        with pytest.raises(NotFoundError):
            VersionResolver("undock", RELEASES_URL).resolve("nightly")

    @responses.activate
    def test_two_component_tag(self):
        """Test tags accepted by PEP 440 but not strict semver resolve."""
        responses.add(responses.GET, RELEASES_URL, json=MANIFEST)

        assert VersionResolver("undock", RELEASES_URL).resolve("stable") == "1.2"

    @responses.activate
    def test_invalid_tag(self):
        """Test a manifest tag that is not a version is rejected."""
        responses.add(responses.GET, RELEASES_URL, json=MANIFEST)

        with pytest.raises(InvalidVersionError):
            VersionResolver("undock", RELEASES_URL).resolve("broken")

    @pytest.mark.parametrize("value", ["", "   "])
    def test_empty(self, value):
        with pytest.raises(InvalidVersionError):
            VersionResolver("undock", RELEASES_URL).resolve(value)
