"""Tests for candidate generation of every mode."""

import pytest

from wordbuster.core.config import BucketSettings, DnsSettings, HttpSettings, TftpSettings
from wordbuster.core.exceptions import ConfigurationError, InvalidTargetError, MissingPlaceholderError
from wordbuster.modes import MODES, BucketMode, DirMode, DnsMode, FuzzMode, TftpMode, VhostMode
from wordbuster.modes.dir import normalize_extensions


def values(mode, word):
    return [c.value for c in mode.generate(word)]


class TestDirGeneration:
    """Tests for directory candidates."""

    def test_word_without_extensions(self):
        """One word, no extensions: one path."""
        mode = DirMode("http://t/", HttpSettings())
        assert values(mode, "admin") == ["/admin"]

    def test_extensions_in_order(self):
        """Bare path first, then one per extension in order."""
        mode = DirMode("http://t", HttpSettings(), extensions=["php", ".txt"])
        assert values(mode, "admin") == ["/admin", "/admin.php", "/admin.txt"]

    def test_leading_and_trailing_slashes_normalized(self):
        """Leading slashes are ensured, trailing slashes stripped."""
        mode = DirMode("http://t/base/", HttpSettings())
        assert values(mode, "/admin/") == ["/admin"]
        assert mode.base_url == "http://t/base"

    def test_add_slash_twins_every_variant(self):
        """With add_slash every variant gets a slash twin."""
        mode = DirMode("http://t", HttpSettings(), extensions=["php"], add_slash=True)
        assert values(mode, "a") == ["/a", "/a/", "/a.php", "/a.php/"]

    @pytest.mark.parametrize("extensions,add_slash", [([], False), (["php", "txt"], False), (["php"], True)])
    def test_count_matches_closed_form(self, extensions, add_slash):
        """candidate_count equals the number of generated candidates."""
        mode = DirMode("http://t", HttpSettings(), extensions=extensions, add_slash=add_slash)
        words = ["a", "b", "c", "d"]
        generated = sum(len(values(mode, w)) for w in words)
        expected = len(words) * (len(extensions) + 1) * (2 if add_slash else 1)
        assert generated == expected == mode.candidate_count(len(words))

    def test_generation_is_deterministic(self):
        """Same word, same candidates, same order."""
        mode = DirMode("http://t", HttpSettings(), extensions=["php", "bak"])
        assert values(mode, "x") == values(mode, "x")

    def test_normalize_extensions(self):
        """Dots are added and blanks dropped."""
        assert normalize_extensions(["php", ".txt", " ", "  html "]) == [".php", ".txt", ".html"]

    def test_backup_follow_ups(self):
        """Each matched file gets one candidate per backup suffix."""
        mode = DirMode("http://t", HttpSettings(), discover_backup=True)
        matched = list(mode.generate("config.php"))
        extra = [c.value for c in mode.follow_up(matched)]
        assert "/config.php.bak" in extra
        assert "/config.php~" in extra
        assert len(extra) == 9

    def test_backup_follow_ups_disabled(self):
        """No follow-ups unless requested."""
        mode = DirMode("http://t", HttpSettings())
        assert list(mode.follow_up(list(mode.generate("a")))) == []


class TestDnsGeneration:
    """Tests for subdomain candidates."""

    def test_word_dot_domain(self):
        """Candidates are word.domain."""
        mode = DnsMode("example.com", DnsSettings())
        assert values(mode, "www") == ["www.example.com"]

    def test_domain_dots_stripped(self):
        """Leading and trailing dots on the domain are ignored."""
        mode = DnsMode(".example.com.", DnsSettings())
        assert values(mode, "api") == ["api.example.com"]

    def test_all_dot_word_still_yields_one_name(self):
        """Every word produces exactly one candidate, even when it is only dots."""
        mode = DnsMode("example.com", DnsSettings())
        assert values(mode, ".") == ["..example.com"]
        assert len(values(mode, "...")) == 1
        assert mode.candidate_count(2) == len(values(mode, ".") + values(mode, "..."))

    def test_invalid_resolver_rejected(self):
        """A resolver that is not an IP literal is a configuration error."""
        with pytest.raises(InvalidTargetError):
            DnsMode("example.com", DnsSettings(resolver="not-an-ip"))


class TestVhostGeneration:
    """Tests for virtual host candidates."""

    def test_plain_word(self):
        """Without append_domain the word is the host."""
        mode = VhostMode("http://10.0.0.1", HttpSettings())
        assert values(mode, "admin") == ["admin"]

    def test_append_domain(self):
        """append_domain produces word.domain."""
        mode = VhostMode("http://10.0.0.1", HttpSettings(), domain="example.com", append_domain=True)
        assert values(mode, "admin") == ["admin.example.com"]

    def test_append_domain_requires_domain(self):
        """Asking to append a missing domain is a configuration error."""
        with pytest.raises(ConfigurationError):
            VhostMode("http://10.0.0.1", HttpSettings(), append_domain=True)


class TestFuzzGeneration:
    """Tests for fuzz payloads and placeholder validation."""

    def test_payload_is_word(self):
        """Each word is one payload."""
        mode = FuzzMode("http://t/?q=FUZZ", HttpSettings())
        assert values(mode, "1' or '1'='1") == ["1' or '1'='1"]

    def test_missing_placeholder_rejected(self):
        """A template without FUZZ anywhere is rejected before probing."""
        with pytest.raises(MissingPlaceholderError):
            FuzzMode("http://t/?q=1", HttpSettings())

    @pytest.mark.parametrize(
        "http,data",
        [
            (HttpSettings(headers=["X-Test: FUZZ"]), None),
            (HttpSettings(cookies="session=FUZZ"), None),
            (HttpSettings(method="POST"), "user=FUZZ"),
        ],
    )
    def test_placeholder_outside_url_accepted(self, http, data):
        """FUZZ in a header, cookie or body is enough."""
        FuzzMode("http://t/login", http, data=data)

    def test_build_request_substitutes_everywhere(self):
        """URL, headers, cookies and body are all substituted."""
        http = HttpSettings(method="POST", headers=["X-Id: FUZZ"], cookies="s=FUZZ")
        mode = FuzzMode("http://t/FUZZ", http, data="a=FUZZ")

        url, headers, body = mode.build_request("42")

        assert url == "http://t/42"
        assert headers["X-Id"] == "42"
        assert headers["Cookie"] == "s=42"
        assert headers["Content-Type"] == "application/x-www-form-urlencoded"
        assert body == "a=42"

    def test_get_with_body_has_no_form_content_type(self):
        """Only POST bodies are declared as form data."""
        mode = FuzzMode("http://t/", HttpSettings(), data="a=FUZZ")
        _, headers, _ = mode.build_request("x")
        assert "Content-Type" not in headers


class TestBucketGeneration:
    """Tests for bucket candidates and URL shapes."""

    def test_s3_urls(self):
        """Virtual-hosted style first, then path style."""
        mode = BucketMode("s3", BucketSettings())
        candidate = next(mode.generate("acme-backups"))
        assert mode.urls_for(candidate) == [
            "https://acme-backups.s3.amazonaws.com",
            "https://s3.amazonaws.com/acme-backups",
        ]

    def test_gcs_urls(self):
        """GCS uses the storage.googleapis.com shapes."""
        mode = BucketMode("gcs", BucketSettings())
        candidate = next(mode.generate("acme"))
        assert mode.urls_for(candidate) == [
            "https://acme.storage.googleapis.com",
            "https://storage.googleapis.com/acme",
        ]

    def test_unknown_provider(self):
        """Only s3 and gcs are supported."""
        with pytest.raises(ValueError):
            BucketMode("azure", BucketSettings())


class TestTftpGeneration:
    """Tests for TFTP candidates."""

    def test_filename_is_word(self):
        """Each word is requested verbatim."""
        mode = TftpMode("10.0.0.1", TftpSettings())
        assert values(mode, "pxelinux.cfg/default") == ["pxelinux.cfg/default"]

    def test_concurrency_cap(self):
        """TFTP caps concurrency regardless of thread count."""
        mode = TftpMode("10.0.0.1", TftpSettings(max_concurrency=50))
        assert mode.max_concurrency == 50

    def test_target_includes_default_port(self):
        """The default TFTP port is 69."""
        assert TftpMode("10.0.0.1", TftpSettings()).target == "10.0.0.1:69"


class TestRegistry:
    """Tests for the closed set of modes."""

    def test_all_modes_registered(self):
        """Every mode is registered under its name."""
        assert set(MODES) == {"dir", "dns", "vhost", "fuzz", "bucket", "tftp"}

    def test_only_dir_and_dns_detect_wildcards(self):
        """Wildcard detection applies to dir and dns."""
        assert {name for name, cls in MODES.items() if cls.supports_wildcard} == {"dir", "dns"}
