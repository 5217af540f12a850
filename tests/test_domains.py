"""Tests for bbcreds.domains -- URI requirements and domain specifications."""

from __future__ import annotations

import pytest

from bbcreds.domains import (
    GLOBAL_DOMAIN,
    Domain,
    HostnamePortRequirement,
    HostnamePortSpecification,
    HostnameRequirement,
    HostnameSpecification,
    PathRequirement,
    PathSpecification,
    SchemeRequirement,
    SchemeSpecification,
    SpecificationResult,
    requirements_from_uri,
)


class TestRequirementsFromUri:
    @pytest.mark.parametrize("uri", [None, "", "   "])
    def test_blank_uri_has_no_requirements(self, uri) -> None:
        assert requirements_from_uri(uri) == []

    def test_https_url_with_path(self) -> None:
        assert requirements_from_uri("https://Git.Corp.example/scm/team") == [
            SchemeRequirement(scheme="https"),
            HostnameRequirement(hostname="git.corp.example"),
            HostnamePortRequirement(hostname="git.corp.example", port=443),
            PathRequirement(path="/scm/team"),
        ]

    def test_explicit_port(self) -> None:
        requirements = requirements_from_uri("http://git.corp:7990")
        assert HostnamePortRequirement(hostname="git.corp", port=7990) in requirements
        assert not any(isinstance(r, PathRequirement) for r in requirements)

    def test_ssh_default_port(self) -> None:
        requirements = requirements_from_uri("ssh://git@git.corp/team/repo.git")
        assert HostnamePortRequirement(hostname="git.corp", port=22) in requirements

    def test_scheme_is_lowercased(self) -> None:
        assert requirements_from_uri("HTTPS://bitbucket.org")[0] == SchemeRequirement(scheme="https")

    @pytest.mark.parametrize("uri", ["https://[git.corp/scm", "http://[::1"])
    def test_unparseable_uri_has_no_requirements(self, uri) -> None:
        assert requirements_from_uri(uri) == []


class TestHostnameSpecification:
    def test_glob_include(self) -> None:
        spec = HostnameSpecification(includes="*.corp.example")
        assert spec.test(HostnameRequirement(hostname="git.corp.example")) is SpecificationResult.POSITIVE
        assert spec.test(HostnameRequirement(hostname="bitbucket.org")) is SpecificationResult.NEGATIVE

    def test_exclude_wins(self) -> None:
        spec = HostnameSpecification(includes="*", excludes="legacy.corp")
        assert spec.test(HostnameRequirement(hostname="legacy.corp")) is SpecificationResult.NEGATIVE

    def test_case_insensitive(self) -> None:
        spec = HostnameSpecification(includes="Git.Corp")
        assert spec.test(HostnameRequirement(hostname="git.corp")) is SpecificationResult.POSITIVE

    def test_empty_includes_accepts_everything_not_excluded(self) -> None:
        spec = HostnameSpecification(includes="", excludes="a.b")
        assert spec.test(HostnameRequirement(hostname="c.d")) is SpecificationResult.POSITIVE

    def test_other_requirement_is_unknown(self) -> None:
        spec = HostnameSpecification(includes="x")
        assert spec.test(SchemeRequirement(scheme="https")) is SpecificationResult.UNKNOWN


class TestOtherSpecifications:
    def test_hostname_port(self) -> None:
        spec = HostnamePortSpecification(includes="git.corp:7990")
        assert spec.test(HostnamePortRequirement(hostname="git.corp", port=7990)) is SpecificationResult.POSITIVE
        assert spec.test(HostnamePortRequirement(hostname="git.corp", port=443)) is SpecificationResult.NEGATIVE

    def test_scheme_list(self) -> None:
        spec = SchemeSpecification(schemes="https, ssh")
        assert spec.test(SchemeRequirement(scheme="ssh")) is SpecificationResult.POSITIVE
        assert spec.test(SchemeRequirement(scheme="http")) is SpecificationResult.NEGATIVE

    def test_path_case_sensitive_by_default(self) -> None:
        spec = PathSpecification(includes="/scm/*")
        assert spec.test(PathRequirement(path="/scm/team")) is SpecificationResult.POSITIVE
        assert spec.test(PathRequirement(path="/SCM/team")) is SpecificationResult.NEGATIVE

    def test_path_case_insensitive(self) -> None:
        spec = PathSpecification(includes="/scm/*", case_sensitive=False)
        assert spec.test(PathRequirement(path="/SCM/team")) is SpecificationResult.POSITIVE


class TestDomain:
    def test_global_domain_accepts_everything(self) -> None:
        assert GLOBAL_DOMAIN.is_global
        assert GLOBAL_DOMAIN.test(requirements_from_uri("https://anything.example/x"))

    def test_named_domain_is_not_global(self) -> None:
        assert not Domain(name="corp").is_global

    def test_restricted_domain(self) -> None:
        corp = Domain(
            name="corp",
            specifications=[
                HostnameSpecification(includes="*.corp.example"),
                SchemeSpecification(schemes="https"),
            ],
        )
        assert corp.test(requirements_from_uri("https://git.corp.example/scm"))
        assert not corp.test(requirements_from_uri("http://git.corp.example/scm"))
        assert not corp.test(requirements_from_uri("https://bitbucket.org"))

    def test_no_requirements_never_rejects(self) -> None:
        corp = Domain(name="corp", specifications=[HostnameSpecification(includes="x")])
        assert corp.test([])

    def test_specifications_round_trip_through_type(self) -> None:
        corp = Domain(name="corp", specifications=[SchemeSpecification(schemes="ssh")])
        restored = Domain.model_validate(corp.model_dump(mode="json"))
        assert restored == corp
