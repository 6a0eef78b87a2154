"""Unit tests for license and organizational identifier prefix validation."""

import pytest

from bagcheck.config import OtherIdPrefix
from bagcheck.validators import LicenseValidator, OrganizationIdentifierPrefixValidator, normalize_license


class TestLicenseValidator:
    """Test license URI checks."""

    @pytest.fixture
    def validator(self):
        return LicenseValidator([
            "http://creativecommons.org/licenses/by/4.0",
            "http://opensource.org/licenses/MIT/",
        ])

    def test_normalize(self):
        assert normalize_license("  http://example.org/license//  ") == "http://example.org/license"

    def test_supported_license(self, validator):
        assert validator.is_valid_license("http://creativecommons.org/licenses/by/4.0")

    def test_trailing_slash_ignored(self, validator):
        assert validator.is_valid_license("http://creativecommons.org/licenses/by/4.0/")
        assert validator.is_valid_license("http://opensource.org/licenses/MIT")

    def test_unsupported_license(self, validator):
        assert not validator.is_valid_license("http://example.org/my-license")

    def test_valid_uri(self, validator):
        assert validator.is_valid_uri("http://example.org/license")
        assert not validator.is_valid_uri("not a uri")
        assert not validator.is_valid_uri("no-scheme")

    def test_active_in_data_station(self):
        licenses = [
            {"uri": "http://creativecommons.org/licenses/by/4.0/", "active": True},
            {"uri": "http://opensource.org/licenses/MIT", "active": False},
        ]
        assert LicenseValidator.is_active_in("http://creativecommons.org/licenses/by/4.0", licenses)
        assert not LicenseValidator.is_active_in("http://opensource.org/licenses/MIT", licenses)
        assert not LicenseValidator.is_active_in("http://example.org/other", licenses)


class TestOrganizationIdentifierPrefixValidator:
    """Test per-user identifier prefixes."""

    @pytest.fixture
    def validator(self):
        return OrganizationIdentifierPrefixValidator([
            OtherIdPrefix(user="user001", prefix="u1:"),
            OtherIdPrefix(user="user002", prefix="u2:"),
        ])

    def test_matching_prefix(self, validator):
        assert validator.has_valid_prefix("user001", "u1:12345")

    def test_prefix_of_other_user(self, validator):
        assert not validator.has_valid_prefix("user001", "u2:12345")

    def test_unknown_user(self, validator):
        assert not validator.has_valid_prefix("user003", "u1:12345")

    def test_no_prefixes_configured(self):
        assert not OrganizationIdentifierPrefixValidator([]).has_valid_prefix("user001", "u1:1")
