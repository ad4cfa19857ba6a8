"""Tests for core domain models."""

from dataclasses import FrozenInstanceError

import pytest


@pytest.mark.core
class TestCredential:
    """Tests for Credential."""

    def test_valid_strictly_before_expiry(self) -> None:
        """A credential is unusable at its expiry instant."""
        from dashfeed.core.models import Credential

        credential = Credential(value="t", expires_at=100.0)

        assert credential.is_valid(99.9)
        assert not credential.is_valid(100.0)

    def test_is_frozen(self) -> None:
        """Credential should be immutable."""
        from dashfeed.core.models import Credential

        credential = Credential(value="t", expires_at=1.0)
        with pytest.raises(FrozenInstanceError):
            credential.value = "other"  # type: ignore[misc]


@pytest.mark.core
class TestDatasetView:
    """Tests for DatasetView validation."""

    def test_empty_key_rejected(self) -> None:
        """DatasetView requires a key."""
        from dashfeed.core.models import DatasetView

        with pytest.raises(ValueError, match="key"):
            DatasetView("", "Label", "ZOHO_VIEW_X", "x")

    def test_empty_view_env_rejected(self) -> None:
        """DatasetView requires the view id variable name."""
        from dashfeed.core.models import DatasetView

        with pytest.raises(ValueError, match="view_env"):
            DatasetView("x", "Label", "", "x")


@pytest.mark.core
class TestDataSource:
    """Tests for DataSource."""

    def test_with_endpoint_keeps_identity(self) -> None:
        """with_endpoint() only swaps the endpoint."""
        from dashfeed.core.models import DataSource

        source = DataSource("billing", "Billing", "lbb-billing-csv", "billing.csv")
        configured = source.with_endpoint("https://dash/api/billing")

        assert configured.endpoint == "https://dash/api/billing"
        assert configured.storage_key == source.storage_key
        assert source.endpoint is None


@pytest.mark.core
class TestFetchAllResult:
    """Tests for FetchAllResult."""

    def test_clean_result_has_no_notice(self) -> None:
        """No disclosures means no offline banner."""
        from dashfeed.core.models import FetchAllResult

        result = FetchAllResult(datasets={"a": "x"})

        assert not result.degraded
        assert result.offline_notice is None

    def test_any_disclosure_sets_notice(self) -> None:
        """One disclosure is enough for the banner."""
        from dashfeed.core.models import (
            OFFLINE_NOTICE,
            FallbackDisclosure,
            FallbackReason,
            FetchAllResult,
        )

        result = FetchAllResult(
            disclosures=[FallbackDisclosure("Pipeline", FallbackReason.OFFLINE)]
        )

        assert result.degraded
        assert result.offline_notice == OFFLINE_NOTICE == "Offline Mode -- Notify Admin"

    def test_reason_texts(self) -> None:
        """Reasons render as user-facing text."""
        from dashfeed.core.models import FallbackReason

        assert FallbackReason.NETWORK_FAILURE == "Network failure"
        assert FallbackReason.MISSING_ENDPOINT == "Missing endpoint configuration"
        assert FallbackReason.OFFLINE == "Client offline"


@pytest.mark.core
class TestExportJob:
    """Tests for ExportJob."""

    @pytest.mark.parametrize(
        ("state", "terminal"),
        [("pending", False), ("running", False), ("succeeded", True), ("failed", True)],
    )
    def test_is_terminal(self, state: str, terminal: bool) -> None:
        """Only succeeded and failed stop polling."""
        from dashfeed.core.models import ExportJob, JobState

        assert ExportJob(id="j", state=JobState(state)).is_terminal is terminal
