"""Unit tests for signature attachment states."""
from types import SimpleNamespace

import pytest

from realstay.exceptions import IncompleteSignatureError
from realstay.signatures import UNSIGNED, Signed, SignatureStatus, Unsigned, from_columns, signature_claim

ADDRESS = "0x2c7536E3605D9C16a7a3D7b1898e529396a65c23"


class TestSignedReview:
    """Test the Unsigned | Signed variant."""

    def test_all_absent_is_unsigned(self):
        """Test empty columns map to UNSIGNED."""
        assert from_columns(None, None, None) is UNSIGNED
        assert from_columns("", "", "") is UNSIGNED
        assert UNSIGNED.as_columns() == {"wallet_address": None, "signature": None, "message_hash": None}

    def test_all_present_is_signed(self):
        """Test a full triple maps to Signed."""
        signed = from_columns(ADDRESS, "0xabc", "f" * 64)

        assert isinstance(signed, Signed)
        assert signed.as_columns() == {"wallet_address": ADDRESS, "signature": "0xabc", "message_hash": "f" * 64}

    @pytest.mark.parametrize(
        "columns",
        [(ADDRESS, None, None), (None, "0xabc", None), (ADDRESS, "0xabc", None), (None, "0xabc", "f" * 64)],
    )
    def test_partial_triple_is_rejected(self, columns):
        """Test a partial triple raises."""
        with pytest.raises(IncompleteSignatureError):
            from_columns(*columns)

    def test_signed_requires_every_field(self):
        """Test Signed refuses empty fields."""
        with pytest.raises(IncompleteSignatureError):
            Signed(wallet_address=ADDRESS, signature="", message_hash="f" * 64)

    def test_unsigned_instances_are_equal(self):
        """Test Unsigned is a value."""
        assert Unsigned() == UNSIGNED


class TestSignatureClaim:
    """Test detection of verifiable rows."""

    def test_dict_row(self):
        """Test claims are read from dicts."""
        assert signature_claim({"wallet_address": ADDRESS, "signature": "0xabc"}) == (ADDRESS, "0xabc")

    def test_object_row(self):
        """Test claims are read from attributes."""
        row = SimpleNamespace(wallet_address=ADDRESS, signature="0xabc", message_hash=None)

        assert signature_claim(row) == (ADDRESS, "0xabc")

    @pytest.mark.parametrize(
        "row",
        [
            {},
            {"wallet_address": ADDRESS, "signature": None},
            {"wallet_address": "", "signature": "0xabc"},
            SimpleNamespace(comment="no signature attributes"),
        ],
    )
    def test_missing_values_mean_unsigned(self, row):
        """Test a row missing either value is unsigned."""
        assert signature_claim(row) is None

    def test_status_values(self):
        """Test status wire values."""
        assert [s.value for s in SignatureStatus] == ["unsigned", "pending", "valid", "invalid"]
