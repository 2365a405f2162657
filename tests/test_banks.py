"""Tests for bank-name inference."""

import pytest

from focusfi.banks import InstitutionRule, KNOWN_INSTITUTIONS, infer_bank_name


class TestKnownInstitutions:
    """Tests for the institution table."""

    def test_chase_business(self):
        """Test that business hints pick Chase Business."""
        assert infer_bank_name("Chase Business Checking", "Depository") == "Chase Business"
        assert infer_bank_name("CHASE INK CASH", "Credit") == "Chase Business"

    def test_chase_personal(self):
        """Test that other Chase accounts are personal."""
        assert infer_bank_name("Chase Personal Checking", "Depository") == "Chase Personal"
        assert infer_bank_name("JPMorgan Total Savings", "Depository") == "Chase Personal"

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("SELCO Share Savings", "Selco"),
            ("PayPal Balance", "PayPal"),
            ("Pay Pal Credit", "PayPal"),
            ("venmo", "Venmo"),
        ],
    )
    def test_other_institutions(self, name, expected):
        """Test case-insensitive keyword matching."""
        assert infer_bank_name(name, "Other") == expected

    def test_custom_table(self):
        """Test that the table can be extended by the caller."""
        rules = KNOWN_INSTITUTIONS + (InstitutionRule("Ally", ("ally",)),)
        assert infer_bank_name("Ally Online Savings", "Depository", rules) == "Ally"


class TestNameHeuristics:
    """Tests for the separator and account-type rules."""

    def test_separator_prefix(self):
        """Test that the text before a separator is the bank name."""
        assert infer_bank_name("Acme Credit Union - Savings", "Depository") == "Acme Credit Union"
        assert infer_bank_name("Local Bank | Joint", "Depository") == "Local Bank"
        assert infer_bank_name("Local Bank • Joint", "Depository") == "Local Bank"

    def test_separators_tried_in_order(self):
        """Test that ' - ' wins over ' / ' even when it appears later."""
        assert infer_bank_name("A / B - C", "Depository") == "A / B"

    def test_empty_prefix_is_skipped(self):
        """Test that a separator at the start does not give an empty name."""
        assert infer_bank_name(" - Joint", "Depository") == "Depository"

    def test_trailing_account_type_word(self):
        """Test that a trailing account-type word is dropped."""
        assert infer_bank_name("My Brokerage Account Investment", "Investment") == "My Brokerage Account"
        assert infer_bank_name("First  National   Checking", "Depository") == "First National"

    def test_single_type_word_uses_fallback(self):
        """Test that a lone account-type word is not a bank name."""
        assert infer_bank_name("Checking", "Depository") == "Depository"

    def test_unmatched_uses_fallback(self):
        """Test that nothing matching returns the fallback unchanged."""
        assert infer_bank_name("Everyday", "Checking") == "Checking"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
