"""
Unit tests for Variable models.

Tests API parsing, hidden-value detection, HCL escaping and substring search.
"""

from tests.fixtures import make_variable, variable_resource
from tfcops.models import (
    REDACTION_MARKER,
    SENSITIVE_SENTINEL,
    Variable,
    VariableCategory,
    escape_hcl,
)


class TestVariableParsing:
    """Tests for Variable.from_api."""

    def test_from_api_reads_attributes(self) -> None:
        """All attributes of a vars resource are parsed."""
        var = Variable.from_api(variable_resource(id="var-9", key="size", value="m5.large",
                                                  category=VariableCategory.ENV, hcl=False))

        assert var.id == "var-9"
        assert var.key == "size"
        assert var.value == "m5.large"
        assert var.category == VariableCategory.ENV
        assert var.hcl is False
        assert var.sensitive is False

    def test_from_api_null_value_becomes_empty(self) -> None:
        """Sensitive values read back as null are stored as an empty string."""
        var = Variable.from_api(variable_resource(value=None, sensitive=True))

        assert var.value == ""
        assert var.sensitive is True

    def test_value_whitespace_is_preserved(self) -> None:
        """Values are sent exactly as given."""
        var = Variable(key="motd", value="  hello  ")

        assert var.value == "  hello  "


class TestHiddenValues:
    """Tests for sensitive value handling."""

    def test_sensitive_flag_hides_value(self) -> None:
        """A sensitive variable is hidden."""
        assert make_variable(sensitive=True).is_hidden

    def test_sentinel_value_hides_value(self) -> None:
        """A value equal to the sentinel is hidden even without the flag."""
        assert make_variable(value=SENSITIVE_SENTINEL).is_hidden

    def test_plain_value_is_not_hidden(self) -> None:
        """A plain variable is visible."""
        assert not make_variable().is_hidden

    def test_display_value_redacts_hidden(self) -> None:
        """Hidden values are shown as the redaction marker."""
        assert make_variable(value="s3cr3t", sensitive=True).display_value() == REDACTION_MARKER
        assert make_variable(value="us-east-1").display_value() == "us-east-1"

    def test_redacted_copy_keeps_original(self) -> None:
        """redacted() returns a copy and leaves the original untouched."""
        var = make_variable(value=SENSITIVE_SENTINEL)

        redacted = var.redacted()

        assert redacted.value == REDACTION_MARKER
        assert var.value == SENSITIVE_SENTINEL


class TestHclEscaping:
    """Tests for HCL value escaping."""

    def test_escape_quotes_and_newlines(self) -> None:
        """Double quotes and newlines are escaped."""
        assert escape_hcl('{ a = "b" }\n') == '{ a = \\"b\\" }\\n'

    def test_hcl_value_is_escaped_in_payload(self) -> None:
        """HCL values are escaped in the request document."""
        var = make_variable(key="tags", value='{ team = "ops" }', hcl=True)

        attrs = var.to_api()["data"]["attributes"]

        assert attrs["value"] == '{ team = \\"ops\\" }'
        assert attrs["hcl"] is True

    def test_literal_value_is_sent_verbatim(self) -> None:
        """Non-HCL values are not escaped."""
        var = make_variable(value='say "hi"')

        assert var.to_api()["data"]["attributes"]["value"] == 'say "hi"'


class TestVariablePayload:
    """Tests for Variable.to_api."""

    def test_payload_includes_id_when_known(self) -> None:
        """Updates carry the variable ID."""
        payload = make_variable(id="var-7").to_api()

        assert payload["data"]["id"] == "var-7"
        assert payload["data"]["type"] == "vars"

    def test_payload_omits_id_for_new_variable(self) -> None:
        """Creates carry no ID."""
        payload = make_variable(id=None).to_api()

        assert "id" not in payload["data"]

    def test_payload_carries_category_and_flags(self) -> None:
        """Category and flags are sent as plain values."""
        attrs = make_variable(category=VariableCategory.ENV, sensitive=True).to_api()["data"]["attributes"]

        assert attrs["category"] == "env"
        assert attrs["sensitive"] is True


class TestVariableMatching:
    """Tests for Variable.matches."""

    def test_key_substring_matches(self) -> None:
        """A key containing the term matches."""
        assert make_variable(key="aws_region").matches(key_contains="region")

    def test_value_substring_matches(self) -> None:
        """A value containing the term matches."""
        assert make_variable(value="us-east-1").matches(value_contains="east")

    def test_empty_terms_never_match(self) -> None:
        """Empty search terms are ignored."""
        assert not make_variable().matches()

    def test_hidden_value_never_matches(self) -> None:
        """A value search cannot reveal a hidden value."""
        var = make_variable(value=SENSITIVE_SENTINEL)

        assert not var.matches(value_contains="TF_ENTERPRISE")

    def test_match_is_case_sensitive(self) -> None:
        """Substring search is case-sensitive."""
        assert not make_variable(key="Region").matches(key_contains="region")
