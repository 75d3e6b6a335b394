"""Tests for statement assembly and field/enum parsing."""

from __future__ import annotations

from protoform.core.idl_parser import (
    Statement,
    assemble_statements,
    extract_file_options,
    parse_enum_value_statement,
    parse_field_statement,
    parse_idl,
    parse_messages,
)
from protoform.core.ir import EnumOption


class TestAssembleStatements:
    def test_leading_and_trailing_comments(self) -> None:
        body = """
  // @label First
  string a = 1; // @required
  string b = 2;
"""
        statements = list(assemble_statements(body))
        assert statements[0] == Statement(
            text="string a = 1;", leading=("@label First",), trailing=("@required",)
        )
        assert statements[1] == Statement(text="string b = 2;")

    def test_multi_line_statement(self) -> None:
        body = """
  string a = 1 [ // @label From comment
    (ui_label) = "A"
  ];
"""
        statements = list(assemble_statements(body))
        assert len(statements) == 1
        assert statements[0].text == 'string a = 1 [ (ui_label) = "A" ];'
        assert statements[0].trailing == ("@label From comment",)

    def test_comment_inside_open_statement_is_trailing(self) -> None:
        body = "string a = 1\n// @required\n;"
        statements = list(assemble_statements(body))
        assert statements[0].leading == ()
        assert statements[0].trailing == ("@required",)

    def test_reserved_and_oneof_are_discarded(self) -> None:
        body = """
  // @label Lost
  reserved 2, 3;
  oneof choice {
    string x = 4;
  }
  string b = 5;
"""
        statements = list(assemble_statements(body))
        assert [s.text for s in statements] == ["string b = 5;"]
        assert statements[0].leading == ()

    def test_several_statements_on_one_line(self) -> None:
        statements = list(assemble_statements("string a = 1; string b = 2; // @list"))
        assert [s.text for s in statements] == ["string a = 1;", "string b = 2;"]
        assert statements[0].trailing == ()
        assert statements[1].trailing == ("@list",)

    def test_comment_goes_to_statement_left_open(self) -> None:
        body = "string a = 1; string b = 2 [ // @label B\n  (ui_label) = \"Bee\"];"
        statements = list(assemble_statements(body))
        assert statements[0].trailing == ()
        assert statements[1].trailing == ("@label B",)

    def test_required_comment_marks_last_field_on_line(self) -> None:
        fields = parse_messages("message M { string a = 1; string b = 2; // @required\n}")["M"].fields
        assert fields[0].required is not True
        assert fields[1].required is True

    def test_unterminated_statement_is_dropped(self) -> None:
        assert list(assemble_statements("string a = 1")) == []


class TestParseFieldStatement:
    def test_simple_field(self) -> None:
        field = parse_field_statement(Statement(text="string title = 1;"))
        assert field is not None
        assert field.name == "title"
        assert field.type == "string"
        assert field.repeated is False

    def test_repeated_qualified_type(self) -> None:
        field = parse_field_statement(Statement(text="repeated common.v1.Tag tags = 3;"))
        assert field is not None
        assert field.type == "Tag"
        assert field.repeated is True

    def test_metadata_precedence(self) -> None:
        statement = Statement(
            text="string a = 1 [(ui_required) = false];",
            leading=("@required @label Leading",),
            trailing=("@label Trailing",),
        )
        field = parse_field_statement(statement)
        assert field is not None
        assert field.label == "Trailing"
        assert field.required is False

    def test_required_from_either_comment_position(self) -> None:
        leading = parse_field_statement(Statement(text="string a = 1;", leading=("@required",)))
        trailing = parse_field_statement(Statement(text="string a = 1;", trailing=("@required",)))
        assert leading is not None and leading.required is True
        assert trailing is not None and trailing.required is True

    def test_not_a_field(self) -> None:
        assert parse_field_statement(Statement(text="option java_package = \"x\";")) is None
        assert parse_field_statement(Statement(text="map<string, string> m = 1;")) is None


class TestParseEnumValueStatement:
    def test_defaults(self) -> None:
        value = parse_enum_value_statement(Statement(text="STATUS_ACTIVE = 1;"))
        assert value == EnumOption(label="Status Active", value="STATUS_ACTIVE")

    def test_unspecified_suffix_is_stripped_from_label(self) -> None:
        value = parse_enum_value_statement(Statement(text="ACTIVE_UNSPECIFIED = 0;"))
        assert value == EnumOption(label="Active", value="ACTIVE_UNSPECIFIED")

    def test_explicit_label_is_kept(self) -> None:
        value = parse_enum_value_statement(
            Statement(text="ACTIVE_UNSPECIFIED = 0;", trailing=("@label Not set",))
        )
        assert value == EnumOption(label="Not set", value="ACTIVE_UNSPECIFIED")

    def test_options_win_over_comments(self) -> None:
        value = parse_enum_value_statement(
            Statement(
                text='DONE = 2 [(ui_enum_value) = "done"];',
                trailing=("@value finished @label Finished",),
            )
        )
        assert value == EnumOption(label="Finished", value="done")

    def test_lowercase_name_is_rejected(self) -> None:
        assert parse_enum_value_statement(Statement(text="active = 1;")) is None


class TestParseIdl:
    def test_enum_example(self) -> None:
        document = parse_idl(
            """
enum Status {
  ACTIVE_UNSPECIFIED = 0;
  ACTIVE = 1; // @label "Active"
}
"""
        )
        assert document.enums["Status"].values == [
            EnumOption(label="Active", value="ACTIVE_UNSPECIFIED"),
            EnumOption(label="Active", value="ACTIVE"),
        ]

    def test_nested_messages_are_flattened(self) -> None:
        document = parse_idl(
            """
message Outer {
  Inner inner = 1;
  message Inner {
    string x = 1;
    enum Kind { KIND_A = 0; }
  }
  string after = 2;
}
"""
        )
        assert list(document.messages) == ["Outer", "Inner"]
        assert [f.name for f in document.messages["Outer"].fields] == ["inner", "after"]
        assert [f.name for f in document.messages["Inner"].fields] == ["x"]
        assert "Kind" in document.enums

    def test_block_comments_are_stripped(self) -> None:
        document = parse_idl(
            """
/* message Ghost { string g = 1; } */
message M {
  string a = 1; /* note */
  /* string hidden = 2; */
}
"""
        )
        assert list(document.messages) == ["M"]
        assert [f.name for f in document.messages["M"].fields] == ["a"]

    def test_unparsable_statement_is_skipped(self) -> None:
        document = parse_idl("message M { string = 1; string ok = 2; }")
        assert [f.name for f in document.messages["M"].fields] == ["ok"]

    def test_file_options(self, invoice_idl: str) -> None:
        document = parse_idl(invoice_idl)
        assert document.options["app_name"] == "Invoices"
        assert document.options["app_description"] == "Outgoing invoices"

    def test_option_inside_message_is_not_a_file_option(self) -> None:
        options = extract_file_options('message M { option (app_name) = "Inner"; }')
        assert options == {}
