"""Shared pytest fixtures for protoform tests."""

from pathlib import Path

import pytest

from protoform.core.compiler import compile_idl
from protoform.core.ir import DomainFormSchema

INVOICE_IDL = """
syntax = "proto3";
package invoice;

option (common.app_name) = "Invoices";
option (app_description) = "Outgoing invoices";

enum Status {
  STATUS_UNSPECIFIED = 0;
  // @label Paid
  PAID = 1;
  OVERDUE = 2 [(ui_enum_label) = "Past due", (ui_enum_value) = "late"];
}

message LineItem {
  // @label SKU
  string sku = 1 [(ui.ui_pattern) = "^[A-Z]{3}-\\\\d+$"];
  int32 quantity = 2;
  double price = 3;
}

message InvoiceForm {
  // @label Invoice number* @unique
  string number = 1; // @list
  Status status = 2;
  repeated Status tags = 3;
  repeated LineItem items = 4 [(ui_label) = "Items"];
  Address billing = 5;
  bool paid = 6;
  string notes = 7 [(ui_widget) = "markdown"];
  string payload = 8 [(ui_widget) = "json"];
  string logo = 9 [(ui_widget) = "image"];
  repeated string photos = 10 [(ui_widget) = "image"];

  message Address {
    string city = 1 [(ui_required) = true];
    Geo geo = 2;
  }
}

message Geo {
  double lat = 1;
  double lng = 2;
}
"""


@pytest.fixture
def invoice_idl() -> str:
    """Return an IDL source exercising every field kind."""
    return INVOICE_IDL


@pytest.fixture
def invoice_schema() -> DomainFormSchema:
    """Return the compiled domain schema of the invoice IDL."""
    schema = compile_idl(INVOICE_IDL, "invoice")
    assert schema is not None
    return schema


@pytest.fixture
def proto_dir(tmp_path: Path) -> Path:
    """Create a proto directory with two apps and a shared type library."""
    directory = tmp_path / "proto"
    directory.mkdir()
    (directory / "invoice.proto").write_text(INVOICE_IDL)
    (directory / "user-profile.proto").write_text(
        """
message UserProfileForm {
  // @label Email @unique
  string email = 1;
  string display_name = 2;
}
"""
    )
    (directory / "common.proto").write_text(
        """
message ValidationRule {
  string type = 1;
}
"""
    )
    (directory / "README.md").write_text("not an IDL file")
    return directory
