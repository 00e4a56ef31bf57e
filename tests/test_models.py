import json
import unittest

from invoice_pdf.models import (
    REQUIRED_FIELDS,
    Attachments,
    LineItem,
    MalformedInputError,
    parse_line_items,
    validate_invoice_form,
)
from support import WIDGET, valid_form


class ValidateInvoiceFormTests(unittest.TestCase):
    def test_accepts_complete_form(self) -> None:
        invoice, error = validate_invoice_form(valid_form())

        self.assertIsNone(error)
        assert invoice is not None
        self.assertEqual(invoice.seller_name, "ACME Traders")
        self.assertEqual(invoice.billing_state_ut_code, "27")
        self.assertEqual(invoice.reverse_charge, "No")
        self.assertEqual(len(invoice.items), 1)
        self.assertEqual(invoice.filename, "INV-001.pdf")

    def test_required_fields_are_twenty_in_canonical_order(self) -> None:
        self.assertEqual(len(REQUIRED_FIELDS), 20)
        self.assertEqual(REQUIRED_FIELDS[0], "sellerName")
        self.assertEqual(REQUIRED_FIELDS[-1], "items")

    def test_lists_missing_fields_in_canonical_order(self) -> None:
        form = valid_form()
        del form["reverseCharge"]
        del form["sellerPAN"]
        form["billingName"] = ""

        invoice, error = validate_invoice_form(form)

        self.assertIsNone(invoice)
        self.assertEqual(
            error,
            (400, "Missing required fields: sellerPAN, billingName, reverseCharge"),
        )

    def test_empty_form_lists_every_field(self) -> None:
        _, error = validate_invoice_form({})

        assert error is not None
        self.assertEqual(error[0], 400)
        self.assertEqual(error[1], "Missing required fields: " + ", ".join(REQUIRED_FIELDS))

    def test_whitespace_value_counts_as_present(self) -> None:
        form = valid_form()
        form["orderNo"] = " "

        invoice, error = validate_invoice_form(form)

        self.assertIsNone(error)
        assert invoice is not None
        self.assertEqual(invoice.order_no, " ")

    def test_rejects_empty_item_list(self) -> None:
        invoice, error = validate_invoice_form(valid_form(items=[]))

        self.assertIsNone(invoice)
        self.assertEqual(error, (400, "Items are required."))

    def test_malformed_items_json_raises(self) -> None:
        form = valid_form()
        form["items"] = '[{"description": '

        with self.assertRaises(json.JSONDecodeError):
            validate_invoice_form(form)

    def test_malformed_items_json_raises_even_with_missing_fields(self) -> None:
        form = valid_form()
        form["items"] = "[{not json"
        del form["sellerName"]

        with self.assertRaises(json.JSONDecodeError):
            validate_invoice_form(form)

    def test_missing_items_is_listed_with_other_fields(self) -> None:
        form = valid_form()
        del form["items"]
        del form["invoiceNo"]

        _, error = validate_invoice_form(form)

        self.assertEqual(error, (400, "Missing required fields: invoiceNo, items"))

    def test_huge_integer_raises_malformed_input(self) -> None:
        with self.assertRaises(MalformedInputError) as ctx:
            validate_invoice_form(valid_form(items=[dict(WIDGET, quantity=10**400)]))

        self.assertIn("quantity", str(ctx.exception))

    def test_non_numeric_item_raises_malformed_input(self) -> None:
        bad = dict(WIDGET, unitPrice="ten")

        with self.assertRaises(MalformedInputError) as ctx:
            validate_invoice_form(valid_form(items=[bad]))

        self.assertIn("unitPrice", str(ctx.exception))


class ParseLineItemsTests(unittest.TestCase):
    def test_parses_items_in_order(self) -> None:
        items = parse_line_items(
            json.dumps([WIDGET, {"description": "Bolt", "unitPrice": "2.5", "quantity": 4, "discount": 0, "taxRate": 18}])
        )

        self.assertEqual([item.description for item in items], ["Widget", "Bolt"])
        self.assertEqual(items[1].unit_price, 2.5)
        self.assertEqual(items[1].tax_rate, 18.0)

    def test_negative_values_pass_through(self) -> None:
        (item,) = parse_line_items(json.dumps([dict(WIDGET, discount=-5)]))

        self.assertEqual(item.discount, -5.0)

    def test_missing_description_becomes_empty_text(self) -> None:
        entry = {k: v for k, v in WIDGET.items() if k != "description"}

        (item,) = parse_line_items(json.dumps([entry]))

        self.assertEqual(item.description, "")

    def test_rejects_non_array_root(self) -> None:
        with self.assertRaises(MalformedInputError):
            parse_line_items(json.dumps({"items": [WIDGET]}))

    def test_rejects_non_object_entry(self) -> None:
        with self.assertRaises(MalformedInputError):
            parse_line_items(json.dumps(["Widget"]))

    def test_rejects_missing_numeric_field(self) -> None:
        entry = {k: v for k, v in WIDGET.items() if k != "taxRate"}

        with self.assertRaises(MalformedInputError) as ctx:
            parse_line_items(json.dumps([entry]))

        self.assertIn("taxRate", str(ctx.exception))

    def test_rejects_numbers_too_large_for_a_float(self) -> None:
        for value in (10**400, "1e400"):
            with self.subTest(value=value):
                with self.assertRaises(MalformedInputError):
                    parse_line_items(json.dumps([dict(WIDGET, unitPrice=value)]))

    def test_rejects_booleans_nulls_and_non_finite_values(self) -> None:
        for value in (True, None, "NaN", "inf", [1]):
            with self.subTest(value=value):
                with self.assertRaises(MalformedInputError):
                    parse_line_items(json.dumps([dict(WIDGET, quantity=value)]))


class LineItemTests(unittest.TestCase):
    def test_total_applies_discount_then_tax(self) -> None:
        item = LineItem("Widget", unit_price=100, quantity=2, discount=10, tax_rate=5)

        self.assertAlmostEqual(item.total, 189.0)

    def test_zero_rates_leave_price_times_quantity(self) -> None:
        item = LineItem("Bolt", unit_price=2.5, quantity=4, discount=0, tax_rate=0)

        self.assertEqual(item.total, 10.0)


class AttachmentsTests(unittest.TestCase):
    def test_picks_first_non_empty_upload(self) -> None:
        attachments = Attachments.from_files(
            {"companyLogo": [b"", b"logo", b"other"], "unrelated": [b"x"]}
        )

        self.assertEqual(attachments.company_logo, b"logo")
        self.assertIsNone(attachments.signature_image)

    def test_no_files(self) -> None:
        self.assertEqual(Attachments.from_files({}), Attachments())


if __name__ == "__main__":
    unittest.main()
