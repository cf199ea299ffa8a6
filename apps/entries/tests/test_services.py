"""
Tests for EntryService.

Test coverage:
- Daily serial numbers and the one-entry-per-supplier-per-day rule
- Item numbering before and after auction
- Version checks on update
- Delete guards for billed entries
"""
from datetime import date
from decimal import Decimal

from django.test import TestCase

from apps.audit.models import AuditLog
from apps.entries.exceptions import DuplicateEntryError, StaleEntryError
from apps.entries.models import Entry, EntryItem
from apps.entries.services import EntryService
from apps.entries.status import DRAFT, PENDING
from apps.invoicing.models import Invoice, SupplierInvoice, SupplierInvoiceEntry
from apps.parties.models import Buyer, Product, Supplier
from shared.exceptions import ConflictError, NotFoundError, ServiceValidationError

DAY = date(2026, 10, 19)


class EntryServiceTestCase(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.supplier = Supplier.objects.create(supplier_name='Green Valley Farms')
        cls.other_supplier = Supplier.objects.create(supplier_name='Hill Top Growers')
        cls.product = Product.objects.create(product_name='Tomato')
        cls.buyer = Buyer.objects.create(buyer_name='Ravi Traders')

    def setUp(self):
        self.service = EntryService()

    def make_entry(self, count=3, supplier=None, day=DAY):
        return self.service.create_entry(
            (supplier or self.supplier).id,
            [{'product_id': self.product.id, 'quantity': 10 + n} for n in range(count)],
            entry_date=day,
        )

    def payload(self, entry, changes=None):
        """Current items as update_entry input; ``changes`` maps item pk to field overrides."""
        rows = []
        for item in entry.items.all():
            row = {
                'id': item.pk,
                'product_id': item.product_id,
                'quantity': item.quantity,
                'rate_per_quantity': item.rate_per_quantity,
                'buyer_id': item.buyer_id,
                'sub_total': item.sub_total,
            }
            row.update((changes or {}).get(item.pk, {}))
            rows.append(row)
        return rows

    def numbers(self, entry):
        return {item.pk: item.sub_serial_number for item in entry.items.all()}


class CreateEntryTest(EntryServiceTestCase):

    def test_create_numbers_items_and_starts_pending(self):
        entry = self.make_entry(3)

        self.assertEqual(entry.serial_number, '1019-001')
        self.assertEqual(entry.status, PENDING)
        self.assertEqual(entry.total_quantities, Decimal('33'))
        self.assertEqual(entry.last_sub_serial_number, 3)
        self.assertEqual(sorted(self.numbers(entry).values()), [1, 2, 3])
        self.assertTrue(AuditLog.objects.filter(feature='Entries', action='Create').exists())

    def test_weighed_items_priced_by_weight_unless_told_otherwise(self):
        entry = self.service.create_entry(
            self.supplier.id,
            [
                {'product_id': self.product.id, 'quantity': 5, 'gross_weight': '40'},
                {'product_id': self.product.id, 'quantity': 5, 'gross_weight': '40', 'has_weight': False},
                {'product_id': self.product.id, 'quantity': 5},
            ],
            entry_date=DAY,
        )
        self.assertEqual(
            [item.has_weight for item in entry.items.all()],
            [True, False, False],
        )

    def test_update_without_toggle_keeps_stored_value(self):
        entry = self.make_entry(1)
        item = entry.items.get()
        EntryItem.objects.filter(pk=item.pk).update(gross_weight=Decimal('40'), has_weight=False)

        self.service.update_entry(entry.id, self.payload(entry, {item.pk: {'gross_weight': '40'}}))

        self.assertFalse(EntryItem.objects.get(pk=item.pk).has_weight)

    def test_serial_counter_continues_past_999(self):
        for number, name in (('999', 'Sunrise Agro'), ('1000', 'Riverbank Co-op')):
            Entry.objects.create(
                serial_number=f'1019-{number}', entry_date=DAY,
                supplier=Supplier.objects.create(supplier_name=name),
            )

        entry = self.make_entry(1)

        self.assertEqual(entry.serial_number, '1019-1001')

    def test_serials_increase_within_day(self):
        first = self.make_entry(1)
        second = self.make_entry(1, supplier=self.other_supplier)
        self.assertEqual(first.serial_number, '1019-001')
        self.assertEqual(second.serial_number, '1019-002')

    def test_serial_continues_after_delete(self):
        first = self.make_entry(1)
        second = self.make_entry(1, supplier=self.other_supplier)
        self.service.delete_entry(first.id)
        third_supplier = Supplier.objects.create(supplier_name='River Bend')
        third = self.make_entry(1, supplier=third_supplier)
        self.assertNotEqual(third.serial_number, second.serial_number)
        self.assertEqual(third.serial_number, '1019-003')

    def test_serials_restart_each_day(self):
        self.make_entry(1)
        entry = self.make_entry(1, day=date(2026, 10, 20))
        self.assertEqual(entry.serial_number, '1020-001')

    def test_second_entry_same_day_rejected(self):
        first = self.make_entry(1)
        with self.assertRaises(DuplicateEntryError) as ctx:
            self.make_entry(2)
        self.assertEqual(ctx.exception.extra['existing_entry_id'], first.id)
        self.assertIn('1019-001', str(ctx.exception))
        self.assertEqual(Entry.objects.count(), 1)

    def test_nett_weight_computed(self):
        entry = self.service.create_entry(
            self.supplier.id,
            [{'product_id': self.product.id, 'quantity': 1, 'gross_weight': '52.5', 'shute_weight': '2.5'}],
            entry_date=DAY,
        )
        self.assertEqual(entry.items.get().nett_weight, Decimal('50.000'))

    def test_missing_product_rejected(self):
        with self.assertRaises(ServiceValidationError):
            self.service.create_entry(self.supplier.id, [{'quantity': 1}], entry_date=DAY)

    def test_unknown_supplier(self):
        with self.assertRaises(NotFoundError):
            self.service.create_entry(999999, [], entry_date=DAY)


class UpdateEntryTest(EntryServiceTestCase):

    def test_removal_before_auction_renumbers(self):
        entry = self.make_entry(3)
        first, second, third = entry.items.all()

        rows = [row for row in self.payload(entry) if row['id'] != second.pk]
        entry = self.service.update_entry(entry.id, rows)

        self.assertEqual(self.numbers(entry), {first.pk: 1, third.pk: 2})
        self.assertEqual(entry.last_sub_serial_number, 2)

    def test_removal_after_auction_keeps_numbers(self):
        entry = self.make_entry(3)
        first, second, third = entry.items.all()
        entry = self.service.update_entry(
            entry.id,
            self.payload(entry, {first.pk: {'buyer_id': self.buyer.id, 'rate_per_quantity': 50}}),
        )

        rows = [row for row in self.payload(entry) if row['id'] != second.pk]
        entry = self.service.update_entry(entry.id, rows)

        self.assertEqual(self.numbers(entry), {first.pk: 1, third.pk: 3})

    def test_new_item_after_auction_continues_numbering(self):
        entry = self.make_entry(2)
        first, second = entry.items.all()
        entry = self.service.update_entry(
            entry.id,
            self.payload(entry, {first.pk: {'buyer_id': self.buyer.id, 'rate_per_quantity': 50}}),
        )
        rows = [row for row in self.payload(entry) if row['id'] != second.pk]
        rows.append({'id': 'temp_abc', 'product_id': self.product.id, 'quantity': 4})

        entry = self.service.update_entry(entry.id, rows)

        new_item = entry.items.exclude(pk=first.pk).get()
        self.assertEqual(new_item.sub_serial_number, 3)
        self.assertEqual(entry.last_sub_serial_number, 3)

    def test_sold_items_move_status_to_draft(self):
        entry = self.make_entry(1)
        item = entry.items.get()
        entry = self.service.update_entry(
            entry.id,
            self.payload(entry, {item.pk: {'buyer_id': self.buyer.id, 'rate_per_quantity': 50, 'sub_total': 500}}),
        )
        self.assertEqual(entry.status, DRAFT)
        self.assertEqual(entry.total_amount, Decimal('500.00'))

    def test_version_increments(self):
        entry = self.make_entry(1)
        updated = self.service.update_entry(entry.id, self.payload(entry), expected_version=entry.version)
        self.assertEqual(updated.version, entry.version + 1)

    def test_stale_version_rejected(self):
        entry = self.make_entry(1)
        self.service.update_entry(entry.id, self.payload(entry))
        with self.assertRaises(StaleEntryError) as ctx:
            self.service.update_entry(entry.id, self.payload(entry), expected_version=entry.version)
        self.assertEqual(ctx.exception.extra['current_version'], entry.version + 1)

    def test_links_kept_and_not_taken_from_input(self):
        entry = self.make_entry(1)
        item = entry.items.get()
        invoice = Invoice.objects.create(invoice_number='BI-TEST-001', buyer=self.buyer)
        EntryItem.objects.filter(pk=item.pk).update(buyer=self.buyer, rate_per_quantity=50, invoice=invoice)

        rows = self.payload(entry)
        rows[0]['invoice_id'] = None
        entry = self.service.update_entry(entry.id, rows)

        self.assertEqual(entry.items.get().invoice_id, invoice.id)

    def test_removing_billed_item_rejected(self):
        entry = self.make_entry(2)
        first, second = entry.items.all()
        invoice = Invoice.objects.create(invoice_number='BI-TEST-002', buyer=self.buyer)
        EntryItem.objects.filter(pk=second.pk).update(buyer=self.buyer, invoice=invoice)

        with self.assertRaises(ConflictError):
            self.service.update_entry(entry.id, [row for row in self.payload(entry) if row['id'] != second.pk])
        self.assertEqual(entry.items.count(), 2)


class DeleteEntryTest(EntryServiceTestCase):

    def test_delete_pending_entry(self):
        entry = self.make_entry(2)
        self.service.delete_entry(entry.id)
        self.assertFalse(Entry.objects.filter(pk=entry.pk).exists())
        self.assertFalse(EntryItem.objects.exists())

    def test_delete_with_buyer_invoice_rejected(self):
        entry = self.make_entry(1)
        invoice = Invoice.objects.create(invoice_number='BI-TEST-003', buyer=self.buyer)
        entry.items.update(buyer=self.buyer, invoice=invoice)
        with self.assertRaises(ConflictError):
            self.service.delete_entry(entry.id)

    def test_delete_with_supplier_invoice_rejected(self):
        entry = self.make_entry(1)
        invoice = SupplierInvoice.objects.create(invoice_number='SI-TEST-001', supplier=self.supplier)
        SupplierInvoiceEntry.objects.create(supplier_invoice=invoice, entry=entry)
        with self.assertRaises(ConflictError):
            self.service.delete_entry(entry.id)
        self.assertTrue(Entry.objects.filter(pk=entry.pk).exists())

    def test_delete_missing(self):
        with self.assertRaises(NotFoundError):
            self.service.delete_entry(123456)


class RefreshStatusTest(EntryServiceTestCase):

    def test_refresh_uses_supplier_link(self):
        entry = self.make_entry(1)
        invoice = SupplierInvoice.objects.create(invoice_number='SI-TEST-002', supplier=self.supplier)
        SupplierInvoiceEntry.objects.create(supplier_invoice=invoice, entry=entry)

        refreshed = self.service.refresh_status(entry)

        self.assertEqual(refreshed.status, 'Invoiced')
        self.assertEqual(refreshed.version, entry.version + 1)
